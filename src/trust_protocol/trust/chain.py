"""RecordChain — append-only, hash-chained history of trust score records.

Each record's hash is the SHA-256 digest of its predecessor's hash followed
by the record's canonical payload. The first record links to the genesis
sentinel. Appending is the only mutation the chain supports.
"""
from __future__ import annotations

import dataclasses
import logging
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Optional, overload

from trust_protocol.evidence.models import EvidenceSource
from trust_protocol.hashing import (
    GENESIS_HASH,
    chain_hash,
    format_number,
    format_timestamp,
)
from trust_protocol.trust.calculator import TrustScoreRecord

logger = logging.getLogger(__name__)


def _evidence_payload(source: EvidenceSource) -> str:
    return ":".join(
        [
            source.type.value,
            source.source_id,
            format_timestamp(source.timestamp),
            format_number(source.weight),
        ]
    )


def record_payload(record: TrustScoreRecord) -> str:
    """Return the canonical payload text of *record*.

    Dimension, evidence, and domain-score entries are sorted before joining,
    so their insertion order never affects the digest. The record's own
    ``hash`` and ``previous_hash`` are not part of the payload.
    """
    dimensions = ";".join(sorted(d.canonical() for d in record.dimensions))
    sources = ";".join(sorted(_evidence_payload(e) for e in record.evidence_sources))
    domains = ";".join(
        f"{key}:{format_number(record.domain_scores[key])}"
        for key in sorted(record.domain_scores)
    )
    return "\n".join(
        [
            record.id,
            record.entity_id,
            record.entity_type.value,
            format_number(record.overall_score),
            record.level.label,
            dimensions,
            sources,
            domains,
            format_timestamp(record.generated_at),
            format_timestamp(record.valid_until),
        ]
    )


def seal_hash(record: TrustScoreRecord) -> str:
    """Return the chain hash *record* must carry given its previous_hash."""
    return chain_hash(record.previous_hash, record_payload(record))


@dataclass(frozen=True)
class ChainVerification:
    """Outcome of walking a record chain.

    Parameters
    ----------
    valid:
        True when every link and every stored hash checks out.
    records_checked:
        Number of records walked (the whole chain).
    first_invalid_index:
        Position of the first bad record, or None when valid.
    """

    valid: bool
    records_checked: int
    first_invalid_index: Optional[int] = None

    def __bool__(self) -> bool:
        return self.valid


class RecordChain(Sequence[TrustScoreRecord]):
    """Append-only sequence of sealed TrustScoreRecords.

    Supports read-only sequence access (indexing, slicing, iteration,
    ``len``). New records enter only through :meth:`append`.

    Parameters
    ----------
    records:
        Already-sealed records to restore, oldest first. They are taken as
        stored and not re-verified; call :meth:`verify` to audit them.
    """

    def __init__(self, records: Iterable[TrustScoreRecord] = ()) -> None:
        self._records: list[TrustScoreRecord] = list(records)

    # ------------------------------------------------------------------
    # Sequence protocol
    # ------------------------------------------------------------------

    @overload
    def __getitem__(self, index: int) -> TrustScoreRecord: ...

    @overload
    def __getitem__(self, index: slice) -> tuple[TrustScoreRecord, ...]: ...

    def __getitem__(self, index):  # type: ignore[no-untyped-def]
        if isinstance(index, slice):
            return tuple(self._records[index])
        return self._records[index]

    def __len__(self) -> int:
        return len(self._records)

    # ------------------------------------------------------------------
    # Chain head
    # ------------------------------------------------------------------

    @property
    def latest(self) -> Optional[TrustScoreRecord]:
        """The most recently appended record, or None when empty."""
        return self._records[-1] if self._records else None

    @property
    def head_hash(self) -> str:
        """Hash the next appended record must link to."""
        latest = self.latest
        return latest.hash if latest is not None else GENESIS_HASH

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def append(self, record: TrustScoreRecord) -> TrustScoreRecord:
        """Seal *record* and append it to the chain.

        Parameters
        ----------
        record:
            An unsealed record whose ``previous_hash`` equals
            :attr:`head_hash`.

        Returns
        -------
        TrustScoreRecord
            The sealed record, as stored.

        Raises
        ------
        ValueError
            If the record is already sealed or does not link to the head.
        """
        if record.sealed:
            raise ValueError(f"Record {record.id!r} is already sealed.")
        if record.previous_hash != self.head_hash:
            raise ValueError(
                f"Record {record.id!r} links to {record.previous_hash!r}, "
                f"but the chain head is {self.head_hash!r}."
            )
        sealed = dataclasses.replace(record, hash=seal_hash(record))
        self._records.append(sealed)
        return sealed

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify(self) -> ChainVerification:
        """Walk the chain from genesis and recompute every hash.

        Any broken link or altered payload invalidates the whole chain.
        The walk always covers every record.

        Returns
        -------
        ChainVerification
        """
        expected_previous = GENESIS_HASH
        first_invalid: Optional[int] = None
        for index, record in enumerate(self._records):
            link_ok = record.previous_hash == expected_previous
            hash_ok = record.hash == seal_hash(record)
            if first_invalid is None and not (link_ok and hash_ok):
                first_invalid = index
                logger.warning(
                    "Hash chain broken at record %d (%s): link %s, payload %s",
                    index,
                    record.id,
                    "ok" if link_ok else "mismatch",
                    "ok" if hash_ok else "mismatch",
                )
            expected_previous = record.hash
        return ChainVerification(
            valid=first_invalid is None,
            records_checked=len(self._records),
            first_invalid_index=first_invalid,
        )
