"""ScoreCalculator — assembles scored records from evidence and history.

A calculation turns the current evidence snapshot into a TrustScoreRecord:
eight dimension scores, their weighted overall score, and the derived
trust level. Records leave the calculator unsealed (``hash == ""``); the
record chain seals them when they are appended.
"""
from __future__ import annotations

import datetime
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Optional

from trust_protocol.evidence.models import (
    ConsentRecord,
    DecisionTraceSummary,
    EntityType,
    EvidenceSource,
    HarmRecord,
    ReasoningProfile,
)
from trust_protocol.hashing import (
    format_timestamp,
    generate_id,
    parse_timestamp,
    utc_now,
)
from trust_protocol.trust.dimensions import (
    DIMENSION_WEIGHTS,
    DimensionScore,
    TrustDimension,
    compute_dimension_scores,
)
from trust_protocol.trust.level import TrustLevel, derive_level

DEFAULT_VALIDITY_HOURS = 24


@dataclass(frozen=True)
class TrustScoreRecord:
    """One immutable snapshot of an entity's trust profile.

    Parameters
    ----------
    id:
        Unique record identifier.
    entity_id:
        The entity scored.
    entity_type:
        Kind of entity scored.
    overall_score:
        Weighted sum of the dimension scores.
    level:
        TrustLevel derived from ``overall_score``.
    dimensions:
        The eight dimension scores, in canonical order.
    evidence_sources:
        The evidence list in effect when the record was calculated.
    domain_scores:
        Per-domain breakdown. Reserved; always empty today.
    generated_at:
        UTC datetime of the calculation.
    valid_until:
        UTC datetime after which the record is stale.
    previous_hash:
        Hash of the preceding record, or the genesis sentinel.
    hash:
        This record's chain hash. Empty until the record is sealed.
    """

    id: str
    entity_id: str
    entity_type: EntityType
    overall_score: float
    level: TrustLevel
    dimensions: tuple[DimensionScore, ...]
    evidence_sources: tuple[EvidenceSource, ...]
    domain_scores: Mapping[str, float]
    generated_at: datetime.datetime
    valid_until: datetime.datetime
    previous_hash: str
    hash: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "dimensions", tuple(self.dimensions))
        object.__setattr__(self, "evidence_sources", tuple(self.evidence_sources))
        object.__setattr__(
            self, "domain_scores", MappingProxyType(dict(self.domain_scores))
        )

    @property
    def sealed(self) -> bool:
        """True once the record carries its chain hash."""
        return bool(self.hash)

    def dimension(self, dimension: TrustDimension) -> Optional[DimensionScore]:
        """Return the score entry for *dimension*, or None if absent."""
        for entry in self.dimensions:
            if entry.dimension == dimension:
                return entry
        return None

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary using interchange field names."""
        return {
            "id": self.id,
            "entity_id": self.entity_id,
            "entity_type": self.entity_type.value,
            "overall_score": self.overall_score,
            "level": self.level.label,
            "dimensions": [d.to_dict() for d in self.dimensions],
            "evidence_sources": [e.to_dict() for e in self.evidence_sources],
            "domain_scores": dict(self.domain_scores),
            "generated_at": format_timestamp(self.generated_at),
            "valid_until": format_timestamp(self.valid_until),
            "hash": self.hash,
            "previous_hash": self.previous_hash,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrustScoreRecord":
        """Reconstruct a record from :meth:`to_dict` output.

        Stored values are taken as-is; nothing is recomputed, so a tampered
        record deserializes and is caught by chain verification.
        """
        return cls(
            id=str(data["id"]),
            entity_id=str(data["entity_id"]),
            entity_type=EntityType(data["entity_type"]),
            overall_score=float(data["overall_score"]),
            level=TrustLevel.from_label(str(data["level"])),
            dimensions=tuple(DimensionScore.from_dict(d) for d in data["dimensions"]),
            evidence_sources=tuple(
                EvidenceSource.from_dict(e) for e in data.get("evidence_sources") or []
            ),
            domain_scores={
                str(k): float(v) for k, v in (data.get("domain_scores") or {}).items()
            },
            generated_at=parse_timestamp(str(data["generated_at"])),
            valid_until=parse_timestamp(str(data["valid_until"])),
            previous_hash=str(data["previous_hash"]),
            hash=str(data.get("hash") or ""),
        )


def weighted_overall(dimensions: Iterable[DimensionScore]) -> float:
    """Return the weighted sum of *dimensions* using DIMENSION_WEIGHTS."""
    return sum(d.score * DIMENSION_WEIGHTS[d.dimension] for d in dimensions)


class ScoreCalculator:
    """Builds unsealed TrustScoreRecords.

    Parameters
    ----------
    validity_hours:
        Lifetime of each record from its generation time. Defaults to 24.
    """

    def __init__(self, validity_hours: float = DEFAULT_VALIDITY_HOURS) -> None:
        self._validity = datetime.timedelta(hours=validity_hours)

    def calculate(
        self,
        entity_id: str,
        entity_type: EntityType,
        evidence_sources: Sequence[EvidenceSource],
        previous_hash: str,
        previous_records: Sequence[TrustScoreRecord] = (),
        traces: Optional[DecisionTraceSummary] = None,
        reasoning: Optional[ReasoningProfile] = None,
        consent: Optional[ConsentRecord] = None,
        harm: Optional[HarmRecord] = None,
    ) -> TrustScoreRecord:
        """Score the current evidence and return a new unsealed record.

        Every dimension's evidence count is the total number of evidence
        sources. Trends compare each dimension against its scores in
        *previous_records*.

        Parameters
        ----------
        entity_id:
            The entity being scored.
        entity_type:
            Kind of entity being scored.
        evidence_sources:
            Accumulated evidence, copied verbatim into the record.
        previous_hash:
            Hash of the record this one will follow in the chain.
        previous_records:
            Earlier records of the same entity, oldest first.
        traces, reasoning, consent, harm:
            Latest per-domain summaries; any may be None.

        Returns
        -------
        TrustScoreRecord
            A record with ``hash == ""``.
        """
        now = utc_now()
        evidence = tuple(evidence_sources)
        counts = {dim: len(evidence) for dim in TrustDimension}
        prior: dict[TrustDimension, list[float]] = {dim: [] for dim in TrustDimension}
        for record in previous_records:
            for entry in record.dimensions:
                prior[entry.dimension].append(entry.score)

        dimensions = compute_dimension_scores(
            traces, reasoning, consent, harm, counts, prior, now
        )
        overall = weighted_overall(dimensions)

        return TrustScoreRecord(
            id=generate_id(),
            entity_id=entity_id,
            entity_type=entity_type,
            overall_score=overall,
            level=derive_level(overall),
            dimensions=dimensions,
            evidence_sources=evidence,
            domain_scores={},
            generated_at=now,
            valid_until=now + self._validity,
            previous_hash=previous_hash,
        )
