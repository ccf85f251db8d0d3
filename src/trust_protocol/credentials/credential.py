"""TrustCredential issuance and verification.

Issuance copies the scores of one TrustScoreRecord into a flat credential,
gives it its own id, issuer, and validity window, and stores a SHA-256
content hash over every other field. Verification recomputes that hash and
compares; no key material is involved.

The hashed payload covers every dimension field, including each entry's
evidence count and last-updated time. Credentials issued by implementations
that hash only dimension, score, confidence, and trend do not verify here.

Expiry and tamper-evidence are separate checks. An expired credential can
still hash-verify, and acceptance requires both :func:`verify_credential`
and ``not`` :func:`is_credential_expired`.
"""
from __future__ import annotations

import datetime
import hmac
import json
import logging
from typing import Any, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from trust_protocol.hashing import (
    format_number,
    format_timestamp,
    generate_id,
    parse_timestamp,
    sha256,
    utc_now,
)
from trust_protocol.trust.calculator import DEFAULT_VALIDITY_HOURS, TrustScoreRecord
from trust_protocol.trust.dimensions import DimensionScore
from trust_protocol.trust.level import TrustLevel

logger = logging.getLogger(__name__)


class TrustCredential(BaseModel):
    """A portable, content-hash-bound export of one trust score record.

    Parameters
    ----------
    id:
        Unique credential identifier (distinct from the source record's).
    entity_id:
        The entity the credential describes.
    overall_score:
        Overall score copied from the source record.
    level:
        Trust level copied from the source record.
    dimensions:
        Dimension scores copied from the source record.
    domain_scores:
        Domain scores copied from the source record.
    generated_at:
        Generation time of the source record.
    valid_until:
        Expiry of this credential (its own window, not the record's).
    issuer_id:
        Identifier of the issuing party.
    verification_hash:
        Content hash over all other fields.
    """

    model_config = {"frozen": True}

    id: str
    entity_id: str
    overall_score: float
    level: TrustLevel
    dimensions: tuple[DimensionScore, ...]
    domain_scores: dict[str, float] = Field(default_factory=dict)
    generated_at: datetime.datetime
    valid_until: datetime.datetime
    issuer_id: str
    verification_hash: str = ""

    @field_validator("level", mode="before")
    @classmethod
    def parse_level_label(cls, value: Any) -> Any:
        if isinstance(value, str):
            return TrustLevel.from_label(value)
        return value

    @field_serializer("level")
    def serialize_level(self, level: TrustLevel) -> str:
        return level.label

    # ------------------------------------------------------------------
    # Checks
    # ------------------------------------------------------------------

    def verify(self) -> bool:
        """Return True if the stored hash matches the credential's content."""
        return verify_credential(self)

    def is_expired(self, now: Optional[datetime.datetime] = None) -> bool:
        """Return True if ``valid_until`` lies before *now* (default: current time)."""
        return is_credential_expired(self, now)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Serialize to the flat credential exchange format."""
        return {
            "id": self.id,
            "entity_id": self.entity_id,
            "overall_score": self.overall_score,
            "level": self.level.label,
            "dimensions": [d.to_dict() for d in self.dimensions],
            "domain_scores": dict(self.domain_scores),
            "generated_at": format_timestamp(self.generated_at),
            "valid_until": format_timestamp(self.valid_until),
            "issuer_id": self.issuer_id,
            "verification_hash": self.verification_hash,
        }

    def to_json(self) -> str:
        """Serialize to a JSON string in the credential exchange format."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrustCredential":
        """Reconstruct a credential from :meth:`to_dict` output.

        Raises
        ------
        KeyError
            If a required field is missing.
        ValueError
            If a field holds an invalid value.
        """
        return cls(
            id=str(data["id"]),
            entity_id=str(data["entity_id"]),
            overall_score=float(data["overall_score"]),
            level=TrustLevel.from_label(str(data["level"])),
            dimensions=tuple(DimensionScore.from_dict(d) for d in data["dimensions"]),
            domain_scores={
                str(k): float(v) for k, v in (data.get("domain_scores") or {}).items()
            },
            generated_at=parse_timestamp(str(data["generated_at"])),
            valid_until=parse_timestamp(str(data["valid_until"])),
            issuer_id=str(data["issuer_id"]),
            verification_hash=str(data.get("verification_hash") or ""),
        )

    @classmethod
    def from_json(cls, json_str: str) -> "TrustCredential":
        """Deserialize a credential from a JSON string.

        Raises
        ------
        ValueError
            If the JSON is malformed or a field is invalid.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise ValueError(f"Invalid JSON: {exc}") from exc
        if not isinstance(data, dict):
            raise ValueError(
                f"Credential must be a JSON object, got {type(data).__name__}."
            )
        try:
            return cls.from_dict(data)
        except KeyError as exc:
            raise ValueError(f"Credential is missing field {exc}") from exc
        except (TypeError, OverflowError) as exc:
            raise ValueError(f"Malformed credential: {exc}") from exc


# ------------------------------------------------------------------
# Content hash
# ------------------------------------------------------------------


def credential_content_hash(credential: TrustCredential) -> str:
    """Return the content hash of every field except ``verification_hash``."""
    dimensions = "|".join(sorted(d.canonical() for d in credential.dimensions))
    domains = "|".join(
        f"{key}:{format_number(credential.domain_scores[key])}"
        for key in sorted(credential.domain_scores)
    )
    payload = "\n".join(
        [
            credential.id,
            credential.entity_id,
            format_number(credential.overall_score),
            credential.level.label,
            dimensions,
            domains,
            format_timestamp(credential.generated_at),
            format_timestamp(credential.valid_until),
            credential.issuer_id,
        ]
    )
    return sha256(payload)


def verify_credential(credential: TrustCredential) -> bool:
    """Return True if *credential* has not been altered since issuance.

    Never raises; a tampered credential returns False.
    """
    expected = credential_content_hash(credential)
    valid = hmac.compare_digest(
        expected.encode("utf-8"), credential.verification_hash.encode("utf-8")
    )
    if not valid:
        logger.warning(
            "Credential %s for %s failed hash verification",
            credential.id,
            credential.entity_id,
        )
    return valid


def is_credential_expired(
    credential: TrustCredential,
    now: Optional[datetime.datetime] = None,
) -> bool:
    """Return True if ``valid_until`` lies strictly before *now*.

    A naive *now* is taken to be UTC.
    """
    current = now if now is not None else datetime.datetime.now(datetime.timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=datetime.timezone.utc)
    return credential.valid_until < current


# ------------------------------------------------------------------
# CredentialIssuer
# ------------------------------------------------------------------


class CredentialIssuer:
    """Issues TrustCredentials from scored records.

    Parameters
    ----------
    issuer_id:
        Identifier stamped on every credential this issuer produces.
    validity_hours:
        Default credential lifetime from issuance. May be negative, which
        yields an already-expired credential. Defaults to 24.

    Example
    -------
    ::

        issuer = CredentialIssuer("registry.example")
        credential = issuer.issue(record)
        assert credential.verify()
    """

    def __init__(
        self,
        issuer_id: str,
        validity_hours: float = DEFAULT_VALIDITY_HOURS,
    ) -> None:
        if not issuer_id:
            raise ValueError("issuer_id must not be empty.")
        self._issuer_id = issuer_id
        self._validity_hours = validity_hours

    @property
    def issuer_id(self) -> str:
        return self._issuer_id

    def issue(
        self,
        record: TrustScoreRecord,
        validity_hours: Optional[float] = None,
    ) -> TrustCredential:
        """Issue a credential for *record*.

        Parameters
        ----------
        record:
            The scored record to export.
        validity_hours:
            Overrides the issuer's default lifetime for this credential.

        Returns
        -------
        TrustCredential
            A credential carrying its verification hash.
        """
        hours = self._validity_hours if validity_hours is None else validity_hours
        unsigned = TrustCredential(
            id=generate_id(),
            entity_id=record.entity_id,
            overall_score=record.overall_score,
            level=record.level,
            dimensions=record.dimensions,
            domain_scores=dict(record.domain_scores),
            generated_at=record.generated_at,
            valid_until=utc_now() + datetime.timedelta(hours=hours),
            issuer_id=self._issuer_id,
        )
        credential = unsigned.model_copy(
            update={"verification_hash": credential_content_hash(unsigned)}
        )
        logger.info(
            "Issued credential %s for %s (level=%s, valid_until=%s)",
            credential.id,
            credential.entity_id,
            credential.level.label,
            format_timestamp(credential.valid_until),
        )
        return credential
