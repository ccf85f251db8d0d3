"""TrustProfile — stateful façade over scoring, chaining, and credentials.

A profile accumulates evidence for one entity, appends a hash-chained
record on every calculation, issues and verifies credentials, evaluates
policies against its latest record, and round-trips its whole state
through a TSP-1.0 snapshot.

Instances are not thread-safe. Callers sharing a profile across threads
must serialize access themselves.
"""
from __future__ import annotations

import json
import logging
from enum import Enum
from typing import Any, Optional, Union

from trust_protocol.credentials.credential import (
    CredentialIssuer,
    TrustCredential,
    verify_credential,
)
from trust_protocol.errors import SchemaMismatchError, SnapshotFormatError
from trust_protocol.evidence.models import (
    ConsentRecord,
    DecisionTraceSummary,
    EntityType,
    EvidenceSource,
    HarmRecord,
    ReasoningProfile,
)
from trust_protocol.trust.calculator import (
    DEFAULT_VALIDITY_HOURS,
    ScoreCalculator,
    TrustScoreRecord,
)
from trust_protocol.trust.chain import ChainVerification, RecordChain
from trust_protocol.trust.dimensions import TREND_THRESHOLD, Trend, TrustDimension
from trust_protocol.trust.policy import PolicyCheck, TrustPolicy, evaluate_policy

logger = logging.getLogger(__name__)

SCHEMA = "TSP-1.0"

# Issuer id stamped on the credential derived during a policy check.
SELF_ISSUER_ID = "self"


class ProfileState(str, Enum):
    """Lifecycle state of a TrustProfile.

    EMPTY:        no evidence, no summaries, no history
    ACCUMULATING: evidence or summaries supplied, nothing calculated yet
    SCORED:       at least one record in the history
    """

    EMPTY = "empty"
    ACCUMULATING = "accumulating"
    SCORED = "scored"


class TrustProfile:
    """Trust profile of a single entity.

    Evidence sources accumulate in insertion order. Each of the four domain
    summaries holds only the most recently supplied value; a new summary
    replaces the old one rather than merging with it.

    Parameters
    ----------
    entity_id:
        The entity being scored.
    entity_type:
        Kind of entity. Accepts an EntityType or its string value.
    validity_hours:
        Lifetime of each calculated record. Defaults to 24.

    Example
    -------
    ::

        profile = TrustProfile("agent-7", EntityType.AGENT)
        profile.add_consent_record(ConsentRecord(total_actions=100, violations=5))
        record = profile.calculate()
        credential = profile.generate_credential("registry.example")
    """

    def __init__(
        self,
        entity_id: str,
        entity_type: Union[EntityType, str] = EntityType.AGENT,
        validity_hours: float = DEFAULT_VALIDITY_HOURS,
    ) -> None:
        if not entity_id:
            raise ValueError("entity_id must not be empty.")
        self._entity_id = entity_id
        self._entity_type = EntityType(entity_type)
        self._calculator = ScoreCalculator(validity_hours=validity_hours)
        self._evidence: list[EvidenceSource] = []
        self._traces: Optional[DecisionTraceSummary] = None
        self._reasoning: Optional[ReasoningProfile] = None
        self._consent: Optional[ConsentRecord] = None
        self._harm: Optional[HarmRecord] = None
        self._history = RecordChain()

    # ------------------------------------------------------------------
    # Identity and state
    # ------------------------------------------------------------------

    @property
    def entity_id(self) -> str:
        return self._entity_id

    @property
    def entity_type(self) -> EntityType:
        return self._entity_type

    @property
    def state(self) -> ProfileState:
        """Current lifecycle state."""
        if self._history:
            return ProfileState.SCORED
        has_input = self._evidence or any(
            s is not None for s in (self._traces, self._reasoning, self._consent, self._harm)
        )
        return ProfileState.ACCUMULATING if has_input else ProfileState.EMPTY

    @property
    def evidence_sources(self) -> tuple[EvidenceSource, ...]:
        return tuple(self._evidence)

    @property
    def decision_trace_summary(self) -> Optional[DecisionTraceSummary]:
        return self._traces

    @property
    def reasoning_profile(self) -> Optional[ReasoningProfile]:
        return self._reasoning

    @property
    def consent_record(self) -> Optional[ConsentRecord]:
        return self._consent

    @property
    def harm_record(self) -> Optional[HarmRecord]:
        return self._harm

    @property
    def latest(self) -> Optional[TrustScoreRecord]:
        """The most recent record, or None before the first calculation."""
        return self._history.latest

    # ------------------------------------------------------------------
    # Evidence intake
    # ------------------------------------------------------------------

    def add_evidence(self, source: EvidenceSource) -> None:
        """Append an evidence source. Sources are never removed."""
        self._evidence.append(source)

    def add_decision_trace_summary(self, summary: DecisionTraceSummary) -> None:
        """Replace the decision-trace summary."""
        self._traces = summary

    def add_reasoning_profile(self, profile: ReasoningProfile) -> None:
        """Replace the reasoning profile."""
        self._reasoning = profile

    def add_consent_record(self, record: ConsentRecord) -> None:
        """Replace the consent record."""
        self._consent = record

    def add_harm_record(self, record: HarmRecord) -> None:
        """Replace the harm record."""
        self._harm = record

    # ------------------------------------------------------------------
    # Calculation
    # ------------------------------------------------------------------

    def calculate(self) -> TrustScoreRecord:
        """Score the current evidence and append the result. See :meth:`recalculate`."""
        return self.recalculate()

    def recalculate(self) -> TrustScoreRecord:
        """Score the current evidence and append a new sealed record.

        Past records are never updated; every call appends.

        Returns
        -------
        TrustScoreRecord
            The sealed record, now the chain head.
        """
        unsealed = self._calculator.calculate(
            entity_id=self._entity_id,
            entity_type=self._entity_type,
            evidence_sources=self._evidence,
            previous_hash=self._history.head_hash,
            previous_records=self._history,
            traces=self._traces,
            reasoning=self._reasoning,
            consent=self._consent,
            harm=self._harm,
        )
        record = self._history.append(unsealed)
        logger.info(
            "Appended trust record %s for %s (score=%.4f, level=%s, length=%d)",
            record.id,
            self._entity_id,
            record.overall_score,
            record.level.label,
            len(self._history),
        )
        return record

    def get_history(self) -> tuple[TrustScoreRecord, ...]:
        """Return every record, oldest first."""
        return self._history[:]

    def verify(self) -> ChainVerification:
        """Verify the integrity of the whole history chain."""
        return self._history.verify()

    # ------------------------------------------------------------------
    # Credentials
    # ------------------------------------------------------------------

    def generate_credential(
        self,
        issuer_id: str,
        validity_hours: Optional[float] = None,
    ) -> TrustCredential:
        """Issue a credential for the latest record.

        Calculates first when the history is empty, so a credential always
        has an underlying record.

        Parameters
        ----------
        issuer_id:
            Identifier of the issuing party.
        validity_hours:
            Credential lifetime. Defaults to 24 hours.
        """
        record = self._history.latest or self.recalculate()
        issuer = CredentialIssuer(issuer_id)
        return issuer.issue(record, validity_hours=validity_hours)

    @staticmethod
    def verify_credential(credential: TrustCredential) -> bool:
        """Return True if *credential* has not been altered since issuance."""
        return verify_credential(credential)

    # ------------------------------------------------------------------
    # Policy and thresholds
    # ------------------------------------------------------------------

    def check_policy(self, policy: TrustPolicy) -> PolicyCheck:
        """Evaluate *policy* against the latest record.

        With an empty history the check fails and reports every required
        dimension as unmet; it does not calculate.
        """
        latest = self._history.latest
        credential_id = ""
        if latest is not None:
            credential_id = CredentialIssuer(SELF_ISSUER_ID).issue(latest).id
        return evaluate_policy(policy, latest, credential_id=credential_id)

    def meets_minimum(self, min_score: float) -> bool:
        """Return True if the latest overall score is at least *min_score*."""
        latest = self._history.latest
        if latest is None:
            return False
        return latest.overall_score >= min_score

    def get_trend(self, dimension: Optional[TrustDimension] = None) -> Trend:
        """Compare the two most recent records.

        Parameters
        ----------
        dimension:
            Compare this dimension's score. If None, compare overall scores.

        Returns
        -------
        Trend
            STABLE when fewer than two records exist.
        """
        if len(self._history) < 2:
            return Trend.STABLE
        previous, last = self._history[-2], self._history[-1]
        diff = _trend_value(last, dimension) - _trend_value(previous, dimension)
        if diff >= TREND_THRESHOLD:
            return Trend.IMPROVING
        if diff <= -TREND_THRESHOLD:
            return Trend.DECLINING
        return Trend.STABLE

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> dict[str, Any]:
        """Return the TSP-1.0 snapshot of the whole profile."""
        return {
            "schema": SCHEMA,
            "entity_id": self._entity_id,
            "entity_type": self._entity_type.value,
            "evidence_sources": [e.to_dict() for e in self._evidence],
            "clearpath_summary": self._traces.to_dict() if self._traces else None,
            "cognitive_profile": self._reasoning.to_dict() if self._reasoning else None,
            "consent_record": self._consent.to_dict() if self._consent else None,
            "harm_record": self._harm.to_dict() if self._harm else None,
            "history": [r.to_dict() for r in self._history],
        }

    def to_json(self) -> str:
        """Serialize the snapshot to a JSON string."""
        return json.dumps(self.to_dict(), indent=2)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TrustProfile":
        """Restore a profile from a TSP-1.0 snapshot.

        The history is restored as stored; call :meth:`verify` to audit it.

        Raises
        ------
        SchemaMismatchError
            If the snapshot's ``schema`` tag is missing or not ``"TSP-1.0"``.
        SnapshotFormatError
            If the snapshot is otherwise malformed.
        """
        if not isinstance(data, dict):
            raise SnapshotFormatError(
                f"Snapshot must be a JSON object, got {type(data).__name__}."
            )
        if data.get("schema") != SCHEMA:
            raise SchemaMismatchError(SCHEMA, data.get("schema"))

        try:
            profile = cls(str(data["entity_id"]), EntityType(data["entity_type"]))
            profile._evidence = [
                EvidenceSource.from_dict(e) for e in data.get("evidence_sources") or []
            ]
            profile._traces = _optional(DecisionTraceSummary, data.get("clearpath_summary"))
            profile._reasoning = _optional(ReasoningProfile, data.get("cognitive_profile"))
            profile._consent = _optional(ConsentRecord, data.get("consent_record"))
            profile._harm = _optional(HarmRecord, data.get("harm_record"))
            profile._history = RecordChain(
                TrustScoreRecord.from_dict(r) for r in data.get("history") or []
            )
        except (KeyError, TypeError, ValueError, OverflowError) as exc:
            raise SnapshotFormatError(f"Malformed {SCHEMA} snapshot: {exc}") from exc
        return profile

    @classmethod
    def from_json(cls, json_str: str) -> "TrustProfile":
        """Restore a profile from a JSON snapshot string.

        Raises
        ------
        SchemaMismatchError
            If the snapshot's ``schema`` tag is missing or foreign.
        SnapshotFormatError
            If the text is not valid JSON or the snapshot is malformed.
        """
        try:
            data = json.loads(json_str)
        except json.JSONDecodeError as exc:
            raise SnapshotFormatError(f"Invalid JSON: {exc}") from exc
        return cls.from_dict(data)


def _trend_value(record: TrustScoreRecord, dimension: Optional[TrustDimension]) -> float:
    if dimension is None:
        return record.overall_score
    entry = record.dimension(dimension)
    return entry.score if entry is not None else 0.0


def _optional(summary_type: Any, data: Optional[dict[str, Any]]) -> Any:
    return summary_type.from_dict(data) if data is not None else None
