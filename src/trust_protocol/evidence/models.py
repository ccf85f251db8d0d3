"""Evidence source and per-domain summary types.

All types are frozen dataclasses. ``to_dict`` / ``from_dict`` use the field
names of the TSP-1.0 interchange format, which is why the decision-trace and
reasoning-profile summaries keep their upstream producer names
(``clearpath_summary``, ``cognitive_profile``) on the wire.
"""
from __future__ import annotations

import datetime
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from trust_protocol.hashing import format_timestamp, parse_timestamp, utc_now


class EntityType(str, Enum):
    """Kind of entity a trust profile describes."""

    AGENT = "agent"
    HUMAN = "human"
    SYSTEM = "system"


class EvidenceType(str, Enum):
    """Category tag of an evidence attestation.

    DECISION_TRACE:
        Derived from decision-trace logs.
    REASONING_PROFILE:
        Derived from the reasoning-consistency profiler.
    CONSENT_LEDGER:
        Derived from the consent / authorization ledger.
    HARM_LEDGER:
        Derived from the harm / incident ledger.
    EXTERNAL_ATTESTATION:
        Supplied by a third party.
    """

    DECISION_TRACE = "clearpath_trace"
    REASONING_PROFILE = "cognitive_ledger"
    CONSENT_LEDGER = "consent_ledger"
    HARM_LEDGER = "harm_trace"
    EXTERNAL_ATTESTATION = "external_attestation"


@dataclass(frozen=True)
class EvidenceSource:
    """One timestamped attestation contributing to a trust assessment.

    Parameters
    ----------
    type:
        Category tag of the attestation.
    source_id:
        Opaque identifier of the attestation at its producer.
    weight:
        Relative weight in [0, 1].
    timestamp:
        UTC datetime of the attestation. Defaults to now.
    """

    type: EvidenceType
    source_id: str
    weight: float = 1.0
    timestamp: datetime.datetime = field(default_factory=utc_now)

    def __post_init__(self) -> None:
        if not 0.0 <= self.weight <= 1.0:
            raise ValueError(
                f"EvidenceSource.weight must be within [0, 1], got {self.weight!r}."
            )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary."""
        return {
            "type": self.type.value,
            "source_id": self.source_id,
            "timestamp": format_timestamp(self.timestamp),
            "weight": self.weight,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "EvidenceSource":
        """Reconstruct an EvidenceSource from :meth:`to_dict` output."""
        return cls(
            type=EvidenceType(data["type"]),
            source_id=str(data["source_id"]),
            weight=float(data["weight"]),
            timestamp=parse_timestamp(str(data["timestamp"])),
        )


@dataclass(frozen=True)
class DecisionTraceSummary:
    """Summary of an entity's decision traces.

    Parameters
    ----------
    total_traces:
        Number of decision traces examined.
    verification_failures:
        Traces whose outcome failed verification.
    assumption_ratio:
        Share of decisions that stated their assumptions explicitly.
    alternatives_considered_avg:
        Mean number of alternatives weighed per decision.
    """

    total_traces: int
    verification_failures: int
    assumption_ratio: float = 0.0
    alternatives_considered_avg: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_traces": self.total_traces,
            "verification_failures": self.verification_failures,
            "assumption_ratio": self.assumption_ratio,
            "alternatives_considered_avg": self.alternatives_considered_avg,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DecisionTraceSummary":
        return cls(
            total_traces=int(data["total_traces"]),
            verification_failures=int(data["verification_failures"]),
            assumption_ratio=float(data.get("assumption_ratio") or 0.0),
            alternatives_considered_avg=float(
                data.get("alternatives_considered_avg") or 0.0
            ),
        )


@dataclass(frozen=True)
class ReasoningProfile:
    """Output of the reasoning-consistency profiler.

    Parameters
    ----------
    calibration:
        How well stated confidence tracks actual correctness, in [0, 1].
    bias_count:
        Number of cognitive biases detected.
    growth_trajectory:
        Degree to which detected biases are being corrected over time.
    consistency:
        Stability of reasoning across comparable situations, in [0, 1].
    """

    calibration: float = 0.5
    bias_count: int = 0
    growth_trajectory: float = 0.0
    consistency: float = 0.5

    def to_dict(self) -> dict[str, Any]:
        return {
            "calibration": self.calibration,
            "bias_count": self.bias_count,
            "growth_trajectory": self.growth_trajectory,
            "consistency": self.consistency,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ReasoningProfile":
        calibration = data.get("calibration")
        return cls(
            calibration=0.5 if calibration is None else float(calibration),
            bias_count=int(data.get("bias_count") or 0),
            growth_trajectory=float(data.get("growth_trajectory") or 0.0),
            consistency=float(data["consistency"]),
        )


@dataclass(frozen=True)
class ConsentRecord:
    """Summary of the consent / authorization ledger."""

    total_actions: int
    violations: int
    scope_creep_detected: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_actions": self.total_actions,
            "violations": self.violations,
            "scope_creep_detected": self.scope_creep_detected,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConsentRecord":
        return cls(
            total_actions=int(data["total_actions"]),
            violations=int(data["violations"]),
            scope_creep_detected=bool(data.get("scope_creep_detected", False)),
        )


@dataclass(frozen=True)
class HarmRecord:
    """Summary of the harm / incident ledger.

    ``max_severity`` is on a 0 – 6 scale.
    """

    total_incidents: int = 0
    max_severity: float = 0.0
    remediation_rate: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "total_incidents": self.total_incidents,
            "max_severity": self.max_severity,
            "remediation_rate": self.remediation_rate,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "HarmRecord":
        return cls(
            total_incidents=int(data.get("total_incidents") or 0),
            max_severity=float(data.get("max_severity") or 0.0),
            remediation_rate=float(data.get("remediation_rate") or 0.0),
        )
