"""TrustDimension enum and per-dimension scoring logic.

Eight dimensions contribute to the overall trust score. Each is scored
from the per-domain evidence summaries into [0, 1]; a dimension whose
required summary is absent falls back to the neutral score 0.5.

- Accuracy:            verified decision outcomes, blended with calibration
- Consistency:         stability of reasoning across comparable situations
- Transparency:        stated assumptions and alternatives considered
- Consent compliance:  actions kept within granted consent
- Harm record:         incident count, severity, and remediation
- Bias awareness:      detection and correction of cognitive biases
- Calibration:         stated confidence tracking actual correctness
- Scope adherence:     staying within the authorized scope
"""
from __future__ import annotations

import datetime
import logging
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any, Optional

from trust_protocol.evidence.models import (
    ConsentRecord,
    DecisionTraceSummary,
    HarmRecord,
    ReasoningProfile,
)
from trust_protocol.hashing import format_number, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)


class TrustDimension(str, Enum):
    """The eight facets of trustworthiness, in their canonical order."""

    ACCURACY = "accuracy"
    CONSISTENCY = "consistency"
    TRANSPARENCY = "transparency"
    CONSENT_COMPLIANCE = "consent_compliance"
    HARM_RECORD = "harm_record"
    BIAS_AWARENESS = "bias_awareness"
    CALIBRATION = "calibration"
    SCOPE_ADHERENCE = "scope_adherence"


class Trend(str, Enum):
    """Direction of movement of a score between observations."""

    IMPROVING = "improving"
    STABLE = "stable"
    DECLINING = "declining"


# Contribution weights for the overall score. Must sum to 1.0.
DIMENSION_WEIGHTS: dict[TrustDimension, float] = {
    TrustDimension.ACCURACY: 0.20,
    TrustDimension.CONSISTENCY: 0.10,
    TrustDimension.TRANSPARENCY: 0.15,
    TrustDimension.CONSENT_COMPLIANCE: 0.15,
    TrustDimension.HARM_RECORD: 0.15,
    TrustDimension.BIAS_AWARENESS: 0.05,
    TrustDimension.CALIBRATION: 0.10,
    TrustDimension.SCOPE_ADHERENCE: 0.10,
}

NEUTRAL_SCORE = 0.5
TREND_THRESHOLD = 0.05
TREND_WINDOW = 3


@dataclass(frozen=True)
class DimensionScore:
    """Score of one trust dimension at one calculation.

    Parameters
    ----------
    dimension:
        The dimension scored.
    score:
        Bounded score in [0, 1].
    confidence:
        Confidence in [0, 1] derived from evidence volume.
    evidence_count:
        Number of evidence sources behind the score.
    trend:
        Movement relative to the dimension's recent prior scores.
    last_updated:
        UTC datetime of the calculation.
    """

    dimension: TrustDimension
    score: float
    confidence: float
    evidence_count: int
    trend: Trend
    last_updated: datetime.datetime

    def canonical(self) -> str:
        """Return the fixed-delimiter text used in hashed payloads."""
        return ":".join(
            [
                self.dimension.value,
                format_number(self.score),
                format_number(self.confidence),
                format_number(self.evidence_count),
                self.trend.value,
                format_timestamp(self.last_updated),
            ]
        )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a plain dictionary."""
        return {
            "dimension": self.dimension.value,
            "score": self.score,
            "confidence": self.confidence,
            "evidence_count": self.evidence_count,
            "trend": self.trend.value,
            "last_updated": format_timestamp(self.last_updated),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DimensionScore":
        return cls(
            dimension=TrustDimension(data["dimension"]),
            score=float(data["score"]),
            confidence=float(data["confidence"]),
            evidence_count=int(data["evidence_count"]),
            trend=Trend(data["trend"]),
            last_updated=parse_timestamp(str(data["last_updated"])),
        )


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _neutral(dimension: TrustDimension, domain: str) -> float:
    logger.debug(
        "No %s evidence; %s falls back to neutral score %.1f",
        domain,
        dimension.value,
        NEUTRAL_SCORE,
    )
    return NEUTRAL_SCORE


# ------------------------------------------------------------------
# Per-dimension scoring
# ------------------------------------------------------------------


def score_accuracy(
    traces: Optional[DecisionTraceSummary],
    reasoning: Optional[ReasoningProfile],
) -> float:
    """Verified-outcome pass rate (60%) blended with calibration (40%)."""
    if traces is None:
        return _neutral(TrustDimension.ACCURACY, "decision trace")
    total = traces.total_traces or 1
    pass_rate = 1 - traces.verification_failures / total
    calibration = reasoning.calibration if reasoning is not None else NEUTRAL_SCORE
    return pass_rate * 0.6 + calibration * 0.4


def score_consistency(reasoning: Optional[ReasoningProfile]) -> float:
    if reasoning is None:
        return _neutral(TrustDimension.CONSISTENCY, "reasoning profile")
    return _clamp(reasoning.consistency)


def score_transparency(traces: Optional[DecisionTraceSummary]) -> float:
    """Stated assumptions and alternatives considered, equally weighted.

    Five alternatives per decision on average earns the full alternatives
    share.
    """
    if traces is None:
        return _neutral(TrustDimension.TRANSPARENCY, "decision trace")
    assumptions = min(1.0, traces.assumption_ratio)
    alternatives = min(1.0, traces.alternatives_considered_avg / 5)
    return assumptions * 0.5 + alternatives * 0.5


def score_consent_compliance(consent: Optional[ConsentRecord]) -> float:
    if consent is None:
        return _neutral(TrustDimension.CONSENT_COMPLIANCE, "consent ledger")
    total = consent.total_actions or 1
    within_bounds = 1 - consent.violations / total
    no_creep = 0.7 if consent.scope_creep_detected else 1.0
    return within_bounds * 0.7 + no_creep * 0.3


def score_harm_record(harm: Optional[HarmRecord]) -> float:
    """Start from 1, penalize severity and incident volume, credit remediation."""
    if harm is None:
        return _neutral(TrustDimension.HARM_RECORD, "harm ledger")
    severity_penalty = harm.max_severity / 6
    incident_penalty = min(1.0, harm.total_incidents / 10)
    base = 1 - severity_penalty * 0.5 - incident_penalty * 0.3
    return _clamp(base + harm.remediation_rate * 0.3)


def score_bias_awareness(reasoning: Optional[ReasoningProfile]) -> float:
    """Reward correcting detected biases; no detection earns a moderate 0.7.

    The raw number of biases found is not penalized beyond this.
    """
    if reasoning is None:
        return _neutral(TrustDimension.BIAS_AWARENESS, "reasoning profile")
    if reasoning.bias_count == 0:
        return 0.7
    return min(1.0, 0.5 + reasoning.growth_trajectory * 0.5)


def score_calibration(reasoning: Optional[ReasoningProfile]) -> float:
    if reasoning is None:
        return _neutral(TrustDimension.CALIBRATION, "reasoning profile")
    return _clamp(reasoning.calibration)


def score_scope_adherence(
    consent: Optional[ConsentRecord],
    traces: Optional[DecisionTraceSummary],
) -> float:
    """Violation-free share of consented actions, discounted on scope creep.

    Decision traces alone carry no scope signal and keep the neutral score.
    """
    if consent is None:
        domain = "consent ledger" if traces is not None else "consent ledger or decision trace"
        return _neutral(TrustDimension.SCOPE_ADHERENCE, domain)
    if consent.total_actions == 0:
        within_scope = 1.0
    else:
        within_scope = 1 - consent.violations / max(1, consent.total_actions)
    return within_scope * (0.8 if consent.scope_creep_detected else 1.0)


_Summaries = tuple[
    Optional[DecisionTraceSummary],
    Optional[ReasoningProfile],
    Optional[ConsentRecord],
    Optional[HarmRecord],
]

_SCORERS: dict[TrustDimension, Callable[[_Summaries], float]] = {
    TrustDimension.ACCURACY: lambda s: score_accuracy(s[0], s[1]),
    TrustDimension.CONSISTENCY: lambda s: score_consistency(s[1]),
    TrustDimension.TRANSPARENCY: lambda s: score_transparency(s[0]),
    TrustDimension.CONSENT_COMPLIANCE: lambda s: score_consent_compliance(s[2]),
    TrustDimension.HARM_RECORD: lambda s: score_harm_record(s[3]),
    TrustDimension.BIAS_AWARENESS: lambda s: score_bias_awareness(s[1]),
    TrustDimension.CALIBRATION: lambda s: score_calibration(s[1]),
    TrustDimension.SCOPE_ADHERENCE: lambda s: score_scope_adherence(s[2], s[0]),
}


# ------------------------------------------------------------------
# Confidence and trend
# ------------------------------------------------------------------


def evidence_count_to_confidence(count: int) -> float:
    """Map an evidence count to a confidence level (monotonic step function)."""
    if count <= 0:
        return 0.0
    if count <= 5:
        return 0.3
    if count <= 20:
        return 0.6
    if count <= 50:
        return 0.8
    return 0.95


def compute_trend(current_score: float, prior_scores: Sequence[float]) -> Trend:
    """Classify *current_score* against the mean of recent prior scores.

    Uses up to the last ``TREND_WINDOW`` prior scores. With fewer than two
    prior observations the trend is stable.

    Parameters
    ----------
    current_score:
        The newly computed score.
    prior_scores:
        Earlier scores of the same quantity, oldest first.

    Returns
    -------
    Trend
    """
    if len(prior_scores) < 2:
        return Trend.STABLE
    recent = list(prior_scores)[-TREND_WINDOW:]
    diff = current_score - sum(recent) / len(recent)
    if diff >= TREND_THRESHOLD:
        return Trend.IMPROVING
    if diff <= -TREND_THRESHOLD:
        return Trend.DECLINING
    return Trend.STABLE


def compute_dimension_scores(
    traces: Optional[DecisionTraceSummary],
    reasoning: Optional[ReasoningProfile],
    consent: Optional[ConsentRecord],
    harm: Optional[HarmRecord],
    evidence_counts: Mapping[TrustDimension, int],
    prior_scores: Mapping[TrustDimension, Sequence[float]],
    now: datetime.datetime,
) -> tuple[DimensionScore, ...]:
    """Score all eight dimensions.

    Parameters
    ----------
    traces, reasoning, consent, harm:
        The latest per-domain summaries; any may be None.
    evidence_counts:
        Evidence count per dimension. Missing dimensions count zero.
    prior_scores:
        Earlier scores per dimension, oldest first, used for the trend.
    now:
        Timestamp stamped on every entry as ``last_updated``.

    Returns
    -------
    tuple[DimensionScore, ...]
        Exactly one entry per TrustDimension, in canonical order.
    """
    summaries: _Summaries = (traces, reasoning, consent, harm)
    scores: list[DimensionScore] = []
    for dim in TrustDimension:
        score = _clamp(_SCORERS[dim](summaries))
        count = evidence_counts.get(dim, 0)
        scores.append(
            DimensionScore(
                dimension=dim,
                score=score,
                confidence=evidence_count_to_confidence(count),
                evidence_count=count,
                trend=compute_trend(score, prior_scores.get(dim, ())),
                last_updated=now,
            )
        )
    return tuple(scores)
