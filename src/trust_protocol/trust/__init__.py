"""Multi-dimensional trust scoring and hash-chained score history.

Trust is scored across eight dimensions, aggregated into an overall score
in [0, 1] that maps to one of six trust levels (UNTRUSTED through
EXEMPLARY), and recorded in an append-only hash chain.
"""
from __future__ import annotations

from trust_protocol.trust.calculator import ScoreCalculator, TrustScoreRecord
from trust_protocol.trust.chain import ChainVerification, RecordChain, record_payload
from trust_protocol.trust.dimensions import (
    DIMENSION_WEIGHTS,
    DimensionScore,
    Trend,
    TrustDimension,
)
from trust_protocol.trust.level import TrustLevel, derive_level
from trust_protocol.trust.policy import (
    DimensionRequirement,
    FailureCategory,
    PolicyCheck,
    PolicyFailure,
    TrustPolicy,
    evaluate_policy,
)

__all__ = [
    "DIMENSION_WEIGHTS",
    "ChainVerification",
    "DimensionRequirement",
    "DimensionScore",
    "FailureCategory",
    "PolicyCheck",
    "PolicyFailure",
    "RecordChain",
    "ScoreCalculator",
    "Trend",
    "TrustDimension",
    "TrustLevel",
    "TrustPolicy",
    "TrustScoreRecord",
    "derive_level",
    "evaluate_policy",
    "record_payload",
]
