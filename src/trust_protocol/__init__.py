"""trust-protocol — multi-dimensional trust profiles with tamper-evident history.

Public API
----------
The stable public surface is everything exported from this module.
Anything inside submodules not re-exported here is considered private
and may change without notice.

Example
-------
>>> import trust_protocol
>>> trust_protocol.__version__
'0.1.0'

Quick start
-----------
::

    from trust_protocol import (
        TrustProfile, EntityType, EvidenceSource, EvidenceType,
        ConsentRecord, TrustPolicy,
    )

    profile = TrustProfile("agent-7", EntityType.AGENT)
    profile.add_evidence(EvidenceSource(EvidenceType.CONSENT_LEDGER, "ledger-42"))
    profile.add_consent_record(ConsentRecord(total_actions=100, violations=5))
    record = profile.calculate()
    credential = profile.generate_credential(issuer_id="registry.example")
    assert TrustProfile.verify_credential(credential)
"""
from __future__ import annotations

__version__: str = "0.1.0"

# ------------------------------------------------------------------
# Evidence
# ------------------------------------------------------------------
from trust_protocol.evidence.models import (
    ConsentRecord,
    DecisionTraceSummary,
    EntityType,
    EvidenceSource,
    EvidenceType,
    HarmRecord,
    ReasoningProfile,
)

# ------------------------------------------------------------------
# Scoring, chain, and policy
# ------------------------------------------------------------------
from trust_protocol.trust.calculator import ScoreCalculator, TrustScoreRecord
from trust_protocol.trust.chain import ChainVerification, RecordChain
from trust_protocol.trust.dimensions import (
    DIMENSION_WEIGHTS,
    DimensionScore,
    Trend,
    TrustDimension,
)
from trust_protocol.trust.level import LEVEL_THRESHOLDS, TrustLevel, derive_level
from trust_protocol.trust.policy import (
    DimensionRequirement,
    FailureCategory,
    PolicyCheck,
    PolicyFailure,
    TrustPolicy,
)

# ------------------------------------------------------------------
# Credentials
# ------------------------------------------------------------------
from trust_protocol.credentials.credential import (
    CredentialIssuer,
    TrustCredential,
    is_credential_expired,
    verify_credential,
)

# ------------------------------------------------------------------
# Profile controller and errors
# ------------------------------------------------------------------
from trust_protocol.errors import (
    SchemaMismatchError,
    SnapshotFormatError,
    TrustProtocolError,
)
from trust_protocol.profile import SCHEMA, ProfileState, TrustProfile

__all__ = [
    "__version__",
    # Evidence
    "ConsentRecord",
    "DecisionTraceSummary",
    "EntityType",
    "EvidenceSource",
    "EvidenceType",
    "HarmRecord",
    "ReasoningProfile",
    # Scoring, chain, and policy
    "ChainVerification",
    "DIMENSION_WEIGHTS",
    "DimensionRequirement",
    "DimensionScore",
    "FailureCategory",
    "LEVEL_THRESHOLDS",
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
    # Credentials
    "CredentialIssuer",
    "TrustCredential",
    "is_credential_expired",
    "verify_credential",
    # Profile and errors
    "SCHEMA",
    "ProfileState",
    "SchemaMismatchError",
    "SnapshotFormatError",
    "TrustProfile",
    "TrustProtocolError",
]
