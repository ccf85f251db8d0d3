"""Evidence inputs consumed by the scoring engine.

Two kinds of input feed a trust profile:

- ``EvidenceSource`` attestations, accumulated in insertion order and used
  for evidence counts and confidence.
- One summary per upstream evidence domain (decision traces, reasoning
  profile, consent ledger, harm ledger). Each slot holds only the latest
  summary supplied.
"""
from __future__ import annotations

from trust_protocol.evidence.models import (
    ConsentRecord,
    DecisionTraceSummary,
    EntityType,
    EvidenceSource,
    EvidenceType,
    HarmRecord,
    ReasoningProfile,
)

__all__ = [
    "ConsentRecord",
    "DecisionTraceSummary",
    "EntityType",
    "EvidenceSource",
    "EvidenceType",
    "HarmRecord",
    "ReasoningProfile",
]
