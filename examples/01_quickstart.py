#!/usr/bin/env python3
"""Example: Quickstart

Builds a trust profile for one agent from ledger summaries, calculates a
hash-chained score record, issues a credential, and checks a policy.

Usage:
    python examples/01_quickstart.py

Requirements:
    pip install trust-protocol
"""
from __future__ import annotations

import trust_protocol
from trust_protocol import (
    ConsentRecord,
    DecisionTraceSummary,
    DimensionRequirement,
    EntityType,
    EvidenceSource,
    EvidenceType,
    HarmRecord,
    ReasoningProfile,
    TrustDimension,
    TrustLevel,
    TrustPolicy,
    TrustProfile,
)


def main() -> None:
    print(f"trust-protocol version: {trust_protocol.__version__}")

    # Step 1: Create a profile and feed it evidence
    profile = TrustProfile("analytics-agent-v2", EntityType.AGENT)
    profile.add_evidence(EvidenceSource(EvidenceType.DECISION_TRACE, "trace-batch-17", 0.8))
    profile.add_decision_trace_summary(
        DecisionTraceSummary(
            total_traces=40,
            verification_failures=2,
            assumption_ratio=0.6,
            alternatives_considered_avg=3,
        )
    )
    profile.add_reasoning_profile(ReasoningProfile(calibration=0.85, consistency=0.8))
    profile.add_consent_record(ConsentRecord(total_actions=200, violations=3))
    profile.add_harm_record(HarmRecord(total_incidents=1, max_severity=1, remediation_rate=1))

    # Step 2: Calculate twice; each record links to the previous one
    first = profile.calculate()
    second = profile.calculate()
    print(f"\nOverall score: {second.overall_score:.3f} ({second.level.label})")
    for dim in second.dimensions:
        print(f"  {dim.dimension.value}: {dim.score:.3f} (trend {dim.trend.value})")
    print(f"\nSecond record links to first: {second.previous_hash == first.hash}")
    print(f"History verifies: {profile.verify().valid}")

    # Step 3: Issue a credential and verify it
    credential = profile.generate_credential("registry.example")
    print(f"\nCredential {credential.id} verifies: {credential.verify()}")

    # Step 4: Evaluate against a policy
    policy = TrustPolicy(
        name="production-access",
        min_score=0.7,
        required_level=TrustLevel.ESTABLISHED,
        required_dimensions=[
            DimensionRequirement(dimension=TrustDimension.HARM_RECORD, min_score=0.8),
        ],
    )
    check = profile.check_policy(policy)
    print(f"\nPolicy '{policy.name}' passed: {check.passed}")
    for failure in check.failures:
        print(f"  {failure.dimension.value}: {failure.actual:.3f} < {failure.required:.3f}")

    # Step 5: Export and restore
    restored = TrustProfile.from_json(profile.to_json())
    print(f"\nRestored history length: {len(restored.get_history())}")


if __name__ == "__main__":
    main()
