"""Unit tests for trust_protocol.evidence.models — evidence and summaries."""
from __future__ import annotations

import dataclasses
import datetime

import pytest

from trust_protocol.evidence.models import (
    ConsentRecord,
    DecisionTraceSummary,
    EntityType,
    EvidenceSource,
    EvidenceType,
    HarmRecord,
    ReasoningProfile,
)


class TestEvidenceType:
    def test_wire_values(self) -> None:
        assert {t.value for t in EvidenceType} == {
            "clearpath_trace",
            "cognitive_ledger",
            "consent_ledger",
            "harm_trace",
            "external_attestation",
        }

    def test_is_str_subclass(self) -> None:
        assert EvidenceType.CONSENT_LEDGER == "consent_ledger"


class TestEntityType:
    def test_lookup_by_value(self) -> None:
        assert EntityType("human") is EntityType.HUMAN

    def test_three_entity_types(self) -> None:
        assert len(EntityType) == 3


class TestEvidenceSource:
    def test_default_weight_is_one(self) -> None:
        source = EvidenceSource(EvidenceType.DECISION_TRACE, "trace-1")
        assert source.weight == pytest.approx(1.0)

    def test_default_timestamp_is_utc(self) -> None:
        source = EvidenceSource(EvidenceType.DECISION_TRACE, "trace-1")
        assert source.timestamp.tzinfo is not None

    @pytest.mark.parametrize("weight", [-0.1, 1.01])
    def test_weight_outside_unit_interval_raises(self, weight: float) -> None:
        with pytest.raises(ValueError, match="weight"):
            EvidenceSource(EvidenceType.DECISION_TRACE, "trace-1", weight=weight)

    @pytest.mark.parametrize("weight", [0.0, 1.0])
    def test_weight_bounds_are_inclusive(self, weight: float) -> None:
        EvidenceSource(EvidenceType.DECISION_TRACE, "trace-1", weight=weight)

    def test_is_immutable(self) -> None:
        source = EvidenceSource(EvidenceType.DECISION_TRACE, "trace-1")
        with pytest.raises(dataclasses.FrozenInstanceError):
            source.weight = 0.5  # type: ignore[misc]

    def test_to_dict_uses_interchange_fields(self) -> None:
        ts = datetime.datetime(2025, 6, 1, 12, tzinfo=datetime.timezone.utc)
        source = EvidenceSource(EvidenceType.HARM_LEDGER, "harm-9", 0.8, ts)
        assert source.to_dict() == {
            "type": "harm_trace",
            "source_id": "harm-9",
            "timestamp": "2025-06-01T12:00:00.000Z",
            "weight": 0.8,
        }

    def test_from_dict_restores_equal_source(self) -> None:
        ts = datetime.datetime(2025, 6, 1, 12, tzinfo=datetime.timezone.utc)
        source = EvidenceSource(EvidenceType.EXTERNAL_ATTESTATION, "att-1", 0.4, ts)
        assert EvidenceSource.from_dict(source.to_dict()) == source

    def test_from_dict_unknown_type_raises(self) -> None:
        with pytest.raises(ValueError):
            EvidenceSource.from_dict(
                {"type": "gossip", "source_id": "x", "timestamp": "2025-01-01T00:00:00Z", "weight": 1}
            )


class TestSummaries:
    def test_decision_trace_optional_fields_default_to_zero(self) -> None:
        summary = DecisionTraceSummary.from_dict({"total_traces": 4, "verification_failures": 1})
        assert summary.assumption_ratio == 0.0
        assert summary.alternatives_considered_avg == 0.0

    def test_reasoning_profile_missing_calibration_defaults_to_neutral(self) -> None:
        profile = ReasoningProfile.from_dict({"consistency": 0.9})
        assert profile.calibration == pytest.approx(0.5)
        assert profile.bias_count == 0

    def test_consent_record_field_names(self) -> None:
        record = ConsentRecord(total_actions=10, violations=1, scope_creep_detected=True)
        assert record.to_dict() == {
            "total_actions": 10,
            "violations": 1,
            "scope_creep_detected": True,
        }

    def test_harm_record_from_dict_defaults(self) -> None:
        assert HarmRecord.from_dict({}) == HarmRecord()

    def test_consent_record_missing_required_field_raises(self) -> None:
        with pytest.raises(KeyError):
            ConsentRecord.from_dict({"total_actions": 3})
