"""Unit tests for trust_protocol.trust.calculator — ScoreCalculator and records."""
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
from trust_protocol.hashing import GENESIS_HASH
from trust_protocol.trust.calculator import (
    ScoreCalculator,
    TrustScoreRecord,
    weighted_overall,
)
from trust_protocol.trust.dimensions import DIMENSION_WEIGHTS, Trend, TrustDimension
from trust_protocol.trust.level import derive_level


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def calculator() -> ScoreCalculator:
    return ScoreCalculator()


@pytest.fixture()
def evidence() -> list[EvidenceSource]:
    return [
        EvidenceSource(EvidenceType.DECISION_TRACE, "trace-1", 0.8),
        EvidenceSource(EvidenceType.CONSENT_LEDGER, "ledger-1", 0.6),
        EvidenceSource(EvidenceType.DECISION_TRACE, "trace-1", 0.8),
    ]


def _calculate(
    calculator: ScoreCalculator,
    evidence: list[EvidenceSource] | None = None,
    previous: tuple[TrustScoreRecord, ...] = (),
    **summaries: object,
) -> TrustScoreRecord:
    return calculator.calculate(
        entity_id="agent-001",
        entity_type=EntityType.AGENT,
        evidence_sources=evidence or [],
        previous_hash=GENESIS_HASH,
        previous_records=previous,
        **summaries,  # type: ignore[arg-type]
    )


# ---------------------------------------------------------------------------
# ScoreCalculator.calculate
# ---------------------------------------------------------------------------


class TestCalculate:
    def test_record_is_unsealed(self, calculator: ScoreCalculator) -> None:
        record = _calculate(calculator)
        assert record.hash == ""
        assert not record.sealed

    def test_record_links_to_given_previous_hash(self, calculator: ScoreCalculator) -> None:
        assert _calculate(calculator).previous_hash == GENESIS_HASH

    def test_fresh_ids(self, calculator: ScoreCalculator) -> None:
        assert _calculate(calculator).id != _calculate(calculator).id

    def test_default_validity_is_24_hours(self, calculator: ScoreCalculator) -> None:
        record = _calculate(calculator)
        assert record.valid_until - record.generated_at == datetime.timedelta(hours=24)

    def test_validity_is_overridable(self) -> None:
        record = _calculate(ScoreCalculator(validity_hours=2))
        assert record.valid_until - record.generated_at == datetime.timedelta(hours=2)

    def test_eight_dimensions_without_duplicates(self, calculator: ScoreCalculator) -> None:
        record = _calculate(calculator)
        assert [d.dimension for d in record.dimensions] == list(TrustDimension)

    def test_overall_is_weighted_sum(self, calculator: ScoreCalculator) -> None:
        record = _calculate(
            calculator,
            traces=DecisionTraceSummary(10, 1, 0.5, 2),
            reasoning=ReasoningProfile(0.9, 0, 0, 0.8),
            consent=ConsentRecord(100, 5, False),
            harm=HarmRecord(1, 2, 0.5),
        )
        expected = sum(d.score * DIMENSION_WEIGHTS[d.dimension] for d in record.dimensions)
        assert abs(record.overall_score - expected) < 1e-9

    def test_level_derived_from_overall(self, calculator: ScoreCalculator) -> None:
        record = _calculate(calculator, consent=ConsentRecord(100, 0, False))
        assert record.level is derive_level(record.overall_score)

    def test_neutral_profile_scores_half(self, calculator: ScoreCalculator) -> None:
        record = _calculate(calculator)
        assert record.overall_score == pytest.approx(0.5)

    def test_evidence_copied_verbatim(
        self, calculator: ScoreCalculator, evidence: list[EvidenceSource]
    ) -> None:
        record = _calculate(calculator, evidence)
        assert list(record.evidence_sources) == evidence

    def test_evidence_count_applies_to_every_dimension(
        self, calculator: ScoreCalculator, evidence: list[EvidenceSource]
    ) -> None:
        record = _calculate(calculator, evidence)
        assert all(d.evidence_count == 3 for d in record.dimensions)
        assert all(d.confidence == pytest.approx(0.3) for d in record.dimensions)

    def test_domain_scores_empty(self, calculator: ScoreCalculator) -> None:
        assert dict(_calculate(calculator).domain_scores) == {}

    def test_trend_reads_prior_records(self, calculator: ScoreCalculator) -> None:
        low = ReasoningProfile(consistency=0.2)
        first = _calculate(calculator, reasoning=low)
        second = _calculate(calculator, previous=(first,), reasoning=low)
        third = _calculate(
            calculator,
            previous=(first, second),
            reasoning=ReasoningProfile(consistency=0.9),
        )
        assert third.dimension(TrustDimension.CONSISTENCY).trend is Trend.IMPROVING  # type: ignore[union-attr]


# ---------------------------------------------------------------------------
# TrustScoreRecord
# ---------------------------------------------------------------------------


class TestTrustScoreRecord:
    def test_is_immutable(self, calculator: ScoreCalculator) -> None:
        record = _calculate(calculator)
        with pytest.raises(dataclasses.FrozenInstanceError):
            record.overall_score = 1.0  # type: ignore[misc]

    def test_domain_scores_are_read_only(self, calculator: ScoreCalculator) -> None:
        record = _calculate(calculator)
        with pytest.raises(TypeError):
            record.domain_scores["x"] = 1.0  # type: ignore[index]

    def test_dimension_lookup(self, calculator: ScoreCalculator) -> None:
        record = _calculate(calculator)
        entry = record.dimension(TrustDimension.HARM_RECORD)
        assert entry is not None
        assert entry.dimension is TrustDimension.HARM_RECORD

    def test_to_dict_uses_interchange_fields(
        self, calculator: ScoreCalculator, evidence: list[EvidenceSource]
    ) -> None:
        data = _calculate(calculator, evidence).to_dict()
        assert set(data) == {
            "id",
            "entity_id",
            "entity_type",
            "overall_score",
            "level",
            "dimensions",
            "evidence_sources",
            "domain_scores",
            "generated_at",
            "valid_until",
            "hash",
            "previous_hash",
        }
        assert data["entity_type"] == "agent"
        assert data["level"] == "basic"
        assert data["generated_at"].endswith("Z")

    def test_from_dict_restores_equal_record(
        self, calculator: ScoreCalculator, evidence: list[EvidenceSource]
    ) -> None:
        record = _calculate(calculator, evidence, consent=ConsentRecord(10, 1))
        assert TrustScoreRecord.from_dict(record.to_dict()) == record


class TestWeightedOverall:
    def test_all_ones_sum_to_one(self, calculator: ScoreCalculator) -> None:
        record = _calculate(calculator)
        ones = [dataclasses.replace(d, score=1.0) for d in record.dimensions]
        assert weighted_overall(ones) == pytest.approx(1.0)
