"""TrustPolicy — caller-defined minimum requirements and their evaluation.

A policy names an overall-score floor, a minimum trust level, and any
number of per-dimension floors. Evaluation only reports; it never blocks
or enforces anything.
"""
from __future__ import annotations

import datetime
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, field_serializer, field_validator

from trust_protocol.hashing import format_timestamp, generate_id, utc_now
from trust_protocol.trust.calculator import TrustScoreRecord
from trust_protocol.trust.dimensions import TrustDimension
from trust_protocol.trust.level import TrustLevel, level_floor

logger = logging.getLogger(__name__)


class DimensionRequirement(BaseModel):
    """Minimum score required on one dimension."""

    dimension: TrustDimension
    min_score: float = Field(ge=0.0, le=1.0)


class TrustPolicy(BaseModel):
    """Caller-supplied trust requirements.

    Parameters
    ----------
    id:
        Policy identifier, reported back in every check.
    name:
        Human-readable policy name.
    description:
        Free-form description.
    min_score:
        Floor on the overall score.
    required_level:
        Minimum trust level. Accepts a TrustLevel or its lowercase label.
    required_dimensions:
        Per-dimension floors.
    """

    id: str = Field(default_factory=generate_id)
    name: str = ""
    description: str = ""
    min_score: float = Field(default=0.0, ge=0.0, le=1.0)
    required_level: TrustLevel = TrustLevel.UNTRUSTED
    required_dimensions: list[DimensionRequirement] = Field(default_factory=list)

    @field_validator("required_level", mode="before")
    @classmethod
    def parse_level_label(cls, value: Any) -> Any:
        if isinstance(value, str):
            return TrustLevel.from_label(value)
        return value

    @field_serializer("required_level")
    def serialize_level(self, level: TrustLevel) -> str:
        return level.label


class FailureCategory(str, Enum):
    """What kind of requirement a policy failure missed."""

    OVERALL_SCORE = "overall_score"
    TRUST_LEVEL = "trust_level"
    DIMENSION = "dimension"


@dataclass(frozen=True)
class PolicyFailure:
    """One unmet policy requirement.

    ``dimension`` keeps the interchange format's labelling: an overall-score
    miss is reported under ``accuracy`` and a level miss under
    ``calibration``. ``category`` names the requirement actually missed.
    """

    dimension: TrustDimension
    required: float
    actual: float
    category: FailureCategory = FailureCategory.DIMENSION

    def to_dict(self) -> dict[str, Any]:
        return {
            "dimension": self.dimension.value,
            "required": self.required,
            "actual": self.actual,
            "category": self.category.value,
        }


@dataclass(frozen=True)
class PolicyCheck:
    """Result of evaluating a TrustPolicy against a record.

    Parameters
    ----------
    policy_id:
        The evaluated policy's id.
    credential_id:
        Id of the credential derived from the checked record, or ``""``
        when there was no record to check.
    passed:
        True exactly when ``failures`` is empty.
    failures:
        Every unmet requirement.
    checked_at:
        UTC datetime of the evaluation.
    """

    policy_id: str
    credential_id: str
    passed: bool
    failures: tuple[PolicyFailure, ...] = ()
    checked_at: datetime.datetime = field(default_factory=utc_now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "policy_id": self.policy_id,
            "credential_id": self.credential_id,
            "passed": self.passed,
            "failures": [f.to_dict() for f in self.failures],
            "checked_at": format_timestamp(self.checked_at),
        }


def evaluate_policy(
    policy: TrustPolicy,
    record: Optional[TrustScoreRecord],
    credential_id: str = "",
) -> PolicyCheck:
    """Check *record* against every requirement in *policy*.

    All unmet requirements are collected; evaluation never stops at the
    first failure. The level requirement compares the record's overall
    score against the required level's floor, not the record's own level.

    With no record, the check fails and reports every required dimension
    as unmet with an actual score of 0.

    Parameters
    ----------
    policy:
        The requirements to check.
    record:
        The record to evaluate, usually the latest in a history.
    credential_id:
        Reported back on the check.

    Returns
    -------
    PolicyCheck
    """
    if record is None:
        failures = tuple(
            PolicyFailure(dimension=req.dimension, required=req.min_score, actual=0.0)
            for req in policy.required_dimensions
        )
        logger.warning("Policy %s checked against an empty history", policy.id)
        return PolicyCheck(
            policy_id=policy.id,
            credential_id="",
            passed=False,
            failures=failures,
        )

    collected: list[PolicyFailure] = []
    if record.overall_score < policy.min_score:
        collected.append(
            PolicyFailure(
                dimension=TrustDimension.ACCURACY,
                required=policy.min_score,
                actual=record.overall_score,
                category=FailureCategory.OVERALL_SCORE,
            )
        )

    required_floor = level_floor(policy.required_level)
    if record.overall_score < required_floor:
        collected.append(
            PolicyFailure(
                dimension=TrustDimension.CALIBRATION,
                required=required_floor,
                actual=record.overall_score,
                category=FailureCategory.TRUST_LEVEL,
            )
        )

    for req in policy.required_dimensions:
        entry = record.dimension(req.dimension)
        actual = entry.score if entry is not None else 0.0
        if actual < req.min_score:
            collected.append(
                PolicyFailure(dimension=req.dimension, required=req.min_score, actual=actual)
            )

    check = PolicyCheck(
        policy_id=policy.id,
        credential_id=credential_id,
        passed=not collected,
        failures=tuple(collected),
    )
    if not check.passed:
        logger.warning(
            "Policy %s failed for %s with %d unmet requirement(s)",
            policy.id,
            record.entity_id,
            len(collected),
        )
    return check
