"""Unit tests for trust_protocol.credentials.credential — issuance and verification."""
from __future__ import annotations

import dataclasses
import datetime
import json

import pytest

from trust_protocol.credentials.credential import (
    CredentialIssuer,
    TrustCredential,
    credential_content_hash,
    is_credential_expired,
    verify_credential,
)
from trust_protocol.evidence.models import ConsentRecord, EntityType, HarmRecord
from trust_protocol.hashing import GENESIS_HASH
from trust_protocol.trust.calculator import ScoreCalculator, TrustScoreRecord
from trust_protocol.trust.chain import RecordChain
from trust_protocol.trust.dimensions import Trend
from trust_protocol.trust.level import TrustLevel


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def record() -> TrustScoreRecord:
    unsealed = ScoreCalculator(validity_hours=6).calculate(
        entity_id="agent-001",
        entity_type=EntityType.AGENT,
        evidence_sources=[],
        previous_hash=GENESIS_HASH,
        consent=ConsentRecord(100, 5),
        harm=HarmRecord(0, 0, 1),
    )
    return RecordChain().append(unsealed)


@pytest.fixture()
def issuer() -> CredentialIssuer:
    return CredentialIssuer("registry.example")


@pytest.fixture()
def credential(issuer: CredentialIssuer, record: TrustScoreRecord) -> TrustCredential:
    return issuer.issue(record)


# ---------------------------------------------------------------------------
# Issuance
# ---------------------------------------------------------------------------


class TestIssue:
    def test_copies_scores_from_record(
        self, credential: TrustCredential, record: TrustScoreRecord
    ) -> None:
        assert credential.entity_id == record.entity_id
        assert credential.overall_score == record.overall_score
        assert credential.level is record.level
        assert credential.dimensions == record.dimensions
        assert credential.domain_scores == dict(record.domain_scores)
        assert credential.generated_at == record.generated_at

    def test_has_own_id_and_issuer(
        self, credential: TrustCredential, record: TrustScoreRecord
    ) -> None:
        assert credential.id != record.id
        assert credential.issuer_id == "registry.example"

    def test_own_validity_window(
        self, credential: TrustCredential, record: TrustScoreRecord
    ) -> None:
        # The record lives 6 hours; the credential defaults to 24.
        assert credential.valid_until > record.valid_until

    def test_per_call_validity_override(
        self, issuer: CredentialIssuer, record: TrustScoreRecord
    ) -> None:
        credential = issuer.issue(record, validity_hours=1)
        assert credential.valid_until < record.valid_until

    def test_hash_is_set(self, credential: TrustCredential) -> None:
        assert credential.verification_hash == credential_content_hash(credential)
        assert len(credential.verification_hash) == 64

    def test_empty_issuer_id_raises(self) -> None:
        with pytest.raises(ValueError, match="issuer_id"):
            CredentialIssuer("")

    def test_credential_is_frozen(self, credential: TrustCredential) -> None:
        with pytest.raises(Exception):
            credential.overall_score = 1.0  # type: ignore[misc]


# ---------------------------------------------------------------------------
# Verification
# ---------------------------------------------------------------------------


class TestVerify:
    def test_fresh_credential_verifies(self, credential: TrustCredential) -> None:
        assert verify_credential(credential)
        assert credential.verify()

    @pytest.mark.parametrize(
        "changes",
        [
            {"overall_score": 0.99},
            {"level": TrustLevel.EXEMPLARY},
            {"entity_id": "agent-999"},
            {"issuer_id": "someone-else"},
            {"id": "forged"},
            {"domain_scores": {"finance": 0.9}},
        ],
    )
    def test_altered_field_fails(
        self, credential: TrustCredential, changes: dict[str, object]
    ) -> None:
        assert not verify_credential(credential.model_copy(update=changes))

    def test_altered_dimension_score_fails(self, credential: TrustCredential) -> None:
        dims = list(credential.dimensions)
        dims[3] = dataclasses.replace(dims[3], score=0.01)
        assert not verify_credential(credential.model_copy(update={"dimensions": tuple(dims)}))

    def test_altered_dimension_trend_fails(self, credential: TrustCredential) -> None:
        dims = list(credential.dimensions)
        dims[0] = dataclasses.replace(dims[0], trend=Trend.IMPROVING)
        assert not verify_credential(credential.model_copy(update={"dimensions": tuple(dims)}))

    @pytest.mark.parametrize("field", ["generated_at", "valid_until"])
    def test_altered_timestamp_fails(self, credential: TrustCredential, field: str) -> None:
        shifted = getattr(credential, field) + datetime.timedelta(seconds=1)
        assert not verify_credential(credential.model_copy(update={field: shifted}))

    def test_dimension_order_does_not_matter(self, credential: TrustCredential) -> None:
        reordered = credential.model_copy(
            update={"dimensions": tuple(reversed(credential.dimensions))}
        )
        assert verify_credential(reordered)

    def test_missing_hash_fails(self, credential: TrustCredential) -> None:
        assert not verify_credential(credential.model_copy(update={"verification_hash": ""}))

    def test_non_ascii_hash_fails(self, credential: TrustCredential) -> None:
        forged = credential.model_copy(update={"verification_hash": "\u00e9" * 64})
        assert not verify_credential(forged)

    def test_non_ascii_hash_from_json_fails(self, credential: TrustCredential) -> None:
        data = credential.to_dict()
        data["verification_hash"] = "\u00e9" * 64
        assert not TrustCredential.from_json(json.dumps(data)).verify()


# ---------------------------------------------------------------------------
# Expiry
# ---------------------------------------------------------------------------


class TestExpiry:
    def test_positive_window_not_expired(self, credential: TrustCredential) -> None:
        assert not is_credential_expired(credential)
        assert not credential.is_expired()

    def test_negative_window_expired(
        self, issuer: CredentialIssuer, record: TrustScoreRecord
    ) -> None:
        credential = issuer.issue(record, validity_hours=-1)
        assert is_credential_expired(credential)

    def test_expired_credential_still_hash_verifies(
        self, issuer: CredentialIssuer, record: TrustScoreRecord
    ) -> None:
        credential = issuer.issue(record, validity_hours=-1)
        assert verify_credential(credential)

    def test_expires_once_time_passes(self, credential: TrustCredential) -> None:
        later = credential.valid_until + datetime.timedelta(milliseconds=1)
        assert is_credential_expired(credential, now=later)
        assert not is_credential_expired(credential, now=credential.valid_until)

    def test_naive_now_is_treated_as_utc(self, credential: TrustCredential) -> None:
        naive_until = credential.valid_until.replace(tzinfo=None)
        one_second = datetime.timedelta(seconds=1)
        naive_later = naive_until + one_second
        naive_earlier = naive_until - one_second
        assert is_credential_expired(credential, now=naive_later)
        assert not credential.is_expired(now=naive_earlier)


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


class TestSerialization:
    def test_flat_exchange_fields(self, credential: TrustCredential) -> None:
        assert set(credential.to_dict()) == {
            "id",
            "entity_id",
            "overall_score",
            "level",
            "dimensions",
            "domain_scores",
            "generated_at",
            "valid_until",
            "issuer_id",
            "verification_hash",
        }

    def test_level_is_exchanged_as_label(self, credential: TrustCredential) -> None:
        assert credential.to_dict()["level"] == credential.level.label

    def test_json_round_trip_still_verifies(self, credential: TrustCredential) -> None:
        restored = TrustCredential.from_json(credential.to_json())
        assert restored == credential
        assert verify_credential(restored)

    def test_tampered_json_fails_verification(self, credential: TrustCredential) -> None:
        data = credential.to_dict()
        data["overall_score"] = 0.999
        assert not verify_credential(TrustCredential.from_dict(data))

    def test_from_json_rejects_garbage(self) -> None:
        with pytest.raises(ValueError, match="Invalid JSON"):
            TrustCredential.from_json("{not json")

    @pytest.mark.parametrize("text", ["[]", "42", "null", '"credential"'])
    def test_from_json_rejects_non_object(self, text: str) -> None:
        with pytest.raises(ValueError, match="JSON object"):
            TrustCredential.from_json(text)

    def test_from_json_rejects_out_of_range_number(self, credential: TrustCredential) -> None:
        data = credential.to_dict()
        data["dimensions"][0]["evidence_count"] = float("inf")
        with pytest.raises(ValueError, match="Malformed credential"):
            TrustCredential.from_json(json.dumps(data))

    def test_from_json_rejects_wrong_container(self, credential: TrustCredential) -> None:
        data = credential.to_dict()
        data["dimensions"] = [1, 2]
        with pytest.raises(ValueError):
            TrustCredential.from_json(json.dumps(data))

    def test_from_json_rejects_missing_field(self, credential: TrustCredential) -> None:
        data = credential.to_dict()
        del data["issuer_id"]
        with pytest.raises(ValueError, match="missing field"):
            TrustCredential.from_json(json.dumps(data))
