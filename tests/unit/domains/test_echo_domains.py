"""
Tests for the Echo Brain domain models.

Covers memory and answer invariants, document round trips used by the
repositories and the error taxonomy.
"""
from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from echo_brain.domains import (
    AnswerRecord,
    EntitlementCode,
    EntitlementError,
    MemoryRecord,
    QueryIntent,
    QuotaExceeded,
    QuotaKind,
    SourceMetadata,
    SynthesisError,
    TimelineEntry,
    TimelineRole,
    UserAccount,
    UserNotFoundError,
)
from echo_brain.domains.models import EnrichmentResponse
from echo_brain.domains.routing import IntentAnalysis


# ---------------------
# MemoryRecord
# ---------------------


def test_memory_defaults(memory_factory):
    memory = MemoryRecord(
        user_id="u1",
        raw_content="Hello",
        raw_content_hash="abc",
        cleaned_content="Hello",
    )
    assert memory.importance_weight == 0.5
    assert memory.decay_rate == 0.1
    assert memory.confidence_score == 0.5
    assert memory.source_type == "note"
    assert memory.related_memory_ids == []
    assert memory.is_deleted is False
    assert memory.created_at.tzinfo is not None


def test_memory_confidence_bounds():
    with pytest.raises(ValidationError):
        MemoryRecord(
            user_id="u1",
            raw_content="x",
            raw_content_hash="h",
            cleaned_content="x",
            confidence_score=1.5,
        )


def test_relationship_arrays_must_be_parallel():
    with pytest.raises(ValidationError):
        MemoryRecord(
            user_id="u1",
            raw_content="x",
            raw_content_hash="h",
            cleaned_content="x",
            related_memory_ids=["a", "b"],
            relationship_reason=["only one"],
        )


def test_reference_time_prefers_consumed_at(memory_factory):
    consumed = datetime(2025, 1, 1, tzinfo=timezone.utc)
    memory = memory_factory(consumed_at=consumed)
    assert memory.reference_time == consumed

    memory = memory_factory()
    assert memory.reference_time == memory.created_at


def test_naive_datetimes_are_treated_as_utc(memory_factory):
    memory = memory_factory(created_at=datetime(2025, 6, 1, 8, 30))
    assert memory.created_at == datetime(2025, 6, 1, 8, 30, tzinfo=timezone.utc)


def test_memory_document_round_trip(memory_factory):
    memory = memory_factory(concepts=["graph"], related=["mem-99"])
    document = memory.to_document()

    assert document["_id"] == memory.id
    assert "id" not in document
    assert document["is_deleted"] is False

    restored = MemoryRecord.from_document(document)
    assert restored == memory


def test_deleted_memory_document_flag(memory_factory):
    memory = memory_factory(deleted_at=datetime(2026, 1, 1, tzinfo=timezone.utc))
    assert memory.is_deleted is True
    assert memory.to_document()["is_deleted"] is True


def test_source_metadata_normalizes_dates():
    metadata = SourceMetadata(source_type="web", consumed_at=datetime(2025, 2, 2))
    assert metadata.source_type == "web"
    assert metadata.consumed_at.tzinfo == timezone.utc


def test_source_metadata_rejects_unknown_type():
    with pytest.raises(ValidationError):
        SourceMetadata(source_type="podcast")


# ---------------------
# AnswerRecord
# ---------------------


def _answer(**overrides):
    data = dict(
        user_id="u1",
        original_query="what is rust?",
        interpreted_intent=QueryIntent.OVERVIEW,
        answer_text="Rust is a language.",
        overall_confidence=0.7,
    )
    data.update(overrides)
    return AnswerRecord(**data)


def test_timeline_only_for_timeline_intent():
    entry = TimelineEntry(
        memory_id="m1",
        date=datetime(2025, 1, 1, tzinfo=timezone.utc),
        role=TimelineRole.FIRST_ENCOUNTER,
        description="first",
    )
    with pytest.raises(ValidationError):
        _answer(timeline=[entry])

    answer = _answer(interpreted_intent=QueryIntent.TIMELINE, timeline=[entry])
    assert answer.timeline[0].role == "first_encounter"


def test_answer_is_immutable():
    answer = _answer()
    with pytest.raises(ValidationError):
        answer.answer_text = "changed"


def test_answer_document_round_trip():
    answer = _answer()
    restored = AnswerRecord.from_document(answer.to_document())
    assert restored == answer


def test_user_account_document_round_trip():
    account = UserAccount(id="u1", email="a@b.com", entitlement_tier="pro")
    document = account.to_document()
    assert document["_id"] == "u1"
    assert UserAccount.from_document(document) == account


# ---------------------
# Errors
# ---------------------


@pytest.mark.parametrize(
    "kind,code",
    [
        (QuotaKind.MONTHLY_INGEST, EntitlementCode.MONTHLY_INGEST_LIMIT_EXCEEDED),
        (QuotaKind.MEMORY_COUNT, EntitlementCode.MEMORY_LIMIT_EXCEEDED),
        (QuotaKind.FILE_SIZE, EntitlementCode.FILE_SIZE_EXCEEDED),
    ],
)
def test_quota_exceeded_codes(kind, code):
    error = QuotaExceeded("limit hit", kind)
    assert isinstance(error, EntitlementError)
    assert error.kind == kind
    assert error.code == code.value
    assert str(error) == f"[{code.value}] limit hit"


def test_synthesis_error_cause():
    error = SynthesisError("timeout")
    assert error.cause == "timeout"
    assert "timeout" in error.message


def test_user_not_found_error():
    error = UserNotFoundError("ghost")
    assert error.user_id == "ghost"
    assert error.code == "USER_NOT_FOUND"


# ---------------------
# Structured LLM output
# ---------------------


@pytest.mark.parametrize("model_class", [EnrichmentResponse, IntentAnalysis])
def test_structured_output_schema_is_strict(model_class):
    schema = model_class.model_json_schema()
    assert set(schema["required"]) == set(schema["properties"])
    assert schema["additionalProperties"] is False


def test_structured_output_rejects_missing_and_extra_fields():
    with pytest.raises(ValidationError):
        EnrichmentResponse(summary="s", concepts=[])
    with pytest.raises(ValidationError):
        IntentAnalysis(intent="overview", confidence=0.9, reason="extra")
