"""
Tests for the IngestionService pipeline.
"""
from unittest.mock import AsyncMock, Mock

import pytest

from echo_brain.domains.entitlements import UsageCounters
from echo_brain.domains.enums import EntitlementTier, QuotaKind
from echo_brain.domains.errors import InputError, QuotaExceeded
from echo_brain.domains.memory import Enrichment, SourceMetadata
from echo_brain.services.entitlements import get_policy
from echo_brain.services.ingestion import IngestionService
from echo_brain.services.normalizer import fingerprint


# ---------------------
# Fixtures
# ---------------------


@pytest.fixture
def memory_repository():
    repo = Mock()
    repo.find_by_fingerprint = Mock(return_value=None)
    repo.create = Mock(side_effect=lambda record: record)
    return repo


@pytest.fixture
def entitlement_service():
    service = Mock()
    service.resolve_policy = Mock(return_value=get_policy(EntitlementTier.FREE))
    service.get_usage = Mock(
        return_value=UsageCounters(monthly_ingest_count=3, memory_count=4)
    )
    service.record_ingest = Mock(return_value=4)
    return service


@pytest.fixture
def enrichment_service():
    service = Mock()
    service.enrich = AsyncMock(
        return_value=Enrichment(
            summary="A note about Rust.", concepts=["rust"], confidence=0.85
        )
    )
    return service


@pytest.fixture
def background_queue():
    queue = Mock()
    queue.submit = Mock(return_value=True)
    return queue


@pytest.fixture
def ingestion(memory_repository, entitlement_service, enrichment_service, background_queue):
    return IngestionService(
        memory_repository=memory_repository,
        entitlement_service=entitlement_service,
        enrichment_service=enrichment_service,
        background_queue=background_queue,
    )


# ---------------------
# Tests
# ---------------------


@pytest.mark.asyncio
async def test_ingest_creates_memory(
    ingestion, memory_repository, entitlement_service, background_queue
):
    metadata = SourceMetadata(source_type="web", source_title="Rust Book")
    memory = await ingestion.ingest("u1", "  <p>Rust   ownership</p>\n", metadata)

    assert memory.user_id == "u1"
    assert memory.cleaned_content == "Rust ownership"
    assert memory.raw_content_hash == fingerprint("Rust ownership")
    assert memory.summary == "A note about Rust."
    assert memory.key_concepts == ["rust"]
    assert memory.confidence_score == 0.85
    assert memory.importance_weight == 0.5
    assert memory.decay_rate == 0.1
    assert memory.source_type == "web"
    assert memory.source_title == "Rust Book"

    memory_repository.create.assert_called_once()
    entitlement_service.record_ingest.assert_called_once_with("u1")
    background_queue.submit.assert_called_once_with("u1", memory.id)


@pytest.mark.asyncio
async def test_duplicate_returns_existing_without_side_effects(
    ingestion, memory_repository, entitlement_service, enrichment_service, memory_factory
):
    existing = memory_factory(content="Rust ownership")
    memory_repository.find_by_fingerprint.return_value = existing

    memory = await ingestion.ingest("u1", "<b>Rust</b> ownership")

    assert memory is existing
    memory_repository.find_by_fingerprint.assert_called_once_with(
        "u1", fingerprint("Rust ownership")
    )
    enrichment_service.enrich.assert_not_called()
    memory_repository.create.assert_not_called()
    entitlement_service.record_ingest.assert_not_called()


@pytest.mark.asyncio
async def test_concurrent_duplicate_does_not_consume_quota(
    ingestion, memory_repository, entitlement_service, memory_factory
):
    winner = memory_factory(content="Rust ownership")
    memory_repository.create.side_effect = lambda record: winner

    memory = await ingestion.ingest("u1", "Rust ownership")

    assert memory is winner
    entitlement_service.record_ingest.assert_not_called()


@pytest.mark.asyncio
async def test_monthly_quota_checked_before_any_work(
    ingestion, entitlement_service, memory_repository, enrichment_service
):
    entitlement_service.get_usage.return_value = UsageCounters(
        monthly_ingest_count=100, memory_count=0
    )
    with pytest.raises(QuotaExceeded) as exc:
        await ingestion.ingest("u1", "content")

    assert exc.value.kind == QuotaKind.MONTHLY_INGEST
    memory_repository.find_by_fingerprint.assert_not_called()
    enrichment_service.enrich.assert_not_called()


@pytest.mark.asyncio
async def test_memory_quota(ingestion, entitlement_service):
    entitlement_service.get_usage.return_value = UsageCounters(
        monthly_ingest_count=0, memory_count=50
    )
    with pytest.raises(QuotaExceeded) as exc:
        await ingestion.ingest("u1", "content")
    assert exc.value.kind == QuotaKind.MEMORY_COUNT


@pytest.mark.asyncio
async def test_file_size_quota(ingestion):
    with pytest.raises(QuotaExceeded) as exc:
        await ingestion.ingest("u1", "a" * (6 * 1024 * 1024))
    assert exc.value.kind == QuotaKind.FILE_SIZE


@pytest.mark.asyncio
async def test_empty_content_rejected(ingestion, memory_repository):
    with pytest.raises(InputError):
        await ingestion.ingest("u1", "  <br/> \n ")
    memory_repository.create.assert_not_called()


@pytest.mark.asyncio
async def test_background_failure_does_not_propagate(ingestion, background_queue):
    background_queue.submit.side_effect = RuntimeError("loop closed")

    memory = await ingestion.ingest("u1", "Rust ownership")

    assert memory.cleaned_content == "Rust ownership"


@pytest.mark.asyncio
async def test_degraded_enrichment_still_stores(ingestion, enrichment_service):
    enrichment_service.enrich.return_value = Enrichment(
        summary="Rust ownership.", concepts=["ownership"], confidence=0.014, degraded=True
    )
    memory = await ingestion.ingest("u1", "Rust ownership")
    assert memory.confidence_score == 0.014


@pytest.mark.asyncio
async def test_works_without_background_queue(
    memory_repository, entitlement_service, enrichment_service
):
    service = IngestionService(memory_repository, entitlement_service, enrichment_service)
    memory = await service.ingest("u1", b"bytes content")
    assert memory.raw_content == "bytes content"
