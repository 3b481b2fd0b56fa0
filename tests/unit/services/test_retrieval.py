from unittest.mock import AsyncMock, Mock

import pytest

from echo_brain.domains.enums import EntitlementTier, QueryIntent
from echo_brain.services.entitlements import get_policy
from echo_brain.services.retrieval import RetrievalService


@pytest.fixture
def memory_repository():
    repo = Mock()
    repo.list_for_owner = Mock(return_value=[])
    return repo


@pytest.fixture
def embedding_service():
    service = Mock()
    service.embed = AsyncMock(return_value=[1.0, 0.0])
    return service


@pytest.fixture
def retrieval(memory_repository, embedding_service):
    return RetrievalService(memory_repository, embedding_service, default_limit=10)


def test_effective_limit_is_capped_by_policy(retrieval):
    free = get_policy(EntitlementTier.FREE)
    pro = get_policy(EntitlementTier.PRO)

    assert retrieval.effective_limit(free, 25) == 10
    assert retrieval.effective_limit(pro, 25) == 25
    assert retrieval.effective_limit(pro, None) == 10
    assert retrieval.effective_limit(pro, 0) == 10


@pytest.mark.asyncio
async def test_retrieve_fetches_double_and_truncates(
    retrieval, memory_repository, embedding_service, memory_factory, now
):
    memories = [memory_factory(embedding=[1.0, 0.0]) for _ in range(8)]
    memory_repository.list_for_owner.return_value = memories

    ranked = await retrieval.retrieve(
        "user-1", "rust", QueryIntent.OVERVIEW, get_policy(EntitlementTier.PRO), limit=3, now=now
    )

    memory_repository.list_for_owner.assert_called_once_with("user-1", limit=6)
    embedding_service.embed.assert_awaited_once_with("rust")
    assert len(ranked) == 3
    assert ranked[0].score >= ranked[1].score >= ranked[2].score


@pytest.mark.asyncio
async def test_retrieve_never_exceeds_search_depth(
    retrieval, memory_repository, memory_factory, now
):
    memory_repository.list_for_owner.return_value = [memory_factory() for _ in range(20)]

    ranked = await retrieval.retrieve(
        "user-1", "rust", QueryIntent.UNKNOWN, get_policy(EntitlementTier.FREE), limit=50, now=now
    )

    assert len(ranked) == 10
    memory_repository.list_for_owner.assert_called_once_with("user-1", limit=20)


@pytest.mark.asyncio
async def test_retrieve_without_memories_skips_embedding(retrieval, embedding_service):
    ranked = await retrieval.retrieve(
        "user-1", "rust", QueryIntent.UNKNOWN, get_policy(EntitlementTier.FREE)
    )
    assert ranked == []
    embedding_service.embed.assert_not_called()
