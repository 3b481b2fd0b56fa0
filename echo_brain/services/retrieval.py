"""
Retrieval service implementation.

Candidate memories are fetched from the owner's live records and ranked by
the scoring engine. Results never exceed the tier's search depth.
"""
import logging
from datetime import datetime
from typing import List, Optional

from echo_brain.domains.entitlements import EntitlementPolicy
from echo_brain.domains.enums import QueryIntent
from echo_brain.domains.memory import ScoredMemory
from echo_brain.interfaces.repositories.memory import MemoryRepository
from echo_brain.services.embedding import EmbeddingService
from echo_brain.services.entitlements import get_allowed_search_depth
from echo_brain.services.scoring import ScoringEngine

logger = logging.getLogger(__name__)

CANDIDATE_MULTIPLIER = 2


class RetrievalService:
    """Service for retrieving ranked memories for a query."""

    def __init__(
        self,
        memory_repository: MemoryRepository,
        embedding_service: EmbeddingService,
        scoring_engine: Optional[ScoringEngine] = None,
        default_limit: int = 10,
    ):
        self.memory_repository = memory_repository
        self.embedding_service = embedding_service
        self.scoring_engine = scoring_engine or ScoringEngine()
        self.default_limit = default_limit

    def effective_limit(self, policy: EntitlementPolicy, limit: Optional[int]) -> int:
        """Requested limit capped by the policy's search depth."""
        requested = limit if limit and limit > 0 else self.default_limit
        return min(requested, get_allowed_search_depth(policy))

    async def retrieve(
        self,
        user_id: str,
        query: str,
        intent: QueryIntent,
        policy: EntitlementPolicy,
        limit: Optional[int] = None,
        now: Optional[datetime] = None,
    ) -> List[ScoredMemory]:
        """Retrieve the top memories for a query.

        Args:
            user_id: Owner whose memories are searched
            query: Query text
            intent: Classified query intent
            policy: Resolved entitlement policy of the owner
            limit: Requested number of results
            now: Reference time for recency scoring

        Returns:
            At most ``effective_limit`` scored memories in presentation order
        """
        top_k = self.effective_limit(policy, limit)
        candidates = self.memory_repository.list_for_owner(
            user_id, limit=top_k * CANDIDATE_MULTIPLIER
        )
        if not candidates:
            logger.info(f"No memories found for user {user_id}")
            return []

        query_vector = await self.embedding_service.embed(query)
        ranked = self.scoring_engine.score(candidates, query_vector, intent, now=now)
        logger.debug(
            f"Ranked {len(candidates)} candidates for user {user_id}, returning {min(top_k, len(ranked))}"
        )
        return ranked[:top_k]
