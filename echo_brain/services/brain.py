"""
Brain service implementation.

Orchestrates ingestion, retrieval and answer synthesis for the produced
ingest/query surface, plus memory and answer management.
"""
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from echo_brain.domains.answer import AnswerExplanation, AnswerRecord
from echo_brain.domains.entitlements import UserAccount
from echo_brain.domains.enums import QueryIntent
from echo_brain.domains.errors import InputError
from echo_brain.domains.memory import MemoryRecord, MemoryStats, SourceMetadata
from echo_brain.interfaces.providers.data_storage import DataStorageProvider
from echo_brain.interfaces.repositories.answer import AnswerRepository
from echo_brain.interfaces.repositories.memory import MemoryRepository
from echo_brain.interfaces.services.answer import AnswerService as AnswerServiceInterface
from echo_brain.interfaces.services.brain import BrainService as BrainServiceInterface
from echo_brain.interfaces.services.ingestion import (
    IngestionService as IngestionServiceInterface,
)
from echo_brain.services.background import BackgroundEnrichmentQueue
from echo_brain.services.entitlements import (
    EntitlementService,
    assert_can_access_confidence_details,
    assert_can_access_timeline,
)
from echo_brain.services.intent import IntentService
from echo_brain.services.retrieval import RetrievalService

logger = logging.getLogger(__name__)


class BrainService(BrainServiceInterface):
    """Top-level service behind the Echo Brain client."""

    def __init__(
        self,
        ingestion_service: IngestionServiceInterface,
        retrieval_service: RetrievalService,
        answer_service: AnswerServiceInterface,
        intent_service: IntentService,
        entitlement_service: EntitlementService,
        memory_repository: MemoryRepository,
        answer_repository: AnswerRepository,
        db_adapter: Optional[DataStorageProvider] = None,
        priority_model: Optional[str] = None,
        collections: Optional[List[str]] = None,
        background_queue: Optional[BackgroundEnrichmentQueue] = None,
    ):
        """Initialize the brain service.

        Args:
            ingestion_service: Content ingestion pipeline
            retrieval_service: Ranked memory retrieval
            answer_service: Answer synthesis
            intent_service: Query intent classification
            entitlement_service: Tier policy and usage resolution
            memory_repository: Memory store
            answer_repository: Answer store
            db_adapter: Optional storage provider used for health checks
            priority_model: Model used for tiers with priority models
            collections: Collections counted by the health check
            background_queue: Queue drained and stopped on close
        """
        self.ingestion_service = ingestion_service
        self.retrieval_service = retrieval_service
        self.answer_service = answer_service
        self.intent_service = intent_service
        self.entitlement_service = entitlement_service
        self.memory_repository = memory_repository
        self.answer_repository = answer_repository
        self.db_adapter = db_adapter
        self.priority_model = priority_model
        self.collections = collections or ["memories", "answers", "users"]
        self.background_queue = background_queue

    async def ingest(
        self,
        user_id: str,
        content: Union[str, bytes],
        metadata: Optional[SourceMetadata] = None,
        timeout: Optional[float] = None,
    ) -> MemoryRecord:
        return await self.ingestion_service.ingest(
            user_id, content, metadata=metadata, timeout=timeout
        )

    async def query(
        self,
        user_id: str,
        text: str,
        intent: Optional[QueryIntent] = None,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> AnswerRecord:
        """Answer a natural-language query from the user's memories.

        Args:
            user_id: Owner of the memories
            text: Query text
            intent: Intent override, classified from the text when omitted
            limit: Requested number of supporting memories
            timeout: Bound on the generation call in seconds

        Returns:
            The persisted answer

        Raises:
            InputError: If the query is empty
            EntitlementError: If the intent needs a feature the tier lacks
            SynthesisError: If answer generation fails
        """
        text = (text or "").strip()
        if not text:
            raise InputError("Query cannot be empty")

        policy = self.entitlement_service.resolve_policy(user_id)

        if intent is None:
            intent = await self.intent_service.classify(text)
        intent = QueryIntent(intent)
        if intent == QueryIntent.TIMELINE:
            assert_can_access_timeline(policy)

        ranked = await self.retrieval_service.retrieve(
            user_id, text, intent, policy, limit=limit
        )

        model = self.priority_model if policy.priority_models else None
        answer = await self.answer_service.synthesize(
            text,
            [item.memory for item in ranked],
            intent,
            user_id,
            timeout=timeout,
            model=model,
        )
        self.answer_repository.create(answer)
        logger.info(
            f"Answered {intent.value} query for user {user_id} with "
            f"{len(answer.supporting_memories)} memories"
        )
        return answer

    def list_memories(
        self,
        user_id: str,
        limit: int = 50,
        skip: int = 0,
        source_type: Optional[str] = None,
        include_deleted: bool = False,
    ) -> List[MemoryRecord]:
        return self.memory_repository.list_for_owner(
            user_id,
            limit=limit,
            skip=skip,
            source_type=source_type,
            include_deleted=include_deleted,
        )

    def get_memory(self, user_id: str, memory_id: str) -> Optional[MemoryRecord]:
        return self.memory_repository.get(user_id, memory_id)

    def delete_memory(self, user_id: str, memory_id: str) -> bool:
        return self.memory_repository.soft_delete(user_id, memory_id)

    def verify_memory(
        self, user_id: str, memory_id: str, verified: bool, notes: Optional[str] = None
    ) -> bool:
        return self.memory_repository.update_verification(
            user_id, memory_id, verified, notes
        )

    def stats(self, user_id: str) -> MemoryStats:
        return self.memory_repository.aggregate_stats(user_id)

    def list_answers(self, user_id: str, limit: int = 20, skip: int = 0) -> List[AnswerRecord]:
        return self.answer_repository.list_for_owner(user_id, limit=limit, skip=skip)

    def get_answer(self, user_id: str, answer_id: str) -> Optional[AnswerRecord]:
        return self.answer_repository.get(user_id, answer_id)

    def explain_answer(self, user_id: str, answer_id: str) -> AnswerExplanation:
        """Per-memory evidence for an answer, on tiers with confidence details.

        Raises:
            EntitlementError: If the tier lacks confidence details
            KeyError: If the answer does not exist for this user
        """
        assert_can_access_confidence_details(
            self.entitlement_service.resolve_policy(user_id)
        )
        answer = self.answer_repository.get(user_id, answer_id)
        if answer is None:
            raise KeyError(f"Answer not found: {answer_id}")
        return AnswerExplanation(
            answer_id=answer.id,
            overall_confidence=answer.overall_confidence,
            uncertainty_notes=answer.uncertainty_notes,
            supporting_memories=answer.supporting_memories,
        )

    def register_user(self, user_id: str, email: str) -> UserAccount:
        if not email or "@" not in email:
            raise InputError(f"Invalid email address: {email!r}")
        return self.entitlement_service.register_user(user_id, email)

    def set_student_verification(self, user_id: str, verified_until: datetime) -> bool:
        return self.entitlement_service.grant_student(user_id, verified_until)

    def health(self) -> Dict[str, Any]:
        status: Dict[str, Any] = {
            "services": {
                "ingestion": type(self.ingestion_service).__name__,
                "retrieval": type(self.retrieval_service).__name__,
                "answer": type(self.answer_service).__name__,
                "intent": type(self.intent_service).__name__,
            },
            "priority_model": self.priority_model,
        }
        if self.db_adapter is None:
            status["database"] = "not_configured"
            status["status"] = "degraded"
            return status

        if not self.db_adapter.ping():
            status["database"] = "unreachable"
            status["status"] = "unhealthy"
            return status

        status["database"] = "connected"
        status["collections"] = {
            name: self.db_adapter.count_documents(name, {}) for name in self.collections
        }
        status["status"] = "healthy"
        return status

    async def close(self) -> None:
        """Stop background workers once pending jobs finish."""
        if self.background_queue is not None:
            await self.background_queue.shutdown()
