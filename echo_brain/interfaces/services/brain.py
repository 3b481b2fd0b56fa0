from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional

from echo_brain.domains.answer import AnswerExplanation, AnswerRecord
from echo_brain.domains.entitlements import UserAccount
from echo_brain.domains.enums import QueryIntent
from echo_brain.domains.memory import MemoryRecord, MemoryStats, SourceMetadata


class BrainService(ABC):
    """Interface for the produced ingest/query surface."""

    @abstractmethod
    async def ingest(
        self,
        user_id: str,
        content: str,
        metadata: Optional[SourceMetadata] = None,
        timeout: Optional[float] = None,
    ) -> MemoryRecord:
        """Ingest content for a user."""
        pass

    @abstractmethod
    async def query(
        self,
        user_id: str,
        text: str,
        intent: Optional[QueryIntent] = None,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> AnswerRecord:
        """Answer a natural-language query from the user's memories."""
        pass

    @abstractmethod
    def list_memories(
        self,
        user_id: str,
        limit: int = 50,
        skip: int = 0,
        source_type: Optional[str] = None,
        include_deleted: bool = False,
    ) -> List[MemoryRecord]:
        """List a user's memories."""
        pass

    @abstractmethod
    def delete_memory(self, user_id: str, memory_id: str) -> bool:
        """Soft-delete a memory."""
        pass

    @abstractmethod
    def verify_memory(
        self, user_id: str, memory_id: str, verified: bool, notes: Optional[str] = None
    ) -> bool:
        """Record user verification or correction of a memory."""
        pass

    @abstractmethod
    def stats(self, user_id: str) -> MemoryStats:
        """Aggregate statistics over a user's memories."""
        pass

    @abstractmethod
    def get_memory(self, user_id: str, memory_id: str) -> Optional[MemoryRecord]:
        """Get a live memory by id."""
        pass

    @abstractmethod
    def list_answers(self, user_id: str, limit: int = 20, skip: int = 0) -> List[AnswerRecord]:
        """List a user's past answers, newest first."""
        pass

    @abstractmethod
    def get_answer(self, user_id: str, answer_id: str) -> Optional[AnswerRecord]:
        """Get a past answer by id."""
        pass

    @abstractmethod
    def explain_answer(self, user_id: str, answer_id: str) -> AnswerExplanation:
        """Get the per-memory evidence behind an answer."""
        pass

    @abstractmethod
    def register_user(self, user_id: str, email: str) -> UserAccount:
        """Create a user if absent."""
        pass

    @abstractmethod
    def set_student_verification(self, user_id: str, verified_until: datetime) -> bool:
        """Grant the student tier until the given time."""
        pass

    @abstractmethod
    def health(self) -> Dict[str, Any]:
        """Report storage connectivity and configured services."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Stop background work."""
        pass
