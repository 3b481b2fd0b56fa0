from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from echo_brain.domains.answer import AnswerExplanation, AnswerRecord
from echo_brain.domains.entitlements import UserAccount
from echo_brain.domains.enums import QueryIntent
from echo_brain.domains.memory import MemoryRecord, MemoryStats, SourceMetadata


class EchoBrain(ABC):
    """Interface for the Echo Brain client."""

    @abstractmethod
    async def register_user(self, user_id: str, email: str) -> UserAccount:
        """Create a user if absent."""
        pass

    @abstractmethod
    async def set_student_verification(self, user_id: str, verified_until: datetime) -> bool:
        """Grant the student tier until the given time."""
        pass

    @abstractmethod
    async def ingest(
        self,
        user_id: str,
        content: Union[str, bytes],
        metadata: Optional[Union[SourceMetadata, Dict[str, Any]]] = None,
        timeout: Optional[float] = None,
    ) -> MemoryRecord:
        """Capture content as a memory."""
        pass

    @abstractmethod
    async def query(
        self,
        user_id: str,
        text: str,
        intent: Optional[Union[QueryIntent, str]] = None,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> AnswerRecord:
        """Answer a question from the user's memories."""
        pass

    @abstractmethod
    async def list_memories(
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
    async def get_memory(self, user_id: str, memory_id: str) -> Optional[MemoryRecord]:
        """Get a memory by id."""
        pass

    @abstractmethod
    async def delete_memory(self, user_id: str, memory_id: str) -> bool:
        """Soft-delete a memory."""
        pass

    @abstractmethod
    async def verify_memory(
        self, user_id: str, memory_id: str, verified: bool = True, notes: Optional[str] = None
    ) -> bool:
        """Verify or correct a memory."""
        pass

    @abstractmethod
    async def stats(self, user_id: str) -> MemoryStats:
        """Get memory statistics for a user."""
        pass

    @abstractmethod
    async def list_answers(self, user_id: str, limit: int = 20, skip: int = 0) -> List[AnswerRecord]:
        """List a user's past answers."""
        pass

    @abstractmethod
    async def explain_answer(self, user_id: str, answer_id: str) -> AnswerExplanation:
        """Get the evidence behind an answer."""
        pass

    @abstractmethod
    async def health(self) -> Dict[str, Any]:
        """Report system health."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release background resources."""
        pass
