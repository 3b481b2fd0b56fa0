from abc import ABC, abstractmethod
from typing import List, Optional

from echo_brain.domains.answer import AnswerRecord
from echo_brain.domains.enums import QueryIntent
from echo_brain.domains.memory import MemoryRecord


class AnswerService(ABC):
    """Interface for composing grounded answers from ranked memories."""

    @abstractmethod
    async def synthesize(
        self,
        query: str,
        memories: List[MemoryRecord],
        intent: QueryIntent,
        user_id: str,
        timeout: Optional[float] = None,
        model: Optional[str] = None,
    ) -> AnswerRecord:
        """Synthesize an answer with evidence, confidence and suggested actions."""
        pass
