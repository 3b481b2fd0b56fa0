from abc import ABC, abstractmethod
from typing import List, Optional

from echo_brain.domains.answer import AnswerRecord


class AnswerRepository(ABC):
    """Interface for synthesized answer storage."""

    @abstractmethod
    def create(self, answer: AnswerRecord) -> AnswerRecord:
        """Persist an answer."""
        pass

    @abstractmethod
    def get(self, user_id: str, answer_id: str) -> Optional[AnswerRecord]:
        """Get an answer by id."""
        pass

    @abstractmethod
    def list_for_owner(self, user_id: str, limit: int = 20, skip: int = 0) -> List[AnswerRecord]:
        """List an owner's answers, newest first."""
        pass
