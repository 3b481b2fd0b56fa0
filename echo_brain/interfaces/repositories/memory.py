from abc import ABC, abstractmethod
from typing import List, Optional

from echo_brain.domains.memory import MemoryRecord, MemoryStats


class MemoryRepository(ABC):
    """Interface for durable memory record storage."""

    @abstractmethod
    def create(self, record: MemoryRecord) -> MemoryRecord:
        """Persist a new memory record.

        If a live record with the same owner and fingerprint already exists,
        that record is returned instead and nothing is written.
        """
        pass

    @abstractmethod
    def find_by_fingerprint(self, user_id: str, fingerprint: str) -> Optional[MemoryRecord]:
        """Find a live record by its content fingerprint."""
        pass

    @abstractmethod
    def get(self, user_id: str, memory_id: str) -> Optional[MemoryRecord]:
        """Get a live record by id."""
        pass

    @abstractmethod
    def list_for_owner(
        self,
        user_id: str,
        limit: int = 50,
        skip: int = 0,
        source_type: Optional[str] = None,
        include_deleted: bool = False,
    ) -> List[MemoryRecord]:
        """List an owner's records, newest first."""
        pass

    @abstractmethod
    def count_for_owner(self, user_id: str) -> int:
        """Count an owner's live records."""
        pass

    @abstractmethod
    def soft_delete(self, user_id: str, memory_id: str) -> bool:
        """Mark a record deleted. Returns False if nothing was deleted."""
        pass

    @abstractmethod
    def update_verification(
        self,
        user_id: str,
        memory_id: str,
        verified: bool,
        notes: Optional[str] = None,
    ) -> bool:
        """Set the user-verification flag and optional correction notes."""
        pass

    @abstractmethod
    def aggregate_stats(self, user_id: str) -> MemoryStats:
        """Aggregate statistics over an owner's live records."""
        pass

    @abstractmethod
    def set_embedding(self, user_id: str, memory_id: str, embedding: List[float]) -> bool:
        """Store the semantic vector of a record."""
        pass

    @abstractmethod
    def add_relationship(
        self, user_id: str, memory_id: str, related_id: str, reason: str
    ) -> bool:
        """Link a record to a related one, keeping ids and reasons parallel."""
        pass
