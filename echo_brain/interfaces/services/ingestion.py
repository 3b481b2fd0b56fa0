from abc import ABC, abstractmethod
from typing import Optional

from echo_brain.domains.memory import MemoryRecord, SourceMetadata


class IngestionService(ABC):
    """Interface for turning raw content into stored memories."""

    @abstractmethod
    async def ingest(
        self,
        user_id: str,
        raw_content: str,
        metadata: Optional[SourceMetadata] = None,
        timeout: Optional[float] = None,
    ) -> MemoryRecord:
        """Normalize, deduplicate, enrich and persist content.

        Args:
            user_id: Owner of the memory
            raw_content: Content as submitted
            metadata: Provenance of the content
            timeout: Bound on the enrichment call in seconds

        Returns:
            The new memory, or the existing one for duplicate content
        """
        pass
