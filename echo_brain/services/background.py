"""
Background enrichment of stored memories.

Jobs run on worker tasks fed by a bounded asyncio queue. Submitting never
blocks the caller and a failed job is logged and dropped.
"""
import asyncio
import logging
from typing import List, Optional, Set

from echo_brain.domains.memory import MemoryRecord
from echo_brain.interfaces.repositories.memory import MemoryRepository
from echo_brain.services.embedding import EmbeddingService

logger = logging.getLogger(__name__)


def shared_concepts(a: MemoryRecord, b: MemoryRecord) -> List[str]:
    """Key concepts of ``a`` also present in ``b``, case-insensitively."""
    other: Set[str] = {c.lower() for c in b.key_concepts}
    return [c for c in a.key_concepts if c.lower() in other]


class BackgroundEnrichmentQueue:
    """Computes embeddings and related-memory links after ingestion."""

    def __init__(
        self,
        memory_repository: MemoryRepository,
        embedding_service: EmbeddingService,
        workers: int = 1,
        max_queue_size: int = 100,
        link_scan_limit: int = 200,
    ):
        """Initialize the queue.

        Args:
            memory_repository: Memory store
            embedding_service: Service for semantic vectors
            workers: Number of worker tasks
            max_queue_size: Pending jobs kept before new ones are dropped
            link_scan_limit: Recent memories compared when linking
        """
        self.memory_repository = memory_repository
        self.embedding_service = embedding_service
        self.workers = max(1, workers)
        self.max_queue_size = max_queue_size
        self.link_scan_limit = link_scan_limit
        self._queue: Optional[asyncio.Queue] = None
        self._tasks: List[asyncio.Task] = []

    def _ensure_started(self) -> None:
        if self._queue is None:
            self._queue = asyncio.Queue(maxsize=self.max_queue_size)
        self._tasks = [t for t in self._tasks if not t.done()]
        while len(self._tasks) < self.workers:
            self._tasks.append(asyncio.create_task(self._worker()))

    def submit(self, user_id: str, memory_id: str) -> bool:
        """Schedule enrichment for a memory without waiting for it.

        Must be called from a running event loop.

        Returns:
            False if the queue is full and the job was dropped
        """
        self._ensure_started()
        try:
            self._queue.put_nowait((user_id, memory_id))
        except asyncio.QueueFull:
            logger.warning(
                f"Background queue full, dropping enrichment for memory {memory_id}"
            )
            return False
        return True

    async def _worker(self) -> None:
        while True:
            job = await self._queue.get()
            try:
                await self.process(*job)
            except Exception as e:
                logger.exception(f"Background enrichment failed for memory {job[1]}: {e}")
            finally:
                self._queue.task_done()

    async def process(self, user_id: str, memory_id: str) -> None:
        """Embed one memory and link it to memories sharing its concepts."""
        memory = self.memory_repository.get(user_id, memory_id)
        if memory is None:
            logger.info(f"Memory {memory_id} no longer exists, skipping enrichment")
            return

        embedding = await self.embedding_service.embed(memory.cleaned_content)
        self.memory_repository.set_embedding(user_id, memory_id, embedding)

        if not memory.key_concepts:
            return

        candidates = self.memory_repository.list_for_owner(
            user_id, limit=self.link_scan_limit
        )
        linked = 0
        for other in candidates:
            if other.id == memory.id or other.id in memory.related_memory_ids:
                continue
            common = shared_concepts(memory, other)
            if not common:
                continue
            reason = f"Shares concepts: {', '.join(common)}"
            self.memory_repository.add_relationship(user_id, memory.id, other.id, reason)
            self.memory_repository.add_relationship(user_id, other.id, memory.id, reason)
            linked += 1

        logger.debug(f"Linked memory {memory_id} to {linked} related memories")

    async def join(self) -> None:
        """Wait until every submitted job has been processed."""
        if self._queue is not None:
            await self._queue.join()

    async def shutdown(self, drain: bool = True) -> None:
        """Stop the workers, first waiting for pending jobs when ``drain`` is set."""
        if drain:
            await self.join()
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks = []
        self._queue = None
