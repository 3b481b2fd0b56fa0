"""
Ingestion pipeline implementation.

Quota checks run before any enrichment work. Ingestion is idempotent per
owner and cleaned content.
"""
import logging
from typing import Optional, Union

from echo_brain.domains.errors import InputError
from echo_brain.domains.memory import MemoryRecord, SourceMetadata
from echo_brain.interfaces.repositories.memory import MemoryRepository
from echo_brain.interfaces.services.entitlements import (
    EntitlementService as EntitlementServiceInterface,
)
from echo_brain.interfaces.services.ingestion import (
    IngestionService as IngestionServiceInterface,
)
from echo_brain.services.background import BackgroundEnrichmentQueue
from echo_brain.services.enrichment import EnrichmentService
from echo_brain.services.entitlements import (
    assert_can_ingest,
    assert_can_store_memory,
    assert_file_size_allowed,
)
from echo_brain.services.normalizer import (
    as_text,
    clean_content,
    estimate_size_mb,
    fingerprint,
)

logger = logging.getLogger(__name__)


class IngestionService(IngestionServiceInterface):
    """Service for turning raw content into stored memories."""

    def __init__(
        self,
        memory_repository: MemoryRepository,
        entitlement_service: EntitlementServiceInterface,
        enrichment_service: EnrichmentService,
        background_queue: Optional[BackgroundEnrichmentQueue] = None,
    ):
        """Initialize the ingestion service.

        Args:
            memory_repository: Memory store
            entitlement_service: Resolves policy and usage per owner
            enrichment_service: Summary and concept generation
            background_queue: Optional queue for embedding and linking
        """
        self.memory_repository = memory_repository
        self.entitlement_service = entitlement_service
        self.enrichment_service = enrichment_service
        self.background_queue = background_queue

    async def ingest(
        self,
        user_id: str,
        raw_content: Union[str, bytes],
        metadata: Optional[SourceMetadata] = None,
        timeout: Optional[float] = None,
    ) -> MemoryRecord:
        metadata = metadata or SourceMetadata()

        policy = self.entitlement_service.resolve_policy(user_id)
        usage = self.entitlement_service.get_usage(user_id)
        assert_can_ingest(policy, usage.monthly_ingest_count)
        assert_can_store_memory(policy, usage.memory_count)
        assert_file_size_allowed(policy, estimate_size_mb(raw_content))

        raw_text = as_text(raw_content)
        cleaned = clean_content(raw_text)
        if not cleaned:
            raise InputError("Content is empty after cleaning")
        content_hash = fingerprint(cleaned)

        existing = self.memory_repository.find_by_fingerprint(user_id, content_hash)
        if existing is not None:
            logger.info(f"Duplicate content for user {user_id}, returning memory {existing.id}")
            return existing

        enrichment = await self.enrichment_service.enrich(cleaned, timeout=timeout)

        record = MemoryRecord(
            user_id=user_id,
            raw_content=raw_text,
            raw_content_hash=content_hash,
            cleaned_content=cleaned,
            source_type=metadata.source_type,
            source_url=metadata.source_url,
            source_title=metadata.source_title,
            source_author=metadata.source_author,
            consumed_at=metadata.consumed_at,
            source_published_at=metadata.source_published_at,
            summary=enrichment.summary,
            key_concepts=enrichment.concepts,
            confidence_score=enrichment.confidence,
        )
        stored = self.memory_repository.create(record)
        if stored.id != record.id:
            # A concurrent ingest of the same content won the insert
            return stored

        self.entitlement_service.record_ingest(user_id)
        logger.info(
            f"Ingested memory {stored.id} for user {user_id}"
            f"{' (degraded enrichment)' if enrichment.degraded else ''}"
        )

        if self.background_queue is not None:
            try:
                self.background_queue.submit(user_id, stored.id)
            except Exception as e:
                logger.error(f"Failed to schedule background enrichment for {stored.id}: {e}")

        return stored
