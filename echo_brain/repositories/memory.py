"""
MongoDB implementation of the memory repository.

This repository handles storing and retrieving memory records. Records are
soft deleted only; ``is_deleted`` mirrors ``deleted_at`` so the unique
fingerprint index can be restricted to live records.
"""
import logging
from typing import Dict, List, Optional

from pymongo.errors import DuplicateKeyError

from echo_brain.domains.memory import MemoryRecord, MemoryStats
from echo_brain.domains.models import utc_now
from echo_brain.interfaces.providers.data_storage import DataStorageProvider
from echo_brain.interfaces.repositories.memory import MemoryRepository

logger = logging.getLogger(__name__)


class MongoMemoryRepository(MemoryRepository):
    """MongoDB implementation of MemoryRepository."""

    def __init__(self, db_adapter: DataStorageProvider, collection: str = "memories"):
        """Initialize the memory repository.

        Args:
            db_adapter: MongoDB adapter
            collection: Collection holding memory records
        """
        self.db = db_adapter
        self.collection = collection

        try:
            self.db.create_collection(self.collection)
            self.db.create_index(self.collection, [("user_id", 1)])
            self.db.create_index(self.collection, [("created_at", -1)])
            self.db.create_index(self.collection, [("user_id", 1), ("source_type", 1)])
        except Exception as e:  # pragma: no cover
            logger.error(f"Error initializing MongoDB memories collection: {e}")

        # One live record per owner and fingerprint
        try:
            self.db.create_index(
                self.collection,
                [("user_id", 1), ("raw_content_hash", 1)],
                unique=True,
                partialFilterExpression={"is_deleted": False},
            )
        except Exception as e:  # pragma: no cover
            logger.error(f"Error creating unique fingerprint index: {e}")

    def _live(self, user_id: str, **extra) -> Dict:
        return {"user_id": user_id, "is_deleted": False, **extra}

    def create(self, record: MemoryRecord) -> MemoryRecord:
        try:
            self.db.insert_one(self.collection, record.to_document())
        except DuplicateKeyError:
            existing = self.find_by_fingerprint(record.user_id, record.raw_content_hash)
            if existing is None:
                raise
            logger.info(
                f"Concurrent ingest resolved to existing memory {existing.id} "
                f"for user {record.user_id}"
            )
            return existing
        logger.debug(f"Saved memory: {record.id}")
        return record

    def find_by_fingerprint(self, user_id: str, fingerprint: str) -> Optional[MemoryRecord]:
        doc = self.db.find_one(
            self.collection, self._live(user_id, raw_content_hash=fingerprint)
        )
        return MemoryRecord.from_document(doc) if doc else None

    def get(self, user_id: str, memory_id: str) -> Optional[MemoryRecord]:
        doc = self.db.find_one(self.collection, self._live(user_id, _id=memory_id))
        return MemoryRecord.from_document(doc) if doc else None

    def list_for_owner(
        self,
        user_id: str,
        limit: int = 50,
        skip: int = 0,
        source_type: Optional[str] = None,
        include_deleted: bool = False,
    ) -> List[MemoryRecord]:
        query: Dict = {"user_id": user_id}
        if not include_deleted:
            query["is_deleted"] = False
        if source_type:
            query["source_type"] = source_type
        docs = self.db.find(
            self.collection,
            query,
            sort=[("created_at", -1)],
            limit=limit,
            skip=skip,
        )
        return [MemoryRecord.from_document(doc) for doc in docs]

    def count_for_owner(self, user_id: str) -> int:
        return self.db.count_documents(self.collection, self._live(user_id))

    def soft_delete(self, user_id: str, memory_id: str) -> bool:
        deleted = self.db.update_one(
            self.collection,
            self._live(user_id, _id=memory_id),
            {"$set": {"deleted_at": utc_now(), "is_deleted": True}},
        )
        if deleted:
            logger.info(f"Soft-deleted memory {memory_id} for user {user_id}")
        return deleted

    def update_verification(
        self,
        user_id: str,
        memory_id: str,
        verified: bool,
        notes: Optional[str] = None,
    ) -> bool:
        update = {"user_verified": verified}
        if notes is not None:
            update["correction_notes"] = notes
        # True when the memory exists, even if the values were already set
        return self.db.update_one(
            self.collection,
            self._live(user_id, _id=memory_id),
            {"$set": update},
            matched=True,
        )

    def aggregate_stats(self, user_id: str) -> MemoryStats:
        groups = self.db.aggregate(
            self.collection,
            [
                {"$match": self._live(user_id)},
                {
                    "$group": {
                        "_id": "$source_type",
                        "count": {"$sum": 1},
                        "confidence_sum": {"$sum": "$confidence_score"},
                    }
                },
            ],
        )
        by_type = {str(g["_id"]): int(g["count"]) for g in groups}
        total = sum(by_type.values())
        confidence_sum = sum(float(g.get("confidence_sum") or 0.0) for g in groups)
        verified = self.db.count_documents(
            self.collection, self._live(user_id, user_verified=True)
        )
        return MemoryStats(
            total=total,
            by_type=by_type,
            avg_confidence=confidence_sum / total if total else 0.0,
            verified_count=verified,
        )

    def set_embedding(self, user_id: str, memory_id: str, embedding: List[float]) -> bool:
        return self.db.update_one(
            self.collection,
            self._live(user_id, _id=memory_id),
            {"$set": {"embedding": list(embedding)}},
        )

    def add_relationship(
        self, user_id: str, memory_id: str, related_id: str, reason: str
    ) -> bool:
        # Both arrays are pushed in one update so they stay parallel
        return self.db.update_one(
            self.collection,
            self._live(user_id, _id=memory_id, related_memory_ids={"$ne": related_id}),
            {"$push": {"related_memory_ids": related_id, "relationship_reason": reason}},
        )
