"""
MongoDB implementation of the answer repository.
"""
import logging
from typing import List, Optional

from echo_brain.domains.answer import AnswerRecord
from echo_brain.interfaces.providers.data_storage import DataStorageProvider
from echo_brain.interfaces.repositories.answer import AnswerRepository

logger = logging.getLogger(__name__)


class MongoAnswerRepository(AnswerRepository):
    """MongoDB implementation of AnswerRepository."""

    def __init__(self, db_adapter: DataStorageProvider, collection: str = "answers"):
        self.db = db_adapter
        self.collection = collection

        try:
            self.db.create_collection(self.collection)
            self.db.create_index(self.collection, [("user_id", 1)])
            self.db.create_index(self.collection, [("generated_at", -1)])
        except Exception as e:  # pragma: no cover
            logger.error(f"Error initializing MongoDB answers collection: {e}")

    def create(self, answer: AnswerRecord) -> AnswerRecord:
        try:
            self.db.insert_one(self.collection, answer.to_document())
        except Exception as e:
            logger.error(f"Failed to save answer {answer.id}: {e}")
            raise
        logger.debug(f"Saved answer: {answer.id}")
        return answer

    def get(self, user_id: str, answer_id: str) -> Optional[AnswerRecord]:
        doc = self.db.find_one(self.collection, {"_id": answer_id, "user_id": user_id})
        return AnswerRecord.from_document(doc) if doc else None

    def list_for_owner(self, user_id: str, limit: int = 20, skip: int = 0) -> List[AnswerRecord]:
        docs = self.db.find(
            self.collection,
            {"user_id": user_id},
            sort=[("generated_at", -1)],
            limit=limit,
            skip=skip,
        )
        return [AnswerRecord.from_document(doc) for doc in docs]
