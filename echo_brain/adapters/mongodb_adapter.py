"""
MongoDB adapter for the Echo Brain system.

This adapter implements the DataStorageProvider interface for MongoDB.
Datetimes are written as naive UTC, which is how MongoDB hands them back.
"""
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Tuple

from pymongo import MongoClient, ReturnDocument

from echo_brain.interfaces.providers.data_storage import DataStorageProvider

logger = logging.getLogger(__name__)


def to_storage(value: Any) -> Any:
    """Recursively convert timezone-aware datetimes to naive UTC."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    if isinstance(value, dict):
        return {k: to_storage(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_storage(v) for v in value]
    return value


class MongoDBAdapter(DataStorageProvider):
    """MongoDB implementation of DataStorageProvider."""

    def __init__(self, connection_string: str, database_name: str):
        self.client = MongoClient(connection_string)
        self.db = self.client[database_name]

    def create_collection(self, name: str) -> None:
        if name not in self.db.list_collection_names():
            self.db.create_collection(name)

    def collection_exists(self, name: str) -> bool:
        return name in self.db.list_collection_names()

    def insert_one(self, collection: str, document: Dict) -> str:
        document = to_storage(document)
        if "_id" not in document:
            document["_id"] = str(uuid.uuid4())
        self.db[collection].insert_one(document)
        return document["_id"]

    def find_one(self, collection: str, query: Dict) -> Optional[Dict]:
        return self.db[collection].find_one(to_storage(query))

    def find(
        self,
        collection: str,
        query: Dict,
        sort: Optional[List[Tuple]] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> List[Dict]:
        cursor = self.db[collection].find(to_storage(query))
        if sort:
            cursor = cursor.sort(sort)
        if skip > 0:
            cursor = cursor.skip(skip)
        if limit > 0:
            cursor = cursor.limit(limit)
        return list(cursor)

    def update_one(
        self,
        collection: str,
        query: Dict,
        update: Dict,
        upsert: bool = False,
        matched: bool = False,
    ) -> bool:
        result = self.db[collection].update_one(
            to_storage(query), to_storage(update), upsert=upsert
        )
        if upsert and result.upserted_id is not None:
            return True
        if matched:
            return result.matched_count > 0
        return result.modified_count > 0

    def find_one_and_update(
        self, collection: str, query: Dict, update: Dict, upsert: bool = False
    ) -> Optional[Dict]:
        return self.db[collection].find_one_and_update(
            to_storage(query),
            to_storage(update),
            upsert=upsert,
            return_document=ReturnDocument.AFTER,
        )

    def count_documents(self, collection: str, query: Dict) -> int:
        return self.db[collection].count_documents(to_storage(query))

    def aggregate(self, collection: str, pipeline: List[Dict]) -> List[Dict]:
        return list(self.db[collection].aggregate(to_storage(pipeline)))

    def create_index(self, collection: str, keys: List[Tuple], **kwargs) -> None:
        self.db[collection].create_index(keys, **kwargs)

    def ping(self) -> bool:
        try:
            self.client.admin.command("ping")
            return True
        except Exception as e:
            logger.error(f"MongoDB ping failed: {e}")
            return False
