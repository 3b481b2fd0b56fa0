from abc import ABC, abstractmethod
from typing import Dict, List, Optional, Tuple


class DataStorageProvider(ABC):
    """Interface for document storage providers."""

    @abstractmethod
    def create_collection(self, name: str) -> None:
        """Create a new collection."""
        pass

    @abstractmethod
    def collection_exists(self, name: str) -> bool:
        """Check if collection exists."""
        pass

    @abstractmethod
    def insert_one(self, collection: str, document: Dict) -> str:
        """Insert a document into a collection."""
        pass

    @abstractmethod
    def find_one(self, collection: str, query: Dict) -> Optional[Dict]:
        """Find a single document."""
        pass

    @abstractmethod
    def find(
        self,
        collection: str,
        query: Dict,
        sort: Optional[List[Tuple]] = None,
        limit: int = 0,
        skip: int = 0,
    ) -> List[Dict]:
        """Find documents matching query."""
        pass

    @abstractmethod
    def update_one(
        self,
        collection: str,
        query: Dict,
        update: Dict,
        upsert: bool = False,
        matched: bool = False,
    ) -> bool:
        """Update a document.

        Returns True if a document was modified or upserted, or with
        ``matched`` set, if any document matched the query.
        """
        pass

    @abstractmethod
    def find_one_and_update(
        self, collection: str, query: Dict, update: Dict, upsert: bool = False
    ) -> Optional[Dict]:
        """Atomically update a document and return it after the update."""
        pass

    @abstractmethod
    def count_documents(self, collection: str, query: Dict) -> int:
        """Count documents matching query."""
        pass

    @abstractmethod
    def aggregate(self, collection: str, pipeline: List[Dict]) -> List[Dict]:
        """Run an aggregation pipeline."""
        pass

    @abstractmethod
    def create_index(self, collection: str, keys: List, **kwargs) -> None:
        """Create an index."""
        pass

    @abstractmethod
    def ping(self) -> bool:
        """Check that the store is reachable."""
        pass
