"""
Shared fixtures for the Echo Brain test suite.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import mongomock
import pytest

from echo_brain.adapters.mongodb_adapter import MongoDBAdapter
from echo_brain.domains.memory import MemoryRecord
from echo_brain.services.normalizer import clean_content, fingerprint

NOW = datetime(2026, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def mongo_adapter():
    """MongoDB adapter backed by mongomock."""
    with patch("echo_brain.adapters.mongodb_adapter.MongoClient", mongomock.MongoClient):
        adapter = MongoDBAdapter(
            connection_string="mongodb://localhost:27017", database_name="test_db"
        )
    yield adapter
    adapter.client.drop_database("test_db")


@pytest.fixture
def memory_factory():
    """Return a factory function for creating memory records."""
    counter = {"n": 0}

    def _create(
        content=None,
        user_id="user-1",
        created_at=None,
        concepts=None,
        confidence=0.8,
        importance=0.5,
        decay_rate=0.1,
        embedding=None,
        related=None,
        **overrides,
    ):
        counter["n"] += 1
        if content is None:
            content = f"Memory number {counter['n']} about testing."
        cleaned = clean_content(content)
        related = related or []
        data = dict(
            id=f"mem-{counter['n']}",
            user_id=user_id,
            raw_content=content,
            raw_content_hash=fingerprint(cleaned),
            cleaned_content=cleaned,
            created_at=created_at or NOW - timedelta(days=counter["n"]),
            summary=f"Summary {counter['n']}",
            key_concepts=concepts or [],
            confidence_score=confidence,
            importance_weight=importance,
            decay_rate=decay_rate,
            embedding=embedding,
            related_memory_ids=related,
            relationship_reason=["Shares concepts: test"] * len(related),
        )
        data.update(overrides)
        return MemoryRecord(**data)

    return _create
