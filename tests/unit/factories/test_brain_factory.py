"""
Tests for EchoBrainFactory configuration handling and wiring.
"""
from unittest.mock import Mock, patch

import pytest

from echo_brain.factories.brain_factory import EchoBrainFactory
from echo_brain.services.brain import BrainService


@pytest.fixture
def config():
    return {
        "mongo": {"connection_string": "mongodb://localhost:27017", "database": "test_db"},
        "openai": {
            "api_key": "sk-test",
            "model": "gpt-test",
            "priority_model": "gpt-priority",
            "embedding_dimensions": 8,
        },
        "brain": {"llm_timeout": 5.0, "default_limit": 7, "background_queue_size": 3},
    }


# ---------------------
# Adapters
# ---------------------


@pytest.mark.parametrize(
    "mongo_config",
    [None, {"database": "db"}, {"connection_string": "mongodb://x"}],
)
def test_db_adapter_requires_settings(mongo_config):
    config = {} if mongo_config is None else {"mongo": mongo_config}
    with pytest.raises(ValueError):
        EchoBrainFactory.create_db_adapter(config)


def test_db_adapter_created(config):
    with patch("echo_brain.factories.brain_factory.MongoDBAdapter") as adapter_cls:
        EchoBrainFactory.create_db_adapter(config)
    adapter_cls.assert_called_once_with(
        connection_string="mongodb://localhost:27017", database_name="test_db"
    )


def test_llm_adapter_requires_api_key():
    with pytest.raises(ValueError):
        EchoBrainFactory.create_llm_adapter({"openai": {}})


def test_llm_adapter_requires_logfire_key(config):
    config["logfire"] = {}
    with pytest.raises(ValueError):
        EchoBrainFactory.create_llm_adapter(config)


def test_llm_adapter_created(config):
    config["logfire"] = {"api_key": "lf-key"}
    with patch("echo_brain.factories.brain_factory.OpenAIAdapter") as adapter_cls:
        EchoBrainFactory.create_llm_adapter(config)
    adapter_cls.assert_called_once_with(
        api_key="sk-test",
        model="gpt-test",
        embedding_model=None,
        embedding_dimensions=8,
        logfire_api_key="lf-key",
    )


# ---------------------
# Wiring
# ---------------------


def test_create_from_config_wires_services(config, mongo_adapter):
    llm = Mock()

    brain = EchoBrainFactory.create_from_config(
        config, db_adapter=mongo_adapter, llm_provider=llm
    )

    assert isinstance(brain, BrainService)
    assert brain.priority_model == "gpt-priority"
    assert brain.collections == ["memories", "answers", "users"]
    assert brain.retrieval_service.default_limit == 7
    assert brain.retrieval_service.embedding_service.dimensions == 8
    assert brain.answer_service.timeout == 5.0
    assert brain.answer_service.model == "gpt-test"
    assert brain.ingestion_service.background_queue is brain.background_queue
    assert brain.background_queue.max_queue_size == 3
    assert mongo_adapter.collection_exists("memories")
    assert mongo_adapter.collection_exists("users")


def test_create_from_config_builds_adapters(config):
    with patch("echo_brain.factories.brain_factory.MongoDBAdapter") as db_cls, patch(
        "echo_brain.factories.brain_factory.OpenAIAdapter"
    ) as llm_cls:
        brain = EchoBrainFactory.create_from_config(config)

    db_cls.assert_called_once()
    llm_cls.assert_called_once()
    assert brain.db_adapter is db_cls.return_value
