"""
Factory for creating and wiring components of the Echo Brain system.

This module handles the creation and dependency injection for all
services and components used in the system.
"""

import logging
from typing import Any, Dict, Optional

# Service imports
from echo_brain.services.answer import AnswerSynthesizer
from echo_brain.services.background import BackgroundEnrichmentQueue
from echo_brain.services.brain import BrainService
from echo_brain.services.embedding import EmbeddingService
from echo_brain.services.enrichment import EnrichmentService
from echo_brain.services.entitlements import EntitlementService
from echo_brain.services.ingestion import IngestionService
from echo_brain.services.intent import IntentService
from echo_brain.services.retrieval import RetrievalService

# Repository imports
from echo_brain.repositories.answer import MongoAnswerRepository
from echo_brain.repositories.memory import MongoMemoryRepository
from echo_brain.repositories.user import MongoUserRepository

# Adapter imports
from echo_brain.adapters.mongodb_adapter import MongoDBAdapter
from echo_brain.adapters.openai_adapter import (
    DEFAULT_EMBEDDING_DIMENSIONS,
    OpenAIAdapter,
)
from echo_brain.interfaces.providers.data_storage import DataStorageProvider
from echo_brain.interfaces.providers.llm import LLMProvider

# Setup logger for this module
logger = logging.getLogger(__name__)

DEFAULT_LLM_TIMEOUT = 30.0
DEFAULT_BACKGROUND_WORKERS = 1
DEFAULT_BACKGROUND_QUEUE_SIZE = 100
DEFAULT_RESULT_LIMIT = 10


class EchoBrainFactory:
    """Factory for creating and wiring components of the Echo Brain system."""

    @staticmethod
    def create_db_adapter(config: Dict[str, Any]) -> MongoDBAdapter:
        if "mongo" not in config:
            raise ValueError("MongoDB configuration is required.")
        if "connection_string" not in config["mongo"]:
            raise ValueError("MongoDB connection string is required.")
        if "database" not in config["mongo"]:
            raise ValueError("MongoDB database name is required.")
        return MongoDBAdapter(
            connection_string=config["mongo"]["connection_string"],
            database_name=config["mongo"]["database"],
        )

    @staticmethod
    def create_llm_adapter(config: Dict[str, Any]) -> OpenAIAdapter:
        # OpenAI is the only supported LLM provider
        if "openai" not in config or "api_key" not in config["openai"]:
            raise ValueError("OpenAI API key is required in config.")

        openai_config = config["openai"]
        llm_model = openai_config.get("model")
        if llm_model:
            logger.info(f"Using OpenAI as LLM provider with model: {llm_model}")
        else:
            logger.info("Using OpenAI as LLM provider")

        logfire_api_key = None
        if "logfire" in config:
            if "api_key" not in config["logfire"]:
                raise ValueError("Pydantic Logfire API key is required.")
            logfire_api_key = config["logfire"]["api_key"]

        return OpenAIAdapter(
            api_key=openai_config["api_key"],
            model=llm_model,
            embedding_model=openai_config.get("embedding_model"),
            embedding_dimensions=openai_config.get("embedding_dimensions"),
            logfire_api_key=logfire_api_key,
        )

    @staticmethod
    def create_from_config(
        config: Dict[str, Any],
        db_adapter: Optional[DataStorageProvider] = None,
        llm_provider: Optional[LLMProvider] = None,
    ) -> BrainService:
        """Create the brain from configuration.

        Args:
            config: Configuration dictionary
            db_adapter: Optional pre-built storage provider
            llm_provider: Optional pre-built LLM provider

        Returns:
            Configured BrainService instance
        """
        db_adapter = db_adapter or EchoBrainFactory.create_db_adapter(config)
        llm_provider = llm_provider or EchoBrainFactory.create_llm_adapter(config)

        openai_config = config.get("openai", {})
        brain_config = config.get("brain", {})
        llm_timeout = brain_config.get("llm_timeout", DEFAULT_LLM_TIMEOUT)
        model = openai_config.get("model")

        # Create repositories
        memory_repository = MongoMemoryRepository(db_adapter)
        answer_repository = MongoAnswerRepository(db_adapter)
        user_repository = MongoUserRepository(db_adapter)

        # Create primary services
        entitlement_service = EntitlementService(
            user_repository=user_repository,
            memory_repository=memory_repository,
        )
        embedding_service = EmbeddingService(
            llm_provider=llm_provider,
            dimensions=openai_config.get(
                "embedding_dimensions", DEFAULT_EMBEDDING_DIMENSIONS
            ),
            timeout=llm_timeout,
            model=openai_config.get("embedding_model"),
        )
        background_queue = BackgroundEnrichmentQueue(
            memory_repository=memory_repository,
            embedding_service=embedding_service,
            workers=brain_config.get("background_workers", DEFAULT_BACKGROUND_WORKERS),
            max_queue_size=brain_config.get(
                "background_queue_size", DEFAULT_BACKGROUND_QUEUE_SIZE
            ),
        )
        ingestion_service = IngestionService(
            memory_repository=memory_repository,
            entitlement_service=entitlement_service,
            enrichment_service=EnrichmentService(
                llm_provider=llm_provider, timeout=llm_timeout, model=model
            ),
            background_queue=background_queue,
        )
        retrieval_service = RetrievalService(
            memory_repository=memory_repository,
            embedding_service=embedding_service,
            default_limit=brain_config.get("default_limit", DEFAULT_RESULT_LIMIT),
        )
        answer_service = AnswerSynthesizer(
            llm_provider=llm_provider, timeout=llm_timeout, model=model
        )
        intent_service = IntentService(
            llm_provider=llm_provider, timeout=llm_timeout, model=model
        )

        priority_model = openai_config.get("priority_model")
        if priority_model:
            logger.info(f"Priority model for eligible tiers: {priority_model}")

        return BrainService(
            ingestion_service=ingestion_service,
            retrieval_service=retrieval_service,
            answer_service=answer_service,
            intent_service=intent_service,
            entitlement_service=entitlement_service,
            memory_repository=memory_repository,
            answer_repository=answer_repository,
            db_adapter=db_adapter,
            priority_model=priority_model,
            collections=[
                memory_repository.collection,
                answer_repository.collection,
                user_repository.collection,
            ],
            background_queue=background_queue,
        )
