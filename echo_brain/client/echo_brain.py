"""
Simplified client interface for interacting with the Echo Brain system.

This module provides a clean API for end users to capture content and ask
questions without dealing with internal implementation details.
"""

import importlib.util
import json
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from echo_brain.domains.answer import AnswerExplanation, AnswerRecord
from echo_brain.domains.entitlements import UserAccount
from echo_brain.domains.enums import QueryIntent
from echo_brain.domains.memory import MemoryRecord, MemoryStats, SourceMetadata
from echo_brain.factories.brain_factory import EchoBrainFactory
from echo_brain.interfaces.client.client import EchoBrain as EchoBrainInterface
from echo_brain.interfaces.services.brain import BrainService


class EchoBrain(EchoBrainInterface):
    """Simplified client interface for interacting with the brain."""

    def __init__(
        self,
        config_path: str = None,
        config: Dict[str, Any] = None,
        brain_service: Optional[BrainService] = None,
    ):
        """Initialize the brain from config file or dictionary.

        Args:
            config_path: Path to configuration file (JSON or Python)
            config: Configuration dictionary
            brain_service: Pre-built brain service, skipping configuration
        """
        if brain_service is not None:
            self.brain_service = brain_service
            return

        if not config and not config_path:
            raise ValueError("Either config or config_path must be provided")

        if config_path:
            with open(config_path, "r") as f:
                if config_path.endswith(".json"):
                    config = json.load(f)
                else:
                    # Assume it's a Python file
                    spec = importlib.util.spec_from_file_location("config", config_path)
                    config_module = importlib.util.module_from_spec(spec)
                    spec.loader.exec_module(config_module)
                    config = config_module.config

        self.brain_service = EchoBrainFactory.create_from_config(config)

    async def register_user(self, user_id: str, email: str) -> UserAccount:
        return self.brain_service.register_user(user_id, email)

    async def set_student_verification(self, user_id: str, verified_until: datetime) -> bool:
        return self.brain_service.set_student_verification(user_id, verified_until)

    async def ingest(
        self,
        user_id: str,
        content: Union[str, bytes],
        metadata: Optional[Union[SourceMetadata, Dict[str, Any]]] = None,
        timeout: Optional[float] = None,
    ) -> MemoryRecord:
        """Capture content as a memory.

        Args:
            user_id: Owner of the memory
            content: Raw text content
            metadata: Source metadata as a model or plain dictionary
            timeout: Bound on enrichment in seconds

        Returns:
            The stored memory, or the existing one for duplicate content
        """
        if isinstance(metadata, dict):
            metadata = SourceMetadata.model_validate(metadata)
        return await self.brain_service.ingest(
            user_id, content, metadata=metadata, timeout=timeout
        )

    async def query(
        self,
        user_id: str,
        text: str,
        intent: Optional[Union[QueryIntent, str]] = None,
        limit: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> AnswerRecord:
        """Answer a question from the user's memories.

        Args:
            user_id: Owner of the memories
            text: Question text
            intent: Optional intent, classified automatically when omitted
            limit: Requested number of supporting memories
            timeout: Bound on answer generation in seconds

        Returns:
            The synthesized answer
        """
        if intent is not None:
            intent = QueryIntent(intent)
        return await self.brain_service.query(
            user_id, text, intent=intent, limit=limit, timeout=timeout
        )

    async def list_memories(
        self,
        user_id: str,
        limit: int = 50,
        skip: int = 0,
        source_type: Optional[str] = None,
        include_deleted: bool = False,
    ) -> List[MemoryRecord]:
        return self.brain_service.list_memories(
            user_id,
            limit=limit,
            skip=skip,
            source_type=source_type,
            include_deleted=include_deleted,
        )

    async def get_memory(self, user_id: str, memory_id: str) -> Optional[MemoryRecord]:
        return self.brain_service.get_memory(user_id, memory_id)

    async def delete_memory(self, user_id: str, memory_id: str) -> bool:
        return self.brain_service.delete_memory(user_id, memory_id)

    async def verify_memory(
        self, user_id: str, memory_id: str, verified: bool = True, notes: Optional[str] = None
    ) -> bool:
        return self.brain_service.verify_memory(user_id, memory_id, verified, notes)

    async def stats(self, user_id: str) -> MemoryStats:
        return self.brain_service.stats(user_id)

    async def list_answers(self, user_id: str, limit: int = 20, skip: int = 0) -> List[AnswerRecord]:
        return self.brain_service.list_answers(user_id, limit=limit, skip=skip)

    async def explain_answer(self, user_id: str, answer_id: str) -> AnswerExplanation:
        return self.brain_service.explain_answer(user_id, answer_id)

    async def health(self) -> Dict[str, Any]:
        return self.brain_service.health()

    async def close(self) -> None:
        await self.brain_service.close()
