"""
Embedding service implementation.

Semantic vectors come from the LLM provider. When the provider is unavailable
a deterministic pseudo-vector derived from the text hash is used instead, so
the same text always maps to the same vector.
"""
import asyncio
import hashlib
import logging
import math
from typing import List, Optional, Sequence

from echo_brain.interfaces.providers.llm import LLMProvider

logger = logging.getLogger(__name__)


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    """Cosine similarity clamped to [0, 1]; 0 for missing or mismatched vectors."""
    if not a or not b or len(a) != len(b):
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return max(0.0, min(1.0, dot / (norm_a * norm_b)))


def fallback_embedding(text: str, dimensions: int) -> List[float]:
    """Deterministic pseudo-random vector seeded from the text hash."""
    seed = int(hashlib.sha256(text.encode("utf-8")).hexdigest()[:8], 16)
    vector = []
    for _ in range(dimensions):
        seed = (seed * 9301 + 49297) % 233280
        vector.append(seed / 233280)
    return vector


class EmbeddingService:
    """Service for computing semantic vectors."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        dimensions: int = 1536,
        timeout: Optional[float] = 30.0,
        model: Optional[str] = None,
    ):
        self.llm_provider = llm_provider
        self.dimensions = dimensions
        self.timeout = timeout
        self.model = model

    async def embed(self, text: str) -> List[float]:
        if not text:
            return fallback_embedding("", self.dimensions)
        try:
            return await asyncio.wait_for(
                self.llm_provider.embed_text(
                    text, model=self.model, dimensions=self.dimensions
                ),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning(f"Embedding failed, using deterministic fallback: {e}")
            return fallback_embedding(text, self.dimensions)
