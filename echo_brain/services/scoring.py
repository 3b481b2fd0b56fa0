"""
Composite relevance scoring of candidate memories.

Pure functions only, so ranking can be tested against synthetic records.
"""
import math
from datetime import datetime
from typing import List, Optional, Sequence

from echo_brain.domains.enums import QueryIntent
from echo_brain.domains.memory import MemoryRecord, ScoreBreakdown, ScoredMemory
from echo_brain.domains.models import ensure_utc, utc_now
from echo_brain.services.embedding import cosine_similarity

SEMANTIC_WEIGHT = 0.40
TEMPORAL_WEIGHT = 0.20
IMPORTANCE_WEIGHT = 0.15
GRAPH_WEIGHT = 0.15
CONFIDENCE_WEIGHT = 0.10

SECONDS_PER_DAY = 86400.0


def temporal_factor(memory: MemoryRecord, now: datetime) -> float:
    """Exponential recency decay over days since the memory was experienced."""
    age_days = (now - memory.reference_time).total_seconds() / SECONDS_PER_DAY
    return math.exp(-memory.decay_rate * max(0.0, age_days))


def graph_factor(memory: MemoryRecord, candidate_ids: set) -> float:
    """Fraction of the memory's links that point inside the candidate set."""
    if not memory.related_memory_ids:
        return 0.0
    connected = sum(1 for rid in memory.related_memory_ids if rid in candidate_ids)
    return connected / len(memory.related_memory_ids)


def _newest_first(item: ScoredMemory):
    return -item.memory.created_at.timestamp(), item.memory.id


class ScoringEngine:
    """Ranks candidate memories for a query."""

    def score(
        self,
        candidates: List[MemoryRecord],
        query_vector: Optional[Sequence[float]],
        intent: QueryIntent = QueryIntent.UNKNOWN,
        now: Optional[datetime] = None,
    ) -> List[ScoredMemory]:
        """Score and order candidates.

        Args:
            candidates: Memories to rank
            query_vector: Semantic vector of the query, may be None
            intent: Query intent driving the final ordering
            now: Reference time for recency decay

        Returns:
            Scored memories in presentation order
        """
        now = ensure_utc(now) or utc_now()
        candidate_ids = {m.id for m in candidates}

        scored = []
        for memory in candidates:
            factors = ScoreBreakdown(
                semantic=cosine_similarity(query_vector, memory.embedding),
                temporal=temporal_factor(memory, now),
                importance=memory.importance_weight,
                graph=graph_factor(memory, candidate_ids),
                confidence=memory.confidence_score,
            )
            total = (
                SEMANTIC_WEIGHT * factors.semantic
                + TEMPORAL_WEIGHT * factors.temporal
                + IMPORTANCE_WEIGHT * factors.importance
                + GRAPH_WEIGHT * factors.graph
                + CONFIDENCE_WEIGHT * factors.confidence
            )
            scored.append(ScoredMemory(memory=memory, score=total, factors=factors))

        return self.order(scored, intent)

    def order(self, scored: List[ScoredMemory], intent: QueryIntent) -> List[ScoredMemory]:
        intent = QueryIntent(intent)
        # Stable sorts: apply the tie-break first, then the primary key
        ordered = sorted(scored, key=_newest_first)
        if intent == QueryIntent.TIMELINE:
            return sorted(ordered, key=lambda s: s.memory.created_at)
        if intent == QueryIntent.SUMMARY:
            return sorted(ordered, key=lambda s: s.memory.importance_weight, reverse=True)
        return sorted(ordered, key=lambda s: s.score, reverse=True)
