"""
Answer synthesizer implementation.

Composes a grounded answer from ranked memories. Generation failures
propagate as SynthesisError since there is no local fallback for the answer
text itself.
"""
import asyncio
import logging
from typing import Any, Dict, List, Optional

from echo_brain.domains.answer import (
    AnswerRecord,
    SuggestedAction,
    SupportingMemory,
    TimelineEntry,
)
from echo_brain.domains.enums import ActionType, QueryIntent, TimelineRole
from echo_brain.domains.errors import SynthesisError
from echo_brain.domains.memory import MemoryRecord
from echo_brain.interfaces.providers.llm import LLMProvider
from echo_brain.interfaces.services.answer import AnswerService as AnswerServiceInterface

logger = logging.getLogger(__name__)

CONTEXT_SEPARATOR = "\n---\n"
SNIPPET_LENGTH = 200
NO_EVIDENCE_CONFIDENCE = 0.1

VERY_LIMITED_NOTE = (
    "I found very limited information in your saved memories. "
    "This answer may not be comprehensive."
)
LIMITED_NOTE = (
    "I found some relevant information, but your saved memories on this topic are limited."
)
NO_MEMORIES_NOTE = "I couldn't find any relevant memories in your saved content."

SYSTEM_PROMPT = """
You answer questions using only the user's saved memories provided to you.
Never invent facts that are not present in the memories. If the memories do
not contain the answer, say so.
"""

INTENT_PROMPTS = {
    QueryIntent.OVERVIEW: (
        "Based on the following saved memories, provide a comprehensive answer about: {query}\n\n"
        "{context}\n\n"
        "Provide a clear, informative response that directly answers the question. "
        "Use only the information in the memories."
    ),
    QueryIntent.TIMELINE: (
        'Based on the following saved memories, show how understanding of "{query}" '
        "has evolved over time:\n\n"
        "{context}\n\n"
        "Write a timeline-style response that shows how the user's knowledge grew or changed."
    ),
    QueryIntent.SUMMARY: (
        "Based on the following saved memories, provide a concise summary about: {query}\n\n"
        "{context}\n\n"
        "Write a brief, well-structured summary of the key points in the memories."
    ),
    QueryIntent.COMPARISON: (
        "Based on the following saved memories, compare the things asked about in: {query}\n\n"
        "{context}\n\n"
        "Contrast them point by point using only the information in the memories."
    ),
}

DEFAULT_PROMPT = (
    "Based on the following saved memories, provide relevant information about: {query}\n\n"
    "{context}\n\n"
    "Provide a helpful response using only the information from these memories."
)


def format_context(memories: List[MemoryRecord]) -> str:
    blocks = []
    for index, memory in enumerate(memories, start=1):
        blocks.append(
            f"[Memory {index}]\n"
            f"Source: {memory.source_title or 'Unknown'}\n"
            f"Date: {memory.reference_time.isoformat()}\n"
            f"Content: {memory.cleaned_content}\n"
            f"Summary: {memory.summary}\n"
        )
    return CONTEXT_SEPARATOR.join(blocks)


def build_prompt(query: str, memories: List[MemoryRecord], intent: QueryIntent) -> str:
    template = INTENT_PROMPTS.get(QueryIntent(intent), DEFAULT_PROMPT)
    return template.format(query=query, context=format_context(memories))


def snippet(content: str) -> str:
    if len(content) <= SNIPPET_LENGTH:
        return content
    return content[:SNIPPET_LENGTH] + "..."


def relevance_score(memory: MemoryRecord) -> float:
    # Stands in for an independent relevance model
    return memory.confidence_score


def overall_confidence(memories: List[MemoryRecord]) -> float:
    if not memories:
        return NO_EVIDENCE_CONFIDENCE
    average = sum(m.confidence_score for m in memories) / len(memories)
    count_bonus = min(len(memories) / 5, 0.2)
    return min(1.0, average + count_bonus)


def uncertainty_note(confidence: float, memory_count: int) -> Optional[str]:
    if confidence < 0.3:
        return VERY_LIMITED_NOTE
    if confidence < 0.6:
        return LIMITED_NOTE
    if memory_count == 0:
        return NO_MEMORIES_NOTE
    return None


def suggested_actions(
    query: str, memories: List[MemoryRecord], intent: QueryIntent
) -> List[SuggestedAction]:
    actions = [
        SuggestedAction(
            label="Ask follow-up",
            action_type=ActionType.EXPAND,
            payload={"query": query},
        )
    ]
    if QueryIntent(intent) != QueryIntent.TIMELINE:
        actions.append(
            SuggestedAction(
                label="View timeline",
                action_type=ActionType.EXPAND,
                payload={"query": query, "intent": QueryIntent.TIMELINE.value},
            )
        )
    if memories:
        actions.append(
            SuggestedAction(
                label="Revisit sources",
                action_type=ActionType.OPEN_SOURCE,
                payload={"memory_ids": [m.id for m in memories[:3]]},
            )
        )
    return actions


class TimelineRoleClassifier:
    """Assigns narrative roles to memories in a timeline."""

    def classify(self, memory: MemoryRecord, memories: List[MemoryRecord]) -> TimelineRole:
        concepts = set(memory.key_concepts)
        if not concepts:
            return TimelineRole.FIRST_ENCOUNTER

        same_topic = [m for m in memories if concepts.intersection(m.key_concepts)]
        same_topic.sort(key=lambda m: (m.created_at, m.id))
        if same_topic[0].id == memory.id:
            return TimelineRole.FIRST_ENCOUNTER
        if self.detect_contradiction(memory, same_topic):
            return TimelineRole.CONTRADICTION
        return TimelineRole.REFINEMENT

    def detect_contradiction(self, memory: MemoryRecord, same_topic: List[MemoryRecord]) -> bool:
        """Hook for contradiction detection between same-topic memories.

        Always False in this version.
        """
        return False


def build_timeline(
    memories: List[MemoryRecord], classifier: Optional[TimelineRoleClassifier] = None
) -> List[TimelineEntry]:
    classifier = classifier or TimelineRoleClassifier()
    ordered = sorted(memories, key=lambda m: (m.created_at, m.id))
    return [
        TimelineEntry(
            memory_id=memory.id,
            date=memory.created_at,
            role=classifier.classify(memory, ordered),
            description=memory.summary,
        )
        for memory in ordered
    ]


class AnswerSynthesizer(AnswerServiceInterface):
    """Service for composing answers from ranked memories."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        timeout: Optional[float] = 30.0,
        model: Optional[str] = None,
        timeline_classifier: Optional[TimelineRoleClassifier] = None,
    ):
        """Initialize the answer synthesizer.

        Args:
            llm_provider: Provider for language model interactions
            timeout: Default bound on the generation call in seconds
            model: Optional model override
            timeline_classifier: Optional custom timeline role classifier
        """
        self.llm_provider = llm_provider
        self.timeout = timeout
        self.model = model
        self.timeline_classifier = timeline_classifier or TimelineRoleClassifier()

    async def _generate(self, prompt: str, timeout: Optional[float], model: Optional[str]) -> str:
        try:
            text = await asyncio.wait_for(
                self.llm_provider.generate_text(
                    prompt, system_prompt=SYSTEM_PROMPT, model=model or self.model
                ),
                timeout=timeout if timeout is not None else self.timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error("Answer generation timed out")
            raise SynthesisError("timeout") from e
        except Exception as e:
            logger.error(f"Answer generation failed: {e}")
            raise SynthesisError(type(e).__name__, f"Answer synthesis failed: {e}") from e

        if not text or not text.strip():
            raise SynthesisError("empty_response")
        return text.strip()

    async def synthesize(
        self,
        query: str,
        memories: List[MemoryRecord],
        intent: QueryIntent,
        user_id: str,
        timeout: Optional[float] = None,
        model: Optional[str] = None,
    ) -> AnswerRecord:
        intent = QueryIntent(intent)
        logger.info(f"Synthesizing {intent.value} answer from {len(memories)} memories")

        answer_text = await self._generate(build_prompt(query, memories, intent), timeout, model)

        supporting = [
            SupportingMemory(
                memory_id=m.id,
                source_title=m.source_title,
                source_type=m.source_type,
                consumed_at=m.consumed_at,
                confidence_score=m.confidence_score,
                relevance_score=relevance_score(m),
                snippet=snippet(m.cleaned_content),
            )
            for m in memories
        ]
        confidence = overall_confidence(memories)

        fields: Dict[str, Any] = {}
        if intent == QueryIntent.TIMELINE:
            fields["timeline"] = build_timeline(memories, self.timeline_classifier)

        return AnswerRecord(
            user_id=user_id,
            original_query=query,
            interpreted_intent=intent,
            answer_text=answer_text,
            supporting_memories=supporting,
            overall_confidence=confidence,
            uncertainty_notes=uncertainty_note(confidence, len(memories)),
            suggested_actions=suggested_actions(query, memories, intent),
            **fields,
        )
