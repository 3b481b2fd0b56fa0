"""
Query intent classification.

The LLM classifies queries; a keyword heuristic takes over when it is
unavailable or unsure.
"""
import asyncio
import logging
from typing import Optional

from echo_brain.domains.enums import QueryIntent
from echo_brain.domains.routing import IntentAnalysis
from echo_brain.interfaces.providers.llm import LLMProvider

logger = logging.getLogger(__name__)

MIN_CONFIDENCE = 0.4

INTENT_KEYWORDS = (
    (QueryIntent.TIMELINE, ("timeline", "evolve", "evolved", "over time", "history", "when did", "progress")),
    (QueryIntent.COMPARISON, ("compare", "comparison", " vs ", "versus", "difference between", "differ")),
    (QueryIntent.SUMMARY, ("summarize", "summary", "tl;dr", "recap", "key points")),
    (QueryIntent.OVERVIEW, ("overview", "what is", "what are", "explain", "tell me about")),
)


def classify_by_keywords(query: str) -> QueryIntent:
    text = f" {query.lower()} "
    for intent, keywords in INTENT_KEYWORDS:
        if any(keyword in text for keyword in keywords):
            return intent
    return QueryIntent.UNKNOWN


class IntentService:
    """Service for classifying the purpose of a query."""

    def __init__(
        self,
        llm_provider: Optional[LLMProvider] = None,
        timeout: Optional[float] = 30.0,
        model: Optional[str] = None,
    ):
        self.llm_provider = llm_provider
        self.timeout = timeout
        self.model = model

    async def classify(self, query: str) -> QueryIntent:
        """Classify a query into an intent. Never raises."""
        if self.llm_provider is None:
            return classify_by_keywords(query)

        prompt = f"""
        Classify the purpose of this question about the user's saved memories.

        INTENTS:
        - overview: a broad explanation of a topic
        - timeline: how understanding of a topic changed over time
        - summary: a concise recap of key points
        - comparison: contrasting two or more things
        - unknown: none of the above

        QUESTION: {query}
        """
        try:
            analysis = await asyncio.wait_for(
                self.llm_provider.parse_structured_output(
                    prompt=prompt,
                    system_prompt="You classify questions. Respond with the intent and your confidence.",
                    model_class=IntentAnalysis,
                    model=self.model,
                ),
                timeout=self.timeout,
            )
        except Exception as e:
            logger.warning(f"Intent classification failed, using keywords: {e}")
            return classify_by_keywords(query)

        if analysis.confidence < MIN_CONFIDENCE:
            return classify_by_keywords(query)
        return QueryIntent(analysis.intent)
