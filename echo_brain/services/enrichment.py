"""
Enrichment service implementation.

Asks the LLM for a summary, key concepts and a confidence estimate. Any
failure falls back to a local heuristic so ingestion always completes.
"""
import asyncio
import logging
import re
from typing import List, Optional

from echo_brain.domains.memory import Enrichment
from echo_brain.domains.models import EnrichmentResponse
from echo_brain.interfaces.providers.llm import LLMProvider

logger = logging.getLogger(__name__)

ENRICHMENT_SYSTEM_PROMPT = """
You analyze content a user has saved to their personal knowledge base.
Summarize it faithfully without adding facts that are not in the content.
"""

_WORD_RE = re.compile(r"\w+")


def heuristic_summary(content: str) -> str:
    """First three sentences of the content."""
    sentences = [s.strip() for s in content.split(".") if s.strip()]
    if not sentences:
        return content.strip()
    return ". ".join(sentences[:3])


def heuristic_concepts(content: str, count: int = 5) -> List[str]:
    """The ``count`` longest distinct words, in order of first appearance on ties."""
    seen = {}
    for word in _WORD_RE.findall(content.lower()):
        if word not in seen:
            seen[word] = len(seen)
    ranked = sorted(seen, key=lambda w: (-len(w), seen[w]))
    return ranked[:count]


def heuristic_enrichment(content: str) -> Enrichment:
    return Enrichment(
        summary=heuristic_summary(content),
        concepts=heuristic_concepts(content),
        confidence=min(1.0, len(content) / 1000),
        degraded=True,
    )


class EnrichmentService:
    """Service for generating summaries and concepts for new content."""

    def __init__(
        self,
        llm_provider: LLMProvider,
        timeout: Optional[float] = 30.0,
        model: Optional[str] = None,
    ):
        """Initialize the enrichment service.

        Args:
            llm_provider: Provider for language model interactions
            timeout: Default bound on the LLM call in seconds
            model: Optional model override
        """
        self.llm_provider = llm_provider
        self.timeout = timeout
        self.model = model

    async def enrich(self, content: str, timeout: Optional[float] = None) -> Enrichment:
        """Enrich cleaned content. Never raises.

        Args:
            content: Cleaned content
            timeout: Bound on the LLM call, overriding the default

        Returns:
            Enrichment, marked degraded when produced by the heuristic
        """
        prompt = f"""
        Analyze this content and provide:
        1. A concise 2-3 sentence summary
        2. 5-7 key concepts or topics mentioned
        3. A confidence score (0.0-1.0) based on content clarity and completeness

        Content: {content}
        """

        try:
            response = await asyncio.wait_for(
                self.llm_provider.parse_structured_output(
                    prompt=prompt,
                    system_prompt=ENRICHMENT_SYSTEM_PROMPT,
                    model_class=EnrichmentResponse,
                    model=self.model,
                ),
                timeout=timeout if timeout is not None else self.timeout,
            )
            summary = (response.summary or "").strip()
            if not summary:
                raise ValueError("Enrichment returned an empty summary")
            concepts = [c.strip() for c in response.concepts if c and c.strip()]
            return Enrichment(
                summary=summary,
                concepts=list(dict.fromkeys(concepts)),
                confidence=max(0.0, min(1.0, float(response.confidence))),
            )
        except Exception as e:
            logger.warning(f"Enrichment failed, using heuristic fallback: {e}")
            return heuristic_enrichment(content)
