"""
General domain models.

These models define structures used across the system.
"""
from datetime import datetime, timezone
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (as returned by MongoDB) as UTC."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EnrichmentResponse(BaseModel):
    """Structured output requested from the LLM for new content."""
    model_config = ConfigDict(extra="forbid")

    summary: str = Field(..., description="A concise 2-3 sentence summary")
    concepts: List[str] = Field(
        ..., description="5-7 key concepts or topics mentioned")
    confidence: float = Field(
        ...,
        description="Confidence (0.0-1.0) based on content clarity and completeness")
