"""
Answer domain models.

An answer is synthesized once per query and never mutated afterwards.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from echo_brain.domains.enums import ActionType, QueryIntent, SourceType, TimelineRole
from echo_brain.domains.models import ensure_utc, utc_now


class SupportingMemory(BaseModel):
    """Evidence entry citing one memory that backs an answer."""
    model_config = ConfigDict(use_enum_values=True)

    memory_id: str
    source_title: Optional[str] = None
    source_type: SourceType
    consumed_at: Optional[datetime] = None
    confidence_score: float = Field(..., ge=0.0, le=1.0)
    relevance_score: float = Field(..., ge=0.0, le=1.0)
    snippet: str

    @field_validator("consumed_at")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class TimelineEntry(BaseModel):
    """One step in the chronological narrative of a timeline answer."""
    model_config = ConfigDict(use_enum_values=True)

    memory_id: str
    date: datetime
    role: TimelineRole
    description: str

    @field_validator("date")
    @classmethod
    def normalize_dates(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class SuggestedAction(BaseModel):
    """Follow-up the UI can offer next to an answer."""
    model_config = ConfigDict(use_enum_values=True)

    label: str
    action_type: ActionType
    payload: Optional[Dict[str, Any]] = None


class AnswerRecord(BaseModel):
    """A synthesized response to one query."""
    model_config = ConfigDict(use_enum_values=True, frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str

    original_query: str
    interpreted_intent: QueryIntent = QueryIntent.UNKNOWN

    answer_text: str

    supporting_memories: List[SupportingMemory] = Field(default_factory=list)

    overall_confidence: float = Field(..., ge=0.0, le=1.0)
    uncertainty_notes: Optional[str] = None

    timeline: Optional[List[TimelineEntry]] = None

    suggested_actions: List[SuggestedAction] = Field(default_factory=list)

    generated_at: datetime = Field(default_factory=utc_now)

    @field_validator("generated_at")
    @classmethod
    def normalize_dates(cls, value: datetime) -> datetime:
        return ensure_utc(value)

    @model_validator(mode="after")
    def check_timeline(self) -> "AnswerRecord":
        if self.timeline is not None and self.interpreted_intent != QueryIntent.TIMELINE:
            raise ValueError("timeline is only present for the timeline intent")
        return self

    def to_document(self) -> Dict[str, Any]:
        """Serialize for the document store, keyed by ``_id``."""
        document = self.model_dump()
        document["_id"] = document.pop("id")
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "AnswerRecord":
        data = dict(document)
        data["id"] = str(data.pop("_id", data.get("id")))
        return cls.model_validate(data)


class AnswerExplanation(BaseModel):
    """Per-memory evidence behind an answer's confidence."""

    answer_id: str
    overall_confidence: float
    uncertainty_notes: Optional[str] = None
    supporting_memories: List[SupportingMemory] = Field(default_factory=list)
