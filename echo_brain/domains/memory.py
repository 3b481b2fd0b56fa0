"""
Memory domain models.

These models define the captured unit of knowledge and the structures
produced around it during ingestion and retrieval.
"""
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from echo_brain.domains.enums import SourceType
from echo_brain.domains.models import ensure_utc, utc_now


class SourceMetadata(BaseModel):
    """Provenance supplied by the caller alongside raw content."""
    model_config = ConfigDict(use_enum_values=True)

    source_type: SourceType = Field(SourceType.NOTE, description="Kind of source")
    source_url: Optional[str] = Field(None, description="Where the content came from")
    source_title: Optional[str] = Field(None, description="Title of the source")
    source_author: Optional[str] = Field(None, description="Author of the source")
    consumed_at: Optional[datetime] = Field(
        None, description="When the user read, watched or heard the source")
    source_published_at: Optional[datetime] = Field(
        None, description="When the source itself was published")

    @field_validator("consumed_at", "source_published_at")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)


class Enrichment(BaseModel):
    """Summary, concepts and confidence generated for new content."""
    summary: str
    concepts: List[str] = Field(default_factory=list)
    confidence: float = Field(..., ge=0.0, le=1.0)
    degraded: bool = Field(
        False, description="True when produced by the local heuristic")


class MemoryRecord(BaseModel):
    """A single captured, enriched unit of knowledge."""
    model_config = ConfigDict(use_enum_values=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    user_id: str

    # Content
    raw_content: str
    raw_content_hash: str
    cleaned_content: str

    # Provenance
    source_type: SourceType = SourceType.NOTE
    source_url: Optional[str] = None
    source_title: Optional[str] = None
    source_author: Optional[str] = None

    # Chronology
    created_at: datetime = Field(default_factory=utc_now)
    consumed_at: Optional[datetime] = None
    source_published_at: Optional[datetime] = None

    # Intelligence
    summary: str = ""
    key_concepts: List[str] = Field(default_factory=list)
    embedding: Optional[List[float]] = None

    # Graph connections
    related_memory_ids: List[str] = Field(default_factory=list)
    relationship_reason: List[str] = Field(default_factory=list)

    # Verification
    confidence_score: float = Field(0.5, ge=0.0, le=1.0)
    user_verified: bool = False
    correction_notes: Optional[str] = None

    # Retention
    importance_weight: float = Field(0.5, ge=0.0, le=1.0)
    decay_rate: float = Field(0.1, ge=0.0)

    deleted_at: Optional[datetime] = None

    @field_validator("created_at", "consumed_at", "source_published_at", "deleted_at")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    @model_validator(mode="after")
    def check_relationships(self) -> "MemoryRecord":
        if len(self.relationship_reason) != len(self.related_memory_ids):
            raise ValueError(
                "relationship_reason must be parallel to related_memory_ids")
        return self

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def reference_time(self) -> datetime:
        """When the user experienced this memory, falling back to capture time."""
        return self.consumed_at or self.created_at

    def to_document(self) -> Dict[str, Any]:
        """Serialize for the document store, keyed by ``_id``."""
        document = self.model_dump()
        document["_id"] = document.pop("id")
        document["is_deleted"] = self.is_deleted
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "MemoryRecord":
        data = dict(document)
        data["id"] = str(data.pop("_id", data.get("id")))
        data.pop("is_deleted", None)
        return cls.model_validate(data)


class ScoreBreakdown(BaseModel):
    """Individual factors that make up a composite relevance score."""
    semantic: float = 0.0
    temporal: float = 0.0
    importance: float = 0.0
    graph: float = 0.0
    confidence: float = 0.0


class ScoredMemory(BaseModel):
    """A memory with its composite relevance score attached."""
    memory: MemoryRecord
    score: float
    factors: ScoreBreakdown = Field(default_factory=ScoreBreakdown)


class MemoryStats(BaseModel):
    """Aggregate statistics over an owner's live memories."""
    total: int = 0
    by_type: Dict[str, int] = Field(default_factory=dict)
    avg_confidence: float = 0.0
    verified_count: int = 0
