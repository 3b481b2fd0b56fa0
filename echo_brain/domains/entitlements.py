"""
Entitlement domain models.

These models describe tier policies, per-user usage counters and the user
account that owns them.
"""
from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from echo_brain.domains.enums import EntitlementTier
from echo_brain.domains.models import ensure_utc, utc_now


class EntitlementPolicy(BaseModel):
    """Resolved, read-only limits and feature flags of a tier."""
    model_config = ConfigDict(frozen=True)

    memory_limit: Optional[int] = Field(
        ..., description="Maximum stored memories, None for unlimited")
    monthly_ingest_limit: int = Field(..., description="Ingests allowed per calendar month")
    max_file_size_mb: float = Field(..., description="Largest accepted content size")
    vector_search_depth: int = Field(..., description="Top-K results a query may return")
    answer_confidence_detail: bool = False
    timeline_access: bool = True
    weekly_insights: bool = False
    priority_models: bool = False


class UsageCounters(BaseModel):
    """Time-windowed usage figures for one user."""
    monthly_ingest_count: int = 0
    last_ingest_reset: datetime = Field(default_factory=utc_now)
    memory_count: int = 0

    @field_validator("last_ingest_reset")
    @classmethod
    def normalize_dates(cls, value: datetime) -> datetime:
        return ensure_utc(value)


class UserAccount(BaseModel):
    """A user as seen by the entitlement store."""
    model_config = ConfigDict(use_enum_values=True)

    id: str
    email: str
    entitlement_tier: EntitlementTier = EntitlementTier.FREE
    student_verified_until: Optional[datetime] = None
    monthly_ingest_count: int = 0
    last_ingest_reset: datetime = Field(default_factory=utc_now)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator("student_verified_until", "last_ingest_reset", "created_at")
    @classmethod
    def normalize_dates(cls, value: Optional[datetime]) -> Optional[datetime]:
        return ensure_utc(value)

    def to_document(self) -> Dict[str, Any]:
        document = self.model_dump()
        document["_id"] = document.pop("id")
        return document

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> "UserAccount":
        data = dict(document)
        data["id"] = str(data.pop("_id", data.get("id")))
        return cls.model_validate(data)
