"""
Common enumerations used across the Echo Brain system.
"""
from enum import Enum


class SourceType(str, Enum):
    """Where a memory came from."""
    NOTE = "note"
    WEB = "web"
    PDF = "pdf"
    VIDEO = "video"
    CONVERSATION = "conversation"


class QueryIntent(str, Enum):
    """Classified purpose of a query, driving ranking and prompt shape."""
    OVERVIEW = "overview"
    TIMELINE = "timeline"
    SUMMARY = "summary"
    COMPARISON = "comparison"
    UNKNOWN = "unknown"


class TimelineRole(str, Enum):
    """Narrative role of a memory within a timeline answer."""
    FIRST_ENCOUNTER = "first_encounter"
    REFINEMENT = "refinement"
    CONTRADICTION = "contradiction"


class ActionType(str, Enum):
    """Kind of follow-up action suggested alongside an answer."""
    EXPAND = "expand"
    SUMMARIZE = "summarize"
    OPEN_SOURCE = "open_source"
    COMPARE = "compare"


class EntitlementTier(str, Enum):
    """Named resource policies."""
    FREE = "free"
    PRO = "pro"
    STUDENT_PRO = "student_pro"


class QuotaKind(str, Enum):
    """Which ceiling an ingest request ran into."""
    MONTHLY_INGEST = "monthly_ingest"
    MEMORY_COUNT = "memory_count"
    FILE_SIZE = "file_size"


class EntitlementCode(str, Enum):
    """Error codes raised by entitlement assertions."""
    MONTHLY_INGEST_LIMIT_EXCEEDED = "MONTHLY_INGEST_LIMIT_EXCEEDED"
    MEMORY_LIMIT_EXCEEDED = "MEMORY_LIMIT_EXCEEDED"
    FILE_SIZE_EXCEEDED = "FILE_SIZE_EXCEEDED"
    TIMELINE_ACCESS_DENIED = "TIMELINE_ACCESS_DENIED"
    CONFIDENCE_DETAILS_ACCESS_DENIED = "CONFIDENCE_DETAILS_ACCESS_DENIED"
