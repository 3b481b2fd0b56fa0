from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from echo_brain.domains.entitlements import EntitlementPolicy, UsageCounters


class EntitlementService(ABC):
    """Interface for resolving a user's tier policy and usage."""

    @abstractmethod
    def resolve_policy(self, user_id: str, now: Optional[datetime] = None) -> EntitlementPolicy:
        """Resolve the policy in force for a user, applying tier expiry."""
        pass

    @abstractmethod
    def get_usage(self, user_id: str, now: Optional[datetime] = None) -> UsageCounters:
        """Get current usage, rolling the monthly window if needed."""
        pass

    @abstractmethod
    def record_ingest(self, user_id: str) -> int:
        """Count one successful ingest against the monthly quota."""
        pass
