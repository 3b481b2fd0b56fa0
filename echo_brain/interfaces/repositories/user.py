from abc import ABC, abstractmethod
from datetime import datetime
from typing import Optional

from echo_brain.domains.entitlements import UsageCounters, UserAccount
from echo_brain.domains.enums import EntitlementTier


class UserRepository(ABC):
    """Interface for the user and entitlement store."""

    @abstractmethod
    def get_user(self, user_id: str) -> Optional[UserAccount]:
        """Get a user account."""
        pass

    @abstractmethod
    def get_tier(self, user_id: str) -> Optional[EntitlementTier]:
        """Get the stored entitlement tier of a user."""
        pass

    @abstractmethod
    def upsert_user(self, account: UserAccount) -> UserAccount:
        """Create the user if absent and return the stored account."""
        pass

    @abstractmethod
    def get_usage_counters(self, user_id: str) -> UsageCounters:
        """Get the monthly ingest counter and its reset timestamp."""
        pass

    @abstractmethod
    def increment_monthly_ingest(self, user_id: str) -> int:
        """Atomically increment the monthly ingest counter, returning the new value."""
        pass

    @abstractmethod
    def reset_monthly_ingest(self, user_id: str, stale_before: datetime, now: datetime) -> bool:
        """Zero the counter if it was last reset before ``stale_before``."""
        pass

    @abstractmethod
    def downgrade_tier(self, user_id: str, tier: EntitlementTier) -> bool:
        """Move a user to a lower tier."""
        pass

    @abstractmethod
    def set_student_verification(self, user_id: str, verified_until: datetime) -> bool:
        """Grant the student tier until the given time."""
        pass
