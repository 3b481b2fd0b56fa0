"""
Entitlement service implementation.

Tier policies are a fixed lookup table. Assertion functions raise typed
errors instead of returning booleans so callers fail loudly and specifically.
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, Optional

from echo_brain.domains.entitlements import EntitlementPolicy, UsageCounters, UserAccount
from echo_brain.domains.enums import EntitlementCode, EntitlementTier, QuotaKind
from echo_brain.domains.errors import EntitlementError, QuotaExceeded, UserNotFoundError
from echo_brain.domains.models import ensure_utc, utc_now
from echo_brain.interfaces.repositories.memory import MemoryRepository
from echo_brain.interfaces.repositories.user import UserRepository
from echo_brain.interfaces.services.entitlements import (
    EntitlementService as EntitlementServiceInterface,
)

logger = logging.getLogger(__name__)

TIER_POLICIES: Dict[EntitlementTier, EntitlementPolicy] = {
    EntitlementTier.FREE: EntitlementPolicy(
        memory_limit=50,
        monthly_ingest_limit=100,
        max_file_size_mb=5,
        vector_search_depth=10,
        answer_confidence_detail=False,
        timeline_access=True,
        weekly_insights=False,
        priority_models=False,
    ),
    EntitlementTier.PRO: EntitlementPolicy(
        memory_limit=None,
        monthly_ingest_limit=5000,
        max_file_size_mb=50,
        vector_search_depth=50,
        answer_confidence_detail=True,
        timeline_access=True,
        weekly_insights=True,
        priority_models=True,
    ),
    EntitlementTier.STUDENT_PRO: EntitlementPolicy(
        memory_limit=2000,
        monthly_ingest_limit=1500,
        max_file_size_mb=25,
        vector_search_depth=40,
        answer_confidence_detail=True,
        timeline_access=True,
        weekly_insights=True,
        priority_models=False,
    ),
}

ACADEMIC_DOMAINS = (
    ".edu",
    ".ac.uk",
    ".edu.au",
    ".edu.ca",
    ".ac.jp",
    ".edu.sg",
    ".ac.in",
    ".edu.cn",
)

STUDENT_GRANT_PERIOD = timedelta(days=365)


def get_policy(tier: EntitlementTier) -> EntitlementPolicy:
    """Get the policy of a tier."""
    return TIER_POLICIES[EntitlementTier(tier)]


def get_allowed_search_depth(policy: EntitlementPolicy) -> int:
    return policy.vector_search_depth


def is_academic_email(email: str) -> bool:
    return email.lower().endswith(ACADEMIC_DOMAINS)


def month_start(now: datetime) -> datetime:
    """First instant of the calendar month containing ``now``."""
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def assert_can_ingest(policy: EntitlementPolicy, monthly_count: int) -> None:
    if monthly_count >= policy.monthly_ingest_limit:
        raise QuotaExceeded(
            f"Monthly ingest limit of {policy.monthly_ingest_limit} exceeded",
            QuotaKind.MONTHLY_INGEST,
        )


def assert_can_store_memory(policy: EntitlementPolicy, memory_count: int) -> None:
    if policy.memory_limit is not None and memory_count >= policy.memory_limit:
        raise QuotaExceeded(
            f"Memory limit of {policy.memory_limit} exceeded",
            QuotaKind.MEMORY_COUNT,
        )


def assert_file_size_allowed(policy: EntitlementPolicy, size_mb: float) -> None:
    if size_mb > policy.max_file_size_mb:
        raise QuotaExceeded(
            f"File size {size_mb:.2f}MB exceeds limit of {policy.max_file_size_mb}MB",
            QuotaKind.FILE_SIZE,
        )


def assert_can_access_timeline(policy: EntitlementPolicy) -> None:
    if not policy.timeline_access:
        raise EntitlementError(
            "Timeline access not available on current plan",
            EntitlementCode.TIMELINE_ACCESS_DENIED,
        )


def assert_can_access_confidence_details(policy: EntitlementPolicy) -> None:
    if not policy.answer_confidence_detail:
        raise EntitlementError(
            "Confidence details not available on current plan",
            EntitlementCode.CONFIDENCE_DETAILS_ACCESS_DENIED,
        )


class EntitlementService(EntitlementServiceInterface):
    """Resolves tier policies and usage from the user store."""

    def __init__(self, user_repository: UserRepository, memory_repository: MemoryRepository):
        """Initialize the entitlement service.

        Args:
            user_repository: User and usage-counter store
            memory_repository: Memory store, for the stored-memory count
        """
        self.user_repository = user_repository
        self.memory_repository = memory_repository

    def _require_user(self, user_id: str) -> UserAccount:
        user = self.user_repository.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return user

    def resolve_policy(self, user_id: str, now: Optional[datetime] = None) -> EntitlementPolicy:
        """Resolve the policy in force for a user.

        An expired student grant is downgraded to free in the user store
        before the free policy is returned.
        """
        now = ensure_utc(now) or utc_now()
        user = self._require_user(user_id)
        tier = EntitlementTier(user.entitlement_tier)

        if (
            tier == EntitlementTier.STUDENT_PRO
            and user.student_verified_until is not None
            and now > user.student_verified_until
        ):
            logger.info(
                f"Student tier for user {user_id} expired at "
                f"{user.student_verified_until.isoformat()}; downgrading to free"
            )
            self.user_repository.downgrade_tier(user_id, EntitlementTier.FREE)
            return get_policy(EntitlementTier.FREE)

        return get_policy(tier)

    def get_usage(self, user_id: str, now: Optional[datetime] = None) -> UsageCounters:
        """Get current usage, zeroing the monthly count in a new calendar month."""
        now = ensure_utc(now) or utc_now()
        counters = self.user_repository.get_usage_counters(user_id)
        monthly_count = counters.monthly_ingest_count
        last_reset = counters.last_ingest_reset

        period_start = month_start(now)
        if last_reset < period_start:
            self.user_repository.reset_monthly_ingest(user_id, period_start, now)
            monthly_count = 0
            last_reset = now

        return UsageCounters(
            monthly_ingest_count=monthly_count,
            last_ingest_reset=last_reset,
            memory_count=self.memory_repository.count_for_owner(user_id),
        )

    def record_ingest(self, user_id: str) -> int:
        return self.user_repository.increment_monthly_ingest(user_id)

    def register_user(
        self, user_id: str, email: str, now: Optional[datetime] = None
    ) -> UserAccount:
        """Create a user if absent. Academic addresses get a one-year student grant."""
        existing = self.user_repository.get_user(user_id)
        if existing is not None:
            return existing

        now = ensure_utc(now) or utc_now()
        if is_academic_email(email):
            tier = EntitlementTier.STUDENT_PRO
            verified_until = now + STUDENT_GRANT_PERIOD
        else:
            tier = EntitlementTier.FREE
            verified_until = None

        account = self.user_repository.upsert_user(
            UserAccount(
                id=user_id,
                email=email,
                entitlement_tier=tier,
                student_verified_until=verified_until,
                monthly_ingest_count=0,
                last_ingest_reset=now,
                created_at=now,
            )
        )
        logger.info(f"Created new user: {email} with tier: {tier.value}")
        return account

    def grant_student(self, user_id: str, verified_until: datetime) -> bool:
        self._require_user(user_id)
        return self.user_repository.set_student_verification(
            user_id, ensure_utc(verified_until)
        )
