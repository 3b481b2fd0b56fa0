"""
Tests for tier policies, entitlement assertions and the EntitlementService.
"""
from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest

from echo_brain.domains.entitlements import UsageCounters, UserAccount
from echo_brain.domains.enums import EntitlementCode, EntitlementTier, QuotaKind
from echo_brain.domains.errors import EntitlementError, QuotaExceeded, UserNotFoundError
from echo_brain.services.entitlements import (
    EntitlementService,
    assert_can_access_confidence_details,
    assert_can_access_timeline,
    assert_can_ingest,
    assert_can_store_memory,
    assert_file_size_allowed,
    get_allowed_search_depth,
    get_policy,
    is_academic_email,
    month_start,
)

NOW = datetime(2026, 3, 15, 12, 0, tzinfo=timezone.utc)


# ---------------------
# Fixtures
# ---------------------


@pytest.fixture
def user_repository():
    repo = Mock()
    repo.downgrade_tier = Mock(return_value=True)
    repo.reset_monthly_ingest = Mock(return_value=True)
    repo.increment_monthly_ingest = Mock(return_value=1)
    return repo


@pytest.fixture
def memory_repository():
    repo = Mock()
    repo.count_for_owner = Mock(return_value=7)
    return repo


@pytest.fixture
def service(user_repository, memory_repository):
    return EntitlementService(user_repository, memory_repository)


def _user(**overrides):
    data = dict(id="u1", email="user@example.com", created_at=NOW, last_ingest_reset=NOW)
    data.update(overrides)
    return UserAccount(**data)


# ---------------------
# Policy table
# ---------------------


def test_tier_policies():
    free = get_policy(EntitlementTier.FREE)
    assert (free.memory_limit, free.monthly_ingest_limit, free.max_file_size_mb) == (50, 100, 5)
    assert free.vector_search_depth == 10
    assert free.answer_confidence_detail is False
    assert free.timeline_access is True

    pro = get_policy("pro")
    assert pro.memory_limit is None
    assert pro.monthly_ingest_limit == 5000
    assert pro.priority_models is True

    student = get_policy(EntitlementTier.STUDENT_PRO)
    assert (student.memory_limit, student.monthly_ingest_limit) == (2000, 1500)
    assert student.max_file_size_mb == 25
    assert get_allowed_search_depth(student) == 40
    assert student.priority_models is False


# ---------------------
# Assertions
# ---------------------


def test_monthly_ceiling_is_inclusive():
    policy = get_policy(EntitlementTier.FREE)
    assert_can_ingest(policy, 99)
    with pytest.raises(QuotaExceeded) as exc:
        assert_can_ingest(policy, 100)
    assert exc.value.kind == QuotaKind.MONTHLY_INGEST
    assert exc.value.code == EntitlementCode.MONTHLY_INGEST_LIMIT_EXCEEDED.value


def test_memory_ceiling():
    policy = get_policy(EntitlementTier.FREE)
    assert_can_store_memory(policy, 49)
    with pytest.raises(QuotaExceeded) as exc:
        assert_can_store_memory(policy, 50)
    assert exc.value.kind == QuotaKind.MEMORY_COUNT


def test_unlimited_memory_never_raises():
    assert_can_store_memory(get_policy(EntitlementTier.PRO), 10_000_000)


def test_file_size_must_exceed_limit():
    policy = get_policy(EntitlementTier.FREE)
    assert_file_size_allowed(policy, 5.0)
    with pytest.raises(QuotaExceeded) as exc:
        assert_file_size_allowed(policy, 5.01)
    assert exc.value.kind == QuotaKind.FILE_SIZE


def test_confidence_details_denied_on_free():
    with pytest.raises(EntitlementError) as exc:
        assert_can_access_confidence_details(get_policy(EntitlementTier.FREE))
    assert exc.value.code == EntitlementCode.CONFIDENCE_DETAILS_ACCESS_DENIED.value
    assert_can_access_confidence_details(get_policy(EntitlementTier.PRO))


def test_timeline_denied_when_flag_off():
    policy = get_policy(EntitlementTier.FREE).model_copy(update={"timeline_access": False})
    with pytest.raises(EntitlementError) as exc:
        assert_can_access_timeline(policy)
    assert exc.value.code == EntitlementCode.TIMELINE_ACCESS_DENIED.value
    assert_can_access_timeline(get_policy(EntitlementTier.FREE))


@pytest.mark.parametrize(
    "email,expected",
    [
        ("alice@mit.edu", True),
        ("bob@ox.ac.uk", True),
        ("carol@unimelb.edu.au", True),
        ("dave@gmail.com", False),
        ("eve@education.com", False),
    ],
)
def test_is_academic_email(email, expected):
    assert is_academic_email(email) is expected


def test_month_start():
    assert month_start(NOW) == datetime(2026, 3, 1, tzinfo=timezone.utc)


# ---------------------
# EntitlementService
# ---------------------


def test_resolve_policy_for_tier(service, user_repository):
    user_repository.get_user.return_value = _user(entitlement_tier="pro")
    assert service.resolve_policy("u1", now=NOW) == get_policy(EntitlementTier.PRO)
    user_repository.downgrade_tier.assert_not_called()


def test_expired_student_is_downgraded_once(service, user_repository):
    user_repository.get_user.return_value = _user(
        entitlement_tier="student_pro",
        student_verified_until=NOW - timedelta(days=1),
    )
    policy = service.resolve_policy("u1", now=NOW)

    assert policy == get_policy(EntitlementTier.FREE)
    user_repository.downgrade_tier.assert_called_once_with("u1", EntitlementTier.FREE)


def test_active_student_keeps_tier(service, user_repository):
    user_repository.get_user.return_value = _user(
        entitlement_tier="student_pro",
        student_verified_until=NOW + timedelta(days=30),
    )
    assert service.resolve_policy("u1", now=NOW) == get_policy(EntitlementTier.STUDENT_PRO)
    user_repository.downgrade_tier.assert_not_called()


def test_resolve_policy_unknown_user(service, user_repository):
    user_repository.get_user.return_value = None
    with pytest.raises(UserNotFoundError):
        service.resolve_policy("ghost")


def test_get_usage_within_month(service, user_repository):
    user_repository.get_usage_counters.return_value = UsageCounters(
        monthly_ingest_count=12, last_ingest_reset=datetime(2026, 3, 2, tzinfo=timezone.utc)
    )
    usage = service.get_usage("u1", now=NOW)

    assert usage.monthly_ingest_count == 12
    assert usage.memory_count == 7
    user_repository.reset_monthly_ingest.assert_not_called()


def test_get_usage_resets_in_new_month(service, user_repository):
    user_repository.get_usage_counters.return_value = UsageCounters(
        monthly_ingest_count=99, last_ingest_reset=datetime(2026, 2, 27, tzinfo=timezone.utc)
    )
    usage = service.get_usage("u1", now=NOW)

    assert usage.monthly_ingest_count == 0
    assert usage.last_ingest_reset == NOW
    user_repository.reset_monthly_ingest.assert_called_once_with(
        "u1", datetime(2026, 3, 1, tzinfo=timezone.utc), NOW
    )


def test_record_ingest(service, user_repository):
    user_repository.increment_monthly_ingest.return_value = 5
    assert service.record_ingest("u1") == 5


def test_register_academic_user(service, user_repository):
    user_repository.get_user.return_value = None
    user_repository.upsert_user.side_effect = lambda account: account

    account = service.register_user("u1", "alice@mit.edu", now=NOW)

    assert account.entitlement_tier == "student_pro"
    assert account.student_verified_until == NOW + timedelta(days=365)


def test_register_regular_user(service, user_repository):
    user_repository.get_user.return_value = None
    user_repository.upsert_user.side_effect = lambda account: account

    account = service.register_user("u1", "dave@gmail.com", now=NOW)

    assert account.entitlement_tier == "free"
    assert account.student_verified_until is None


def test_register_existing_user_is_noop(service, user_repository):
    existing = _user(entitlement_tier="pro")
    user_repository.get_user.return_value = existing

    assert service.register_user("u1", "user@example.com") == existing
    user_repository.upsert_user.assert_not_called()


def test_grant_student(service, user_repository):
    user_repository.get_user.return_value = _user()
    user_repository.set_student_verification.return_value = True
    until = NOW + timedelta(days=100)

    assert service.grant_student("u1", until) is True
    user_repository.set_student_verification.assert_called_once_with("u1", until)
