"""
MongoDB implementation of the user repository.

Counter changes are single-document update operators so concurrent ingests
from the same user never lose an increment.
"""
import logging
from datetime import datetime
from typing import Optional

from pymongo.errors import DuplicateKeyError

from echo_brain.domains.entitlements import UsageCounters, UserAccount
from echo_brain.domains.enums import EntitlementTier
from echo_brain.domains.errors import InputError, UserNotFoundError
from echo_brain.interfaces.providers.data_storage import DataStorageProvider
from echo_brain.interfaces.repositories.user import UserRepository

logger = logging.getLogger(__name__)


class MongoUserRepository(UserRepository):
    """MongoDB implementation of UserRepository."""

    def __init__(self, db_adapter: DataStorageProvider, collection: str = "users"):
        self.db = db_adapter
        self.collection = collection

        try:
            self.db.create_collection(self.collection)
            self.db.create_index(self.collection, [("email", 1)], unique=True)
        except Exception as e:  # pragma: no cover
            logger.error(f"Error initializing MongoDB users collection: {e}")

    def get_user(self, user_id: str) -> Optional[UserAccount]:
        doc = self.db.find_one(self.collection, {"_id": user_id})
        return UserAccount.from_document(doc) if doc else None

    def get_tier(self, user_id: str) -> Optional[EntitlementTier]:
        user = self.get_user(user_id)
        return EntitlementTier(user.entitlement_tier) if user else None

    def upsert_user(self, account: UserAccount) -> UserAccount:
        document = account.to_document()
        user_id = document.pop("_id")
        try:
            self.db.update_one(
                self.collection,
                {"_id": user_id},
                {"$setOnInsert": document},
                upsert=True,
            )
        except DuplicateKeyError as e:
            logger.warning(f"Email {account.email} is already registered to another user")
            raise InputError(f"Email already registered: {account.email}") from e
        return self.get_user(user_id)

    def get_usage_counters(self, user_id: str) -> UsageCounters:
        user = self.get_user(user_id)
        if user is None:
            raise UserNotFoundError(user_id)
        return UsageCounters(
            monthly_ingest_count=user.monthly_ingest_count,
            last_ingest_reset=user.last_ingest_reset,
        )

    def increment_monthly_ingest(self, user_id: str) -> int:
        doc = self.db.find_one_and_update(
            self.collection,
            {"_id": user_id},
            {"$inc": {"monthly_ingest_count": 1}},
        )
        if doc is None:
            raise UserNotFoundError(user_id)
        logger.debug(f"Incremented monthly ingest count for user: {user_id}")
        return int(doc["monthly_ingest_count"])

    def reset_monthly_ingest(self, user_id: str, stale_before: datetime, now: datetime) -> bool:
        reset = self.db.update_one(
            self.collection,
            {"_id": user_id, "last_ingest_reset": {"$lt": stale_before}},
            {"$set": {"monthly_ingest_count": 0, "last_ingest_reset": now}},
        )
        if reset:
            logger.info(f"Reset monthly ingest count for user: {user_id}")
        return reset

    def downgrade_tier(self, user_id: str, tier: EntitlementTier) -> bool:
        updated = self.db.update_one(
            self.collection,
            {"_id": user_id},
            {"$set": {"entitlement_tier": EntitlementTier(tier).value}},
        )
        logger.info(f"Updated user {user_id} to tier: {EntitlementTier(tier).value}")
        return updated

    def set_student_verification(self, user_id: str, verified_until: datetime) -> bool:
        updated = self.db.update_one(
            self.collection,
            {"_id": user_id},
            {
                "$set": {
                    "entitlement_tier": EntitlementTier.STUDENT_PRO.value,
                    "student_verified_until": verified_until,
                }
            },
        )
        logger.info(f"Set student verification for user {user_id} until: {verified_until}")
        return updated
