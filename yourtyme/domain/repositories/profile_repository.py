"""
MongoDB repository for user profiles.
"""

from datetime import datetime, timezone
from typing import Any, Dict, Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from yourtyme.core.config import get_mongodb_database_name, get_mongodb_url
from yourtyme.core.exceptions import DatabaseError, ValidationError
from yourtyme.core.logging import get_logger
from yourtyme.domain.models.user import PROFILE_FIELDS, UserProfile

logger = get_logger(__name__)


class ProfileRepository:
    """Repository for user profiles in MongoDB."""

    def __init__(self, collection: Optional[AsyncIOMotorCollection] = None):
        """
        Initialize the repository.

        Args:
            collection: Pre-built collection; when omitted one is opened lazily
                from the configured MongoDB URL
        """
        self.client: Optional[AsyncIOMotorClient] = None
        self.database: Optional[AsyncIOMotorDatabase] = None
        self.collection = collection
        self._initialized = False

    async def initialize(self):
        """Initialize MongoDB connection and collection."""
        if self._initialized:
            return

        if self.collection is None:
            database_name = get_mongodb_database_name()
            self.client = AsyncIOMotorClient(get_mongodb_url())
            self.database = self.client[database_name]
            self.collection = self.database["users"]
            logger.info(f"ProfileRepository initialized with database: {database_name}")

        await self._create_indexes()
        self._initialized = True

    async def _create_indexes(self):
        """Create database indexes."""
        try:
            await self.collection.create_index(
                [("user_id", ASCENDING)], unique=True, name="user_id_unique"
            )
        except Exception as e:
            logger.error(f"Failed to create user indexes: {e}")
            # The app can still work without indexes

    async def get(self, user_id: str) -> Optional[UserProfile]:
        """
        Get a profile by Slack user ID.

        Args:
            user_id: Slack user ID

        Returns:
            The stored profile or None if absent

        Raises:
            DatabaseError: If MongoDB cannot be reached
        """
        await self.initialize()

        try:
            doc = await self.collection.find_one({"user_id": user_id})
        except PyMongoError as e:
            logger.error(f"Failed to get profile {user_id}: {e}")
            raise DatabaseError(f"Failed to load profile: {e}")

        return UserProfile(**doc) if doc else None

    async def upsert(
        self, user_id: str, fields: Dict[str, Any], merge: bool = True
    ) -> UserProfile:
        """
        Create or update a profile.

        With `merge` only the given fields are written and every other stored
        field is kept; without it the document is replaced.

        Args:
            user_id: Slack user ID
            fields: Profile fields to write
            merge: Merge into the existing document instead of replacing it

        Returns:
            The profile as stored after the write
        """
        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError(
                "Unknown profile fields", details={"fields": sorted(unknown)}
            )

        await self.initialize()

        now = datetime.now(timezone.utc)
        try:
            if merge:
                await self.collection.update_one(
                    {"user_id": user_id},
                    {
                        "$set": {**fields, "updated_at": now},
                        "$setOnInsert": {"user_id": user_id},
                    },
                    upsert=True,
                )
            else:
                await self.collection.replace_one(
                    {"user_id": user_id},
                    {"user_id": user_id, **fields, "updated_at": now},
                    upsert=True,
                )
        except PyMongoError as e:
            logger.error(f"Failed to upsert profile {user_id}: {e}")
            raise DatabaseError(f"Failed to save profile: {e}")

        profile = await self.get(user_id)
        if profile is None:
            raise DatabaseError(f"Profile {user_id} missing after write")
        return profile

    async def delete_field(self, user_id: str, field: str) -> Optional[UserProfile]:
        """
        Remove a single field from a profile.

        Args:
            user_id: Slack user ID
            field: Field name, one of the writable profile fields

        Returns:
            The updated profile or None if the user does not exist
        """
        if field not in PROFILE_FIELDS:
            raise ValidationError("Unknown profile field", details={"field": field})

        await self.initialize()

        try:
            await self.collection.update_one(
                {"user_id": user_id},
                {
                    "$unset": {field: ""},
                    "$set": {"updated_at": datetime.now(timezone.utc)},
                },
            )
        except PyMongoError as e:
            logger.error(f"Failed to delete {field} for {user_id}: {e}")
            raise DatabaseError(f"Failed to update profile: {e}")

        return await self.get(user_id)

    async def bulk_clear(self) -> int:
        """
        Delete every stored profile.

        Returns:
            Number of deleted documents
        """
        await self.initialize()

        try:
            result = await self.collection.delete_many({})
        except PyMongoError as e:
            logger.error(f"Failed to clear profiles: {e}")
            raise DatabaseError(f"Failed to clear profiles: {e}")

        logger.warning(f"Cleared {result.deleted_count} user profiles")
        return result.deleted_count


# Global repository instance
profile_repository = ProfileRepository()
