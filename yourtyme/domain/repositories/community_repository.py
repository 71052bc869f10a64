"""
MongoDB repository for channel communities.
"""

from typing import Any, Dict, Optional

from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)
from pymongo import ASCENDING
from pymongo.errors import PyMongoError

from yourtyme.core.config import get_mongodb_database_name, get_mongodb_url
from yourtyme.core.exceptions import DatabaseError
from yourtyme.core.logging import get_logger
from yourtyme.domain.models.community import (
    DEFAULT_CHANNEL_NAME,
    CommunityProfile,
    MemberSnapshot,
)

logger = get_logger(__name__)


class CommunityRepository:
    """Repository for channel communities in MongoDB."""

    def __init__(self, collection: Optional[AsyncIOMotorCollection] = None):
        """Initialize the repository."""
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
            self.collection = self.database["communities"]
            logger.info(
                f"CommunityRepository initialized with database: {database_name}"
            )

        try:
            await self.collection.create_index(
                [("channel_id", ASCENDING)], unique=True, name="channel_id_unique"
            )
        except Exception as e:
            logger.error(f"Failed to create community indexes: {e}")

        self._initialized = True

    async def get(self, channel_id: str) -> Optional[CommunityProfile]:
        """
        Get a community by channel ID.

        Args:
            channel_id: Slack channel ID

        Returns:
            The stored community or None if absent
        """
        await self.initialize()

        try:
            doc = await self.collection.find_one({"channel_id": channel_id})
        except PyMongoError as e:
            logger.error(f"Failed to get community {channel_id}: {e}")
            raise DatabaseError(f"Failed to load community: {e}")

        return CommunityProfile(**doc) if doc else None

    async def upsert_create(
        self, channel_id: str, fields: Dict[str, Any]
    ) -> CommunityProfile:
        """
        Create the community if it does not exist yet.

        An existing community is returned untouched; `fields` only seed a new
        document.

        Args:
            channel_id: Slack channel ID
            fields: `channel_name` and `creator_id` for a new document

        Returns:
            The stored community
        """
        await self.initialize()

        seed = {
            "channel_id": channel_id,
            "channel_name": fields.get("channel_name") or DEFAULT_CHANNEL_NAME,
            "members": [],
            "creator_id": fields.get("creator_id"),
        }
        try:
            await self.collection.update_one(
                {"channel_id": channel_id},
                {"$setOnInsert": seed},
                upsert=True,
            )
        except PyMongoError as e:
            logger.error(f"Failed to create community {channel_id}: {e}")
            raise DatabaseError(f"Failed to create community: {e}")

        community = await self.get(channel_id)
        if community is None:
            raise DatabaseError(f"Community {channel_id} missing after write")
        return community

    async def add_member_snapshot(
        self, channel_id: str, snapshot: MemberSnapshot
    ) -> CommunityProfile:
        """
        Add a member snapshot with set-union semantics.

        A snapshot identical to one already stored is not added again; a
        snapshot for the same user with a different city is a new entry.

        Args:
            channel_id: Slack channel ID
            snapshot: Member snapshot to add

        Returns:
            The community after the write
        """
        await self.initialize()

        try:
            await self.collection.update_one(
                {"channel_id": channel_id},
                {
                    "$addToSet": {"members": snapshot.model_dump()},
                    "$setOnInsert": {
                        "channel_id": channel_id,
                        "channel_name": DEFAULT_CHANNEL_NAME,
                    },
                },
                upsert=True,
            )
        except PyMongoError as e:
            logger.error(f"Failed to add member to {channel_id}: {e}")
            raise DatabaseError(f"Failed to add member: {e}")

        return await self.get(channel_id)

    async def bulk_clear_members(self) -> int:
        """
        Empty the member list of every community.

        Returns:
            Number of modified communities
        """
        await self.initialize()

        try:
            result = await self.collection.update_many({}, {"$set": {"members": []}})
        except PyMongoError as e:
            logger.error(f"Failed to clear community members: {e}")
            raise DatabaseError(f"Failed to clear members: {e}")

        return result.modified_count


# Global repository instance
community_repository = CommunityRepository()
