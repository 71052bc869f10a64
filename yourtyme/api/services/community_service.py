"""
Community Service.
Channel rosters built from member snapshots.
"""

from typing import List, Optional

from yourtyme.core.exceptions import CommunityNotFoundError
from yourtyme.core.logging import log_community_operation
from yourtyme.domain.models.community import CommunityProfile, MemberSnapshot
from yourtyme.domain.repositories.community_repository import CommunityRepository
from yourtyme.domain.repositories.profile_repository import ProfileRepository


class CommunityService:
    """Service layer over the community store."""

    def __init__(
        self,
        community_repository: CommunityRepository,
        profile_repository: ProfileRepository,
    ):
        self.communities = community_repository
        self.profiles = profile_repository

    async def get_or_create(
        self,
        channel_id: str,
        creator_id: str,
        channel_name: Optional[str] = None,
    ) -> CommunityProfile:
        """
        Return the channel's community, creating an empty one when absent.

        Args:
            channel_id: Slack channel ID
            creator_id: User recorded as creator of a new community
            channel_name: Name stored on a new community, "Unknown" when omitted

        Returns:
            The stored community
        """
        existing = await self.communities.get(channel_id)
        if existing is not None:
            return existing

        community = await self.communities.upsert_create(
            channel_id, {"channel_name": channel_name, "creator_id": creator_id}
        )
        log_community_operation("create", channel_id=channel_id, user_id=creator_id)
        return community

    async def get_members(
        self, channel_id: str, refresh: bool = False
    ) -> List[MemberSnapshot]:
        """
        Return the member snapshots of a channel.

        Snapshots keep the city a member had when they were added. With
        `refresh` the current profile city is laid over each snapshot in the
        response; nothing is written back.

        Raises:
            CommunityNotFoundError: If the channel has no community
        """
        community = await self.communities.get(channel_id)
        if community is None:
            raise CommunityNotFoundError(channel_id)

        if not refresh:
            return community.members

        members = []
        for snapshot in community.members:
            profile = await self.profiles.get(snapshot.user_id)
            if profile is not None and profile.city:
                snapshot = snapshot.model_copy(update={"city": profile.city})
            members.append(snapshot)
        return members

    async def clear_members(self, requested_by: str) -> int:
        """Empty every community's member list."""
        cleared = await self.communities.bulk_clear_members()
        log_community_operation("clear_members", user_id=requested_by, cleared=cleared)
        return cleared
