"""
Profile Service.
City and display name management for Slack users.
"""

from typing import Optional

from yourtyme.core.exceptions import ProfileNotFoundError, ValidationError
from yourtyme.core.logging import get_logger, log_profile_operation
from yourtyme.domain.models.community import MemberSnapshot
from yourtyme.domain.models.user import UserProfile
from yourtyme.domain.repositories.community_repository import CommunityRepository
from yourtyme.domain.repositories.profile_repository import ProfileRepository

logger = get_logger(__name__)


class ProfileService:
    """Service layer over the profile and community stores."""

    def __init__(
        self,
        profile_repository: ProfileRepository,
        community_repository: CommunityRepository,
    ):
        self.profiles = profile_repository
        self.communities = community_repository

    async def get_profile(self, user_id: str) -> Optional[UserProfile]:
        """Return the stored profile, None when the user has none."""
        return await self.profiles.get(user_id)

    async def add_city(
        self, user_id: str, city: str, channel_id: Optional[str] = None
    ) -> UserProfile:
        """
        Set a user's city.

        The profile is created when missing. When the call comes from a
        channel, a snapshot of the member is added to that channel's
        community as well.

        Args:
            user_id: Slack user ID
            city: City name
            channel_id: Channel the user set the city from, if any

        Returns:
            The profile after the write
        """
        city = (city or "").strip()
        if not city:
            raise ValidationError("City must not be empty", details={"user_id": user_id})

        profile = await self.profiles.upsert(user_id, {"city": city})
        log_profile_operation("add_city", user_id=user_id, city=city)

        if channel_id:
            snapshot = MemberSnapshot(
                user_id=user_id,
                display_name=profile.display_name or user_id,
                city=city,
            )
            await self.communities.add_member_snapshot(channel_id, snapshot)
            logger.info(f"Added member snapshot for {user_id} to {channel_id}")

        return profile

    async def get_city(self, user_id: str) -> Optional[str]:
        """Return the stored city, None when unset."""
        profile = await self.profiles.get(user_id)
        return profile.city if profile else None

    async def delete_city(self, user_id: str) -> UserProfile:
        """
        Remove a user's city.

        Raises:
            ProfileNotFoundError: If the user has no profile
        """
        profile = await self.profiles.delete_field(user_id, "city")
        if profile is None:
            raise ProfileNotFoundError(user_id)
        log_profile_operation("delete_city", user_id=user_id)
        return profile

    async def update_name(self, user_id: str, name: str) -> UserProfile:
        """Set the display name shown on the Home tab and dashboard."""
        name = (name or "").strip()
        if not name:
            raise ValidationError("Name must not be empty", details={"user_id": user_id})

        profile = await self.profiles.upsert(user_id, {"display_name": name})
        log_profile_operation("update_name", user_id=user_id)
        return profile
