"""
Community Router for the YourTyme backend.
Channel roster endpoints.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query

from yourtyme.api.deps.providers import get_community_service
from yourtyme.api.deps.slack_guard import AuthenticatedUser, get_current_user
from yourtyme.api.dto.profile_dto import ClearMembersResponseDTO, MembersResponseDTO
from yourtyme.api.services.community_service import CommunityService

router = APIRouter()


@router.get("/community/{channel_id}")
async def get_community(
    channel_id: str,
    channel_name: Optional[str] = Query(
        None, description="Name stored when the community is created"
    ),
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service),
) -> Dict[str, Any]:
    """
    Get a channel's community, creating it when absent.

    Args:
        channel_id: Slack channel ID
        channel_name: Channel name for a new community

    Returns:
        The stored community
    """
    community = await service.get_or_create(
        channel_id, creator_id=current_user.user_id, channel_name=channel_name
    )
    return community.model_dump()


@router.get("/community/members/{channel_id}", response_model=MembersResponseDTO)
async def get_community_members(
    channel_id: str,
    refresh: bool = Query(
        False, description="Overlay each member's current city on the snapshot"
    ),
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service),
) -> MembersResponseDTO:
    """Get the member snapshots of a channel."""
    members = await service.get_members(channel_id, refresh=refresh)
    return MembersResponseDTO(members=members)


@router.delete("/deletemembers", response_model=ClearMembersResponseDTO)
async def delete_members(
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: CommunityService = Depends(get_community_service),
) -> ClearMembersResponseDTO:
    """Empty the member list of every community."""
    cleared = await service.clear_members(current_user.user_id)
    return ClearMembersResponseDTO(success=True, cleared=cleared)
