"""
Profile Router for the YourTyme backend.
City and display name endpoints used by the Slack app and the dashboard.
"""

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends

from yourtyme.api.deps.providers import get_profile_service
from yourtyme.api.deps.slack_guard import (
    AuthenticatedUser,
    get_city_writer,
    get_current_user,
)
from yourtyme.api.dto.profile_dto import (
    AddCityRequestDTO,
    CityResponseDTO,
    UpdateNameRequestDTO,
)
from yourtyme.api.services.profile_service import ProfileService
from yourtyme.core.logging import get_logger

logger = get_logger(__name__)

router = APIRouter()


@router.get("/profile")
async def get_profile(
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> Optional[Dict[str, Any]]:
    """
    Get the caller's stored profile.

    Returns:
        The profile without its auth token, or null
    """
    profile = await service.get_profile(current_user.user_id)
    return profile.public_dict() if profile else None


@router.post("/update")
async def update_name(
    request: UpdateNameRequestDTO,
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    """Change the caller's display name."""
    profile = await service.update_name(current_user.user_id, request.name)
    return profile.public_dict()


@router.post("/addcity")
async def add_city(
    request: AddCityRequestDTO,
    user_id: str = Depends(get_city_writer),
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    """
    Set the caller's city, creating the profile if needed.

    Args:
        request: City and the channel it was set from
        user_id: Caller identity

    Returns:
        The updated profile
    """
    profile = await service.add_city(user_id, request.city, request.channel_id)
    return profile.public_dict()


@router.get("/getcity", response_model=CityResponseDTO)
async def get_city(
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> CityResponseDTO:
    """Get the caller's city."""
    return CityResponseDTO(city=await service.get_city(current_user.user_id))


@router.delete("/deletecity")
async def delete_city(
    current_user: AuthenticatedUser = Depends(get_current_user),
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    """Remove the caller's city."""
    profile = await service.delete_city(current_user.user_id)
    return profile.public_dict()
