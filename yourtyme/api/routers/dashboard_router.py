"""
Dashboard Router for the YourTyme backend.
Time lookup proxy, dashboard profile API and the dashboard page.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse

from yourtyme.api.deps.providers import get_profile_service, get_time_client
from yourtyme.api.services.profile_service import ProfileService
from yourtyme.api.templates.dashboard_templates import (
    get_dashboard_error_template,
    get_dashboard_template,
)
from yourtyme.core.config import settings
from yourtyme.core.exceptions import ProfileNotFoundError, YourTymeException
from yourtyme.core.logging import get_logger
from yourtyme.infrastructure.worldtime.worldtime_client import WorldTimeClient

logger = get_logger(__name__)

router = APIRouter()


@router.get("/api/worldtime")
async def get_world_time(
    city: str = Query(..., min_length=1, description="City to look up"),
    time_client: WorldTimeClient = Depends(get_time_client),
) -> Dict[str, Any]:
    """
    Look up the current local time of a city.

    Returns:
        The world time service response
    """
    world_time = await time_client.lookup(city)
    return world_time.model_dump()


@router.get("/api/user")
async def get_dashboard_user(
    slack_id: str = Query(..., alias="slackId", description="Slack user ID"),
    service: ProfileService = Depends(get_profile_service),
) -> Dict[str, Any]:
    """Profile data for the dashboard, without the auth token."""
    profile = await service.get_profile(slack_id)
    if profile is None:
        raise ProfileNotFoundError(slack_id)
    return profile.public_dict()


@router.get("/dashboard", response_class=HTMLResponse)
async def dashboard(
    slack_id: str = Query(..., alias="slackId", description="Slack user ID"),
    service: ProfileService = Depends(get_profile_service),
) -> HTMLResponse:
    """Render the dashboard page for a signed-in user."""
    try:
        profile = await service.get_profile(slack_id)
    except YourTymeException as e:
        logger.error(f"Failed to load dashboard for {slack_id}: {e.message}")
        return HTMLResponse(content=get_dashboard_error_template(), status_code=500)

    if profile is None:
        return HTMLResponse(content=get_dashboard_error_template(), status_code=404)

    return HTMLResponse(content=get_dashboard_template(profile, settings.SLACK_APP_ID))
