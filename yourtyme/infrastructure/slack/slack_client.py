"""
Slack Web API client used by the Home tab and the interaction handlers.
Wraps slack_sdk's AsyncWebClient and translates its failures into
YourTyme upstream errors.
"""

import asyncio
from typing import Any, Awaitable, Callable, Dict, List, Optional

import aiohttp
from pydantic import BaseModel, Field
from slack_sdk.errors import SlackApiError
from slack_sdk.web.async_client import AsyncWebClient

from yourtyme.core.config import settings
from yourtyme.core.exceptions import UpstreamPermanentError, UpstreamTransientError
from yourtyme.core.logging import get_logger

logger = get_logger(__name__)

# Slack error codes worth retrying
TRANSIENT_SLACK_ERRORS = {
    "ratelimited",
    "internal_error",
    "fatal_error",
    "service_unavailable",
    "request_timeout",
}


class SlackChannel(BaseModel):
    """Channel visible to the bot token."""

    id: str = Field(..., description="Slack channel ID")
    name: Optional[str] = Field(None, description="Channel name")


class SlackUser(BaseModel):
    """Subset of users.info the app cares about."""

    id: str = Field(..., description="Slack user ID")
    display_name: str = Field(..., description="Best available human readable name")
    is_bot: bool = Field(False, description="Bot or app user")
    deleted: bool = Field(False, description="Deactivated account")


def _display_name(user: Dict[str, Any]) -> str:
    profile = user.get("profile") or {}
    return (
        profile.get("display_name")
        or profile.get("real_name")
        or user.get("real_name")
        or user.get("name")
        or user["id"]
    )


class SlackPlatformClient:
    """Narrow async interface over the Slack Web API."""

    def __init__(
        self,
        token: Optional[str] = None,
        client: Optional[AsyncWebClient] = None,
    ):
        self.client = client or AsyncWebClient(
            token=token or settings.SLACK_BOT_TOKEN,
            base_url=f"{settings.SLACK_API_BASE_URL}/",
            timeout=int(settings.EXTERNAL_CALL_TIMEOUT_SECONDS),
        )

    async def _call(self, method: str, call: Callable[[], Awaitable[Any]]) -> Any:
        """Run a Web API call and map its errors."""
        try:
            return await call()
        except SlackApiError as exc:
            error = exc.response.get("error") if exc.response is not None else None
            status_code = exc.response.status_code if exc.response is not None else None
            details = {"method": method, "error": error, "status_code": status_code}
            if error in TRANSIENT_SLACK_ERRORS or (status_code or 0) >= 500 or status_code == 429:
                raise UpstreamTransientError(f"Slack {method} failed: {error}", details)
            raise UpstreamPermanentError(f"Slack {method} rejected: {error}", details)
        except (aiohttp.ClientError, asyncio.TimeoutError) as exc:
            raise UpstreamTransientError(
                f"Slack {method} unreachable: {exc}", {"method": method}
            )

    async def list_channels(self, page_size: int = 100) -> List[SlackChannel]:
        """
        List public and private channels the bot can see.

        Args:
            page_size: Channels requested per page (at most 100)

        Returns:
            Every non-archived channel across all pages
        """
        channels: List[SlackChannel] = []
        cursor: Optional[str] = None
        while True:
            response = await self._call(
                "conversations.list",
                lambda: self.client.conversations_list(
                    types="public_channel,private_channel",
                    exclude_archived=True,
                    limit=min(page_size, 100),
                    cursor=cursor,
                ),
            )
            channels.extend(
                SlackChannel(id=c["id"], name=c.get("name"))
                for c in response.get("channels", [])
            )
            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return channels

    async def list_members(self, channel_id: str) -> List[str]:
        """List the user IDs of a channel's members."""
        members: List[str] = []
        cursor: Optional[str] = None
        while True:
            response = await self._call(
                "conversations.members",
                lambda: self.client.conversations_members(
                    channel=channel_id, limit=200, cursor=cursor
                ),
            )
            members.extend(response.get("members", []))
            cursor = (response.get("response_metadata") or {}).get("next_cursor")
            if not cursor:
                return members

    async def get_user_info(self, user_id: str) -> SlackUser:
        """Fetch a member's display name and account flags."""
        response = await self._call(
            "users.info", lambda: self.client.users_info(user=user_id)
        )
        user = response["user"]
        return SlackUser(
            id=user["id"],
            display_name=_display_name(user),
            is_bot=bool(user.get("is_bot")),
            deleted=bool(user.get("deleted")),
        )

    async def publish_home_view(self, user_id: str, view: Dict[str, Any]) -> None:
        """Publish a Home tab view for a user."""
        await self._call(
            "views.publish",
            lambda: self.client.views_publish(user_id=user_id, view=view),
        )

    async def push_modal_view(self, trigger_id: str, view: Dict[str, Any]) -> None:
        """Open a modal in response to an interaction."""
        await self._call(
            "views.open",
            lambda: self.client.views_open(trigger_id=trigger_id, view=view),
        )

    async def post_message(self, user_id: str, text: str) -> None:
        """Send a direct message to a user."""
        await self._call(
            "chat.postMessage",
            lambda: self.client.chat_postMessage(channel=user_id, text=text),
        )


_slack_client: Optional[SlackPlatformClient] = None


def get_slack_client() -> SlackPlatformClient:
    """
    Get the shared Slack client, created on first use.

    Returns:
        SlackPlatformClient bound to the bot token
    """
    global _slack_client
    if _slack_client is None:
        _slack_client = SlackPlatformClient()
    return _slack_client
