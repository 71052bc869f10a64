"""
Slack OAuth v2 client.
Exchanges the authorization code from the install flow for tokens.
"""

from typing import Optional

import httpx
from pydantic import BaseModel, Field

from yourtyme.core.config import settings
from yourtyme.core.exceptions import (
    ConfigError,
    UpstreamPermanentError,
    UpstreamTransientError,
)
from yourtyme.core.logging import get_logger

logger = get_logger(__name__)


class SlackOAuthResult(BaseModel):
    """Outcome of a successful code exchange."""

    access_token: str = Field(..., description="Token stored on the user profile")
    bot_access_token: Optional[str] = Field(None, description="Workspace bot token")
    user_id: str = Field(..., description="Slack ID of the installing user")
    team_id: Optional[str] = Field(None, description="Slack workspace ID")


class SlackOAuthClient:
    """Client for Slack's oauth.v2.access and users.info endpoints."""

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.api_base = settings.SLACK_API_BASE_URL
        self._transport = transport

    async def exchange_code(self, code: str) -> SlackOAuthResult:
        """
        Exchange an authorization code for access tokens.

        Args:
            code: Authorization code from the OAuth redirect

        Returns:
            SlackOAuthResult with the user's identity and tokens

        Raises:
            UpstreamPermanentError: If Slack rejects the code
            UpstreamTransientError: If Slack cannot be reached
        """
        if not settings.SLACK_CLIENT_ID or not settings.SLACK_CLIENT_SECRET:
            raise ConfigError("Slack OAuth client credentials are not configured")

        data = {
            "client_id": settings.SLACK_CLIENT_ID,
            "client_secret": settings.SLACK_CLIENT_SECRET,
            "code": code,
            "redirect_uri": settings.SLACK_REDIRECT_URI,
        }

        try:
            async with httpx.AsyncClient(
                timeout=30.0, transport=self._transport
            ) as client:
                response = await client.post(
                    f"{self.api_base}/oauth.v2.access",
                    data=data,
                    headers={"Content-Type": "application/x-www-form-urlencoded"},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            logger.error(f"Error exchanging Slack code for token: {e}")
            raise UpstreamTransientError(f"Slack OAuth request failed: {e}")

        if not payload.get("ok"):
            error = payload.get("error")
            logger.error(f"Slack OAuth error: {error}")
            if error == "invalid_code":
                raise UpstreamPermanentError(
                    "The authorization code is invalid or has expired. Please try again.",
                    details={"error": error},
                )
            raise UpstreamPermanentError(
                f"Slack API error: {error}", details={"error": error}
            )

        authed_user = payload.get("authed_user") or {}
        if not authed_user.get("id"):
            raise UpstreamPermanentError(
                "authed_user is missing or invalid in Slack API response"
            )

        access_token = authed_user.get("access_token") or payload.get("access_token")
        if not access_token:
            raise UpstreamPermanentError("Slack OAuth response carried no access token")

        return SlackOAuthResult(
            access_token=access_token,
            bot_access_token=payload.get("access_token"),
            user_id=authed_user["id"],
            team_id=(payload.get("team") or {}).get("id"),
        )

    async def fetch_real_name(self, access_token: str, user_id: str) -> str:
        """
        Fetch a user's real name, falling back to the handle and then the ID.

        Args:
            access_token: Token allowed to call users.info
            user_id: Slack user ID

        Returns:
            The best available name
        """
        try:
            async with httpx.AsyncClient(
                timeout=10.0, transport=self._transport
            ) as client:
                response = await client.get(
                    f"{self.api_base}/users.info",
                    params={"user": user_id},
                    headers={"Authorization": f"Bearer {access_token}"},
                )
                response.raise_for_status()
                payload = response.json()
        except httpx.HTTPError as e:
            raise UpstreamTransientError(f"Failed to fetch user info: {e}")

        if not payload.get("ok"):
            raise UpstreamPermanentError(
                f"Failed to fetch user info: {payload.get('error')}"
            )

        user = payload.get("user") or {}
        return user.get("real_name") or user.get("name") or user_id


# Global client instance
slack_oauth_client = SlackOAuthClient()
