"""
Slack OAuth Service.
Install link generation and callback handling for the Slack OAuth v2 flow.
"""

import secrets
from datetime import datetime, timezone
from typing import Optional
from urllib.parse import urlencode

from yourtyme.core.config import settings
from yourtyme.core.exceptions import (
    ConfigError,
    UnauthorizedError,
    UpstreamPermanentError,
    UpstreamTransientError,
    ValidationError,
)
from yourtyme.core.logging import get_logger, log_oauth_operation, log_profile_operation
from yourtyme.domain.models.user import UserProfile
from yourtyme.domain.repositories.profile_repository import ProfileRepository
from yourtyme.infrastructure.cache.cache_service import CacheService
from yourtyme.infrastructure.slack.oauth_client import SlackOAuthClient

logger = get_logger(__name__)

STATE_CACHE_PREFIX = "slack_oauth_state"


class SlackOAuthService:
    """Service class for installing the app and signing users in."""

    def __init__(
        self,
        oauth_client: SlackOAuthClient,
        profile_repository: ProfileRepository,
        cache: CacheService,
    ):
        self.oauth_client = oauth_client
        self.profiles = profile_repository
        self.cache = cache

    async def build_install_url(self) -> str:
        """
        Generate the Slack authorize URL with a fresh `state`.

        The state is cached so the callback can check it came from us.

        Returns:
            Slack OAuth v2 authorize URL
        """
        oauth_config = settings.get_oauth_config()
        if not oauth_config["client_id"]:
            raise ConfigError("Slack client ID not configured")

        state = secrets.token_urlsafe(24)
        await self.cache.set(
            self.cache.generate_key(STATE_CACHE_PREFIX, state),
            {"created_at": datetime.now(timezone.utc).isoformat()},
            expire=settings.OAUTH_STATE_EXPIRE_SECONDS,
        )

        params = {
            "client_id": oauth_config["client_id"],
            "scope": oauth_config["scope"],
            "user_scope": oauth_config["user_scope"],
            "redirect_uri": oauth_config["redirect_uri"],
            "state": state,
        }
        log_oauth_operation("install_url")
        return f"{oauth_config['authorize_url']}?{urlencode(params)}"

    async def handle_callback(
        self, code: Optional[str], state: Optional[str] = None
    ) -> UserProfile:
        """
        Complete the OAuth flow.

        Exchanges the code, resolves the user's real name and merges
        `auth_token`, `display_name` and `team_id` into the profile. A
        supplied `state` must be one issued by `build_install_url`.

        Args:
            code: Authorization code from Slack
            state: State parameter echoed back by Slack

        Returns:
            The stored profile

        Raises:
            ValidationError: If the code is missing
            UnauthorizedError: If the state is unknown or expired
            UpstreamPermanentError: If Slack rejects the code
        """
        if not code:
            raise ValidationError("Missing code parameter in callback")

        if state:
            issued = await self.cache.pop(
                self.cache.generate_key(STATE_CACHE_PREFIX, state)
            )
            if issued is None:
                log_oauth_operation("callback", status="invalid_state")
                raise UnauthorizedError("Invalid or expired OAuth state")

        result = await self.oauth_client.exchange_code(code)

        try:
            display_name = await self.oauth_client.fetch_real_name(
                result.bot_access_token or result.access_token, result.user_id
            )
        except (UpstreamTransientError, UpstreamPermanentError) as e:
            logger.warning(f"Could not resolve name for {result.user_id}: {e.message}")
            display_name = result.user_id

        fields = {"auth_token": result.access_token, "display_name": display_name}
        if result.team_id:
            fields["team_id"] = result.team_id
        profile = await self.profiles.upsert(result.user_id, fields)

        log_profile_operation("oauth_upsert", user_id=result.user_id)
        log_oauth_operation("callback", user_id=result.user_id, team_id=result.team_id)
        return profile

    @staticmethod
    def dashboard_url(user_id: str) -> str:
        """Frontend dashboard URL for a signed-in user."""
        return f"{settings.FRONTEND_DASHBOARD_URL}?{urlencode({'slackId': user_id})}"
