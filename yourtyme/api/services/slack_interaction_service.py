"""
Slack Interaction Service.
Handles Events API callbacks and Block Kit interactions.
"""

from typing import Any, Dict, Optional

from yourtyme.api.services.home_sync_service import HomeSyncService
from yourtyme.api.services.profile_service import ProfileService
from yourtyme.api.templates.home_view_blocks import (
    CITY_BLOCK_ID,
    CITY_INPUT_ACTION_ID,
    SET_CITY_ACTION_ID,
    SET_CITY_MODAL_CALLBACK_ID,
    build_set_city_modal,
)
from yourtyme.core.exceptions import YourTymeException
from yourtyme.core.logging import get_logger, log_error
from yourtyme.infrastructure.slack.slack_client import SlackPlatformClient

logger = get_logger(__name__)

CITY_REQUIRED_TEXT = "Please enter a city."


def city_set_message(city: str) -> str:
    return f"City set to {city}! Check the App Home tab to see timezones."


class SlackInteractionService:
    """Routes Slack events and interactions to the profile and Home tab services."""

    def __init__(
        self,
        profile_service: ProfileService,
        slack_client: SlackPlatformClient,
        home_sync: HomeSyncService,
    ):
        self.profiles = profile_service
        self.slack = slack_client
        self.home_sync = home_sync

    def home_opened_user(self, payload: Dict[str, Any]) -> Optional[str]:
        """
        Return the user whose Home tab should be synced, if any.

        Args:
            payload: Events API `event_callback` body

        Returns:
            The user ID for an `app_home_opened` event on the Home tab
        """
        event = payload.get("event") or {}
        if event.get("type") != "app_home_opened":
            return None
        if event.get("tab", "home") != "home":
            return None
        return event.get("user")

    async def open_set_city_modal(self, payload: Dict[str, Any]) -> bool:
        """
        Open the "Set Your City" modal for a `set_city` button press.

        Returns:
            True if the payload was a `set_city` action
        """
        actions = payload.get("actions") or []
        if not any(a.get("action_id") == SET_CITY_ACTION_ID for a in actions):
            return False

        user_id = (payload.get("user") or {}).get("id")
        channel_id = (payload.get("channel") or {}).get("id")
        current_city = None
        if user_id:
            try:
                current_city = await self.profiles.get_city(user_id)
            except YourTymeException as e:
                logger.warning(f"Could not pre-fill city for {user_id}: {e.message}")

        await self.slack.push_modal_view(
            payload["trigger_id"], build_set_city_modal(channel_id, current_city)
        )
        logger.info(f"Opened set city modal for {user_id}")
        return True

    @staticmethod
    def submitted_city(payload: Dict[str, Any]) -> Optional[str]:
        """Read the city typed into a `set_city_modal` submission."""
        values = ((payload.get("view") or {}).get("state") or {}).get("values") or {}
        value = (values.get(CITY_BLOCK_ID) or {}).get(CITY_INPUT_ACTION_ID) or {}
        city = (value.get("value") or "").strip()
        return city or None

    @staticmethod
    def is_set_city_submission(payload: Dict[str, Any]) -> bool:
        return (
            payload.get("type") == "view_submission"
            and (payload.get("view") or {}).get("callback_id")
            == SET_CITY_MODAL_CALLBACK_ID
        )

    @staticmethod
    def city_errors() -> Dict[str, Any]:
        """Inline modal error for an empty city."""
        return {"response_action": "errors", "errors": {CITY_BLOCK_ID: CITY_REQUIRED_TEXT}}

    async def save_submitted_city(self, payload: Dict[str, Any]) -> None:
        """
        Store the city from a modal submission, confirm it by DM and
        refresh the user's Home tab.

        Failures are reported to the user by DM.
        """
        user_id = payload["user"]["id"]
        city = self.submitted_city(payload)
        channel_id = (payload.get("view") or {}).get("private_metadata") or None

        try:
            await self.profiles.add_city(user_id, city, channel_id)
        except YourTymeException as e:
            log_error(e, {"operation": "set_city", "user_id": user_id})
            await self._notify(user_id, f"Error setting city: {e.message}")
            return

        await self._notify(user_id, city_set_message(city))
        await self.home_sync.sync_home(user_id)

    async def _notify(self, user_id: str, text: str) -> None:
        try:
            await self.slack.post_message(user_id, text)
        except YourTymeException as e:
            logger.error(f"Could not message {user_id}: {e.message}")
