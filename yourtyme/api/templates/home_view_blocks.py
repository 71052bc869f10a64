"""
Block Kit builders for the YourTyme Slack surfaces.
Pure functions: identical inputs always produce identical payloads.
"""

from typing import Any, Dict, List, Optional, Sequence

from yourtyme.api.dto.home_dto import ChannelGroup, MemberRow
from yourtyme.domain.models.user import UserProfile

NOT_SET = "Not set"
DATABASE_UNAVAILABLE = "Database unavailable"
TIME_UNAVAILABLE = "Time unavailable"

HOME_TITLE = "Timezone Tool"
NO_MEMBERS_TEXT = (
    "No team members found. Join a channel and set your city to see timezones!"
)
PARTIAL_DATA_TEXT = (
    ":warning: Partial data: some teammates could not be loaded in time. "
    "Reopen the Home tab to try again."
)
ERROR_TEXT = ":warning: Error loading timezones. Please try again later."

SET_CITY_ACTION_ID = "set_city"
SET_CITY_MODAL_CALLBACK_ID = "set_city_modal"
CITY_BLOCK_ID = "city"
CITY_INPUT_ACTION_ID = "user_city"


def format_local_time(datetime_text: str, timezone: str) -> str:
    """Render a lookup result as `datetime (timezone)`."""
    return f"{datetime_text} ({timezone})"


def format_member_line(member: MemberRow) -> str:
    """Render one member as `name: city=..., time=...`."""
    time_text = member.local_time or TIME_UNAVAILABLE
    return f"{member.display_name}: city={member.city}, time={time_text}"


def _header(text: str) -> Dict[str, Any]:
    return {"type": "header", "text": {"type": "plain_text", "text": text[:150]}}


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _divider() -> Dict[str, Any]:
    return {"type": "divider"}


def build_home_view(
    self_profile: Optional[UserProfile],
    channel_groups: Sequence[ChannelGroup],
    partial: bool = False,
) -> Dict[str, Any]:
    """
    Build the Home tab for a user.

    Args:
        self_profile: The viewing user's profile, None if never stored
        channel_groups: Teammates grouped by the channel they were found in
        partial: Append the partial data notice

    Returns:
        A `home` view payload for views.publish
    """
    own_city = self_profile.city if self_profile and self_profile.city else NOT_SET
    blocks: List[Dict[str, Any]] = [
        _header(HOME_TITLE),
        _section(f"Your city: {own_city}"),
        {
            "type": "actions",
            "elements": [
                {
                    "type": "button",
                    "text": {"type": "plain_text", "text": "Set City"},
                    "action_id": SET_CITY_ACTION_ID,
                }
            ],
        },
    ]

    located = any(m.has_city for group in channel_groups for m in group.members)
    if located:
        for group in channel_groups:
            if not group.members:
                continue
            blocks.append(_divider())
            blocks.append(_header(f"#{group.channel_name or group.channel_id}"))
            blocks.extend(_section(format_member_line(m)) for m in group.members)
    else:
        blocks.append(_divider())
        blocks.append(_section(NO_MEMBERS_TEXT))

    if partial:
        blocks.append(
            {
                "type": "context",
                "elements": [{"type": "mrkdwn", "text": PARTIAL_DATA_TEXT}],
            }
        )

    return {"type": "home", "blocks": blocks}


def build_error_home_view(message: str = ERROR_TEXT) -> Dict[str, Any]:
    """Minimal Home tab shown when the real view could not be built or published."""
    return {"type": "home", "blocks": [_header(HOME_TITLE), _section(message)]}


def build_set_city_modal(
    channel_id: Optional[str] = None, current_city: Optional[str] = None
) -> Dict[str, Any]:
    """
    Build the "Set Your City" modal.

    Args:
        channel_id: Channel the interaction came from, carried in private_metadata
        current_city: Pre-filled value

    Returns:
        A `modal` view payload for views.open
    """
    element: Dict[str, Any] = {
        "type": "plain_text_input",
        "action_id": CITY_INPUT_ACTION_ID,
    }
    if current_city:
        element["initial_value"] = current_city

    return {
        "type": "modal",
        "callback_id": SET_CITY_MODAL_CALLBACK_ID,
        "title": {"type": "plain_text", "text": "Set Your City"},
        "submit": {"type": "plain_text", "text": "Save"},
        "close": {"type": "plain_text", "text": "Cancel"},
        "blocks": [
            {
                "type": "input",
                "block_id": CITY_BLOCK_ID,
                "element": element,
                "label": {"type": "plain_text", "text": "City (e.g., London)"},
            }
        ],
        "private_metadata": channel_id or "",
    }
