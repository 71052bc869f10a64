import json
from urllib.parse import urlencode

import pytest

from yourtyme.api.templates.home_view_blocks import SET_CITY_MODAL_CALLBACK_ID
from yourtyme.infrastructure.slack.slack_client import SlackChannel, SlackUser

pytestmark = pytest.mark.anyio


@pytest.fixture
def post_event(async_client, sign_slack_request):
    async def _post(payload):
        body = json.dumps(payload)
        headers = {"Content-Type": "application/json", **sign_slack_request(body)}
        return await async_client.post("/slack/events", content=body, headers=headers)

    return _post


@pytest.fixture
def post_interaction(async_client, sign_slack_request):
    async def _post(payload):
        body = urlencode({"payload": json.dumps(payload)})
        headers = {
            "Content-Type": "application/x-www-form-urlencoded",
            **sign_slack_request(body),
        }
        return await async_client.post("/slack/interactions", content=body, headers=headers)

    return _post


def _submission(city, channel_id="C1", user_id="U1"):
    return {
        "type": "view_submission",
        "user": {"id": user_id},
        "view": {
            "callback_id": SET_CITY_MODAL_CALLBACK_ID,
            "private_metadata": channel_id,
            "state": {"values": {"city": {"user_city": {"value": city}}}},
        },
    }


async def test_url_verification_echoes_challenge(post_event):
    response = await post_event({"type": "url_verification", "challenge": "3eZbrw1a"})
    assert response.status_code == 200
    assert response.json() == {"challenge": "3eZbrw1a"}


async def test_app_home_opened_publishes_home_view(post_event, slack, profile_repo, time_client):
    slack.channels = [SlackChannel(id="C1", name="general")]
    slack.members = {"C1": ["U0", "U1"]}
    slack.users = {"U1": SlackUser(id="U1", display_name="alice")}
    await profile_repo.upsert("U1", {"city": "London"})
    time_client.set_time("London", "2024-01-01T10:00:00", "Europe/London")

    response = await post_event(
        {
            "type": "event_callback",
            "event": {"type": "app_home_opened", "user": "U0", "tab": "home"},
        }
    )

    assert response.status_code == 200
    assert response.json() == {"ok": True}
    user_id, view = slack.published[0]
    assert user_id == "U0"
    assert any(
        "2024-01-01T10:00:00 (Europe/London)" in block.get("text", {}).get("text", "")
        for block in view["blocks"]
    )


async def test_messages_tab_does_not_sync(post_event, slack):
    response = await post_event(
        {
            "type": "event_callback",
            "event": {"type": "app_home_opened", "user": "U0", "tab": "messages"},
        }
    )
    assert response.status_code == 200
    assert slack.published == []


async def test_set_city_button_opens_modal(post_interaction, slack, profile_repo):
    await profile_repo.upsert("U1", {"city": "Lima"})

    response = await post_interaction(
        {
            "type": "block_actions",
            "trigger_id": "13345224609.738474920.8088930838d88f008e0",
            "user": {"id": "U1"},
            "actions": [{"action_id": "set_city"}],
        }
    )

    assert response.status_code == 200
    trigger_id, modal = slack.modals[0]
    assert trigger_id == "13345224609.738474920.8088930838d88f008e0"
    assert modal["callback_id"] == SET_CITY_MODAL_CALLBACK_ID
    assert modal["blocks"][0]["element"]["initial_value"] == "Lima"


async def test_city_submission_saves_notifies_and_resyncs(
    post_interaction, slack, profile_repo, community_repo
):
    await profile_repo.upsert("U1", {"display_name": "alice"})

    response = await post_interaction(_submission("Paris"))

    assert response.status_code == 200
    assert (await profile_repo.get("U1")).city == "Paris"
    community = await community_repo.get("C1")
    assert [(m.user_id, m.city) for m in community.members] == [("U1", "Paris")]
    assert slack.messages == [
        ("U1", "City set to Paris! Check the App Home tab to see timezones.")
    ]
    assert slack.published[0][0] == "U1"


async def test_empty_city_submission_returns_inline_error(post_interaction, profile_repo):
    response = await post_interaction(_submission("   "))

    assert response.status_code == 200
    assert response.json() == {
        "response_action": "errors",
        "errors": {"city": "Please enter a city."},
    }
    assert await profile_repo.get("U1") is None


async def test_submission_from_home_tab_skips_snapshot(post_interaction, community_repo, profile_repo):
    response = await post_interaction(_submission("Oslo", channel_id=""))

    assert response.status_code == 200
    assert (await profile_repo.get("U1")).city == "Oslo"
    assert community_repo.collection.docs == []


async def test_unsigned_interaction_is_rejected(async_client):
    body = urlencode({"payload": json.dumps(_submission("Paris"))})
    response = await async_client.post(
        "/slack/interactions",
        content=body,
        headers={"Content-Type": "application/x-www-form-urlencoded"},
    )
    assert response.status_code == 401
