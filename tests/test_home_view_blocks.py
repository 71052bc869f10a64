from yourtyme.api.dto.home_dto import ChannelGroup, MemberRow
from yourtyme.api.templates.home_view_blocks import (
    CITY_BLOCK_ID,
    CITY_INPUT_ACTION_ID,
    NO_MEMBERS_TEXT,
    PARTIAL_DATA_TEXT,
    SET_CITY_MODAL_CALLBACK_ID,
    build_error_home_view,
    build_home_view,
    build_set_city_modal,
)
from yourtyme.domain.models.user import UserProfile


def _texts(view):
    texts = []
    for block in view["blocks"]:
        if "text" in block:
            texts.append(block["text"]["text"])
        for element in block.get("elements", []):
            text = element.get("text")
            texts.append(text["text"] if isinstance(text, dict) else text)
    return texts


def test_home_view_lists_members_under_their_channel():
    groups = [
        ChannelGroup(
            channel_id="C1",
            channel_name="general",
            members=[
                MemberRow(
                    user_id="U1",
                    display_name="alice",
                    city="London",
                    has_city=True,
                    local_time="2024-01-01T10:00:00 (Europe/London)",
                ),
                MemberRow(user_id="U2", display_name="bob", city="Not set"),
            ],
        )
    ]

    view = build_home_view(UserProfile(user_id="U0", city="Paris"), groups)

    texts = _texts(view)
    assert view["type"] == "home"
    assert "Your city: Paris" in texts
    assert "#general" in texts
    assert "alice: city=London, time=2024-01-01T10:00:00 (Europe/London)" in texts
    assert "bob: city=Not set, time=Time unavailable" in texts
    assert NO_MEMBERS_TEXT not in texts


def test_home_view_without_located_members_shows_empty_notice():
    groups = [
        ChannelGroup(
            channel_id="C1",
            channel_name="general",
            members=[MemberRow(user_id="U2", display_name="bob", city="Not set")],
        )
    ]

    view = build_home_view(None, groups)

    texts = _texts(view)
    assert "Your city: Not set" in texts
    assert NO_MEMBERS_TEXT in texts
    assert "#general" not in texts


def test_home_view_marks_partial_data():
    view = build_home_view(None, [], partial=True)
    assert PARTIAL_DATA_TEXT in _texts(view)


def test_home_view_is_deterministic():
    groups = [
        ChannelGroup(
            channel_id="C1",
            channel_name="general",
            members=[
                MemberRow(user_id="U1", display_name="alice", city="Oslo", has_city=True)
            ],
        )
    ]
    profile = UserProfile(user_id="U0", city="Lima")
    assert build_home_view(profile, groups) == build_home_view(profile, groups)


def test_error_home_view_is_minimal():
    view = build_error_home_view()
    assert view["type"] == "home"
    assert len(view["blocks"]) == 2


def test_set_city_modal_carries_channel_and_current_city():
    modal = build_set_city_modal("C42", "Berlin")

    assert modal["callback_id"] == SET_CITY_MODAL_CALLBACK_ID
    assert modal["private_metadata"] == "C42"
    block = modal["blocks"][0]
    assert block["block_id"] == CITY_BLOCK_ID
    assert block["element"]["action_id"] == CITY_INPUT_ACTION_ID
    assert block["element"]["initial_value"] == "Berlin"


def test_set_city_modal_from_home_tab_has_empty_metadata():
    modal = build_set_city_modal()
    assert modal["private_metadata"] == ""
    assert "initial_value" not in modal["blocks"][0]["element"]
