import pytest

from yourtyme.core.exceptions import DatabaseError, ValidationError
from yourtyme.domain.models.community import MemberSnapshot

pytestmark = pytest.mark.anyio


async def test_profile_merge_keeps_existing_fields(profile_repo):
    await profile_repo.upsert("U1", {"display_name": "alice", "team_id": "T1"})
    await profile_repo.upsert("U1", {"city": "London"})

    profile = await profile_repo.get("U1")

    assert profile.display_name == "alice"
    assert profile.team_id == "T1"
    assert profile.city == "London"
    assert profile.updated_at is not None


async def test_profile_upsert_without_merge_replaces_document(profile_repo):
    await profile_repo.upsert("U1", {"display_name": "alice", "city": "Paris"})

    profile = await profile_repo.upsert("U1", {"city": "Rome"}, merge=False)

    assert profile.city == "Rome"
    assert profile.display_name is None


async def test_profile_upsert_rejects_unknown_fields(profile_repo):
    with pytest.raises(ValidationError):
        await profile_repo.upsert("U1", {"favourite_colour": "blue"})


async def test_delete_field_unsets_city(profile_repo):
    await profile_repo.upsert("U1", {"city": "Lima", "display_name": "alice"})

    profile = await profile_repo.delete_field("U1", "city")

    assert profile.city is None
    assert profile.display_name == "alice"


async def test_delete_field_of_missing_user_returns_none(profile_repo):
    assert await profile_repo.delete_field("U404", "city") is None


async def test_bulk_clear_removes_every_profile(profile_repo):
    await profile_repo.upsert("U1", {"city": "Lima"})
    await profile_repo.upsert("U2", {"city": "Oslo"})

    assert await profile_repo.bulk_clear() == 2
    assert await profile_repo.get("U1") is None


async def test_unreachable_database_raises_database_error(profile_repo, profile_collection):
    profile_collection.available = False
    with pytest.raises(DatabaseError):
        await profile_repo.get("U1")


async def test_member_snapshot_is_added_once(community_repo):
    snapshot = MemberSnapshot(user_id="U1", display_name="alice", city="London")

    await community_repo.add_member_snapshot("C1", snapshot)
    community = await community_repo.add_member_snapshot("C1", snapshot)

    assert community.members == [snapshot]
    assert community.channel_name == "Unknown"


async def test_member_snapshot_with_new_city_is_a_new_entry(community_repo):
    await community_repo.add_member_snapshot(
        "C1", MemberSnapshot(user_id="U1", display_name="alice", city="London")
    )
    community = await community_repo.add_member_snapshot(
        "C1", MemberSnapshot(user_id="U1", display_name="alice", city="Paris")
    )

    assert [m.city for m in community.members] == ["London", "Paris"]


async def test_upsert_create_leaves_existing_community_untouched(community_repo):
    await community_repo.upsert_create("C1", {"channel_name": "general", "creator_id": "U1"})

    community = await community_repo.upsert_create(
        "C1", {"channel_name": "renamed", "creator_id": "U2"}
    )

    assert community.channel_name == "general"
    assert community.creator_id == "U1"


async def test_bulk_clear_members_empties_every_roster(community_repo):
    snapshot = MemberSnapshot(user_id="U1", display_name="alice", city="London")
    await community_repo.add_member_snapshot("C1", snapshot)
    await community_repo.add_member_snapshot("C2", snapshot)

    assert await community_repo.bulk_clear_members() == 2
    assert (await community_repo.get("C1")).members == []
