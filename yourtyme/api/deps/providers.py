"""
FastAPI dependency providers.
Every external collaborator is handed to the services through these, so
tests can swap them with `app.dependency_overrides`.
"""

from fastapi import Depends

from yourtyme.api.services.community_service import CommunityService
from yourtyme.api.services.home_sync_service import HomeSyncService
from yourtyme.api.services.profile_service import ProfileService
from yourtyme.api.services.slack_interaction_service import SlackInteractionService
from yourtyme.api.services.slack_oauth_service import SlackOAuthService
from yourtyme.core.security import SlackRequestVerifier
from yourtyme.domain.repositories.community_repository import (
    CommunityRepository,
    community_repository,
)
from yourtyme.domain.repositories.profile_repository import (
    ProfileRepository,
    profile_repository,
)
from yourtyme.infrastructure.cache.cache_service import CacheService, cache_service
from yourtyme.infrastructure.slack.oauth_client import (
    SlackOAuthClient,
    slack_oauth_client,
)
from yourtyme.infrastructure.slack.slack_client import (
    SlackPlatformClient,
    get_slack_client,
)
from yourtyme.infrastructure.worldtime.worldtime_client import (
    WorldTimeClient,
    worldtime_client,
)


def get_profile_repository() -> ProfileRepository:
    return profile_repository


def get_community_repository() -> CommunityRepository:
    return community_repository


def get_slack_platform_client() -> SlackPlatformClient:
    return get_slack_client()


def get_time_client() -> WorldTimeClient:
    return worldtime_client


def get_oauth_client() -> SlackOAuthClient:
    return slack_oauth_client


def get_cache() -> CacheService:
    return cache_service


def get_request_verifier() -> SlackRequestVerifier:
    return SlackRequestVerifier()


def get_profile_service(
    profiles: ProfileRepository = Depends(get_profile_repository),
    communities: CommunityRepository = Depends(get_community_repository),
) -> ProfileService:
    return ProfileService(profiles, communities)


def get_community_service(
    communities: CommunityRepository = Depends(get_community_repository),
    profiles: ProfileRepository = Depends(get_profile_repository),
) -> CommunityService:
    return CommunityService(communities, profiles)


def get_home_sync_service(
    slack: SlackPlatformClient = Depends(get_slack_platform_client),
    profiles: ProfileRepository = Depends(get_profile_repository),
    time_client: WorldTimeClient = Depends(get_time_client),
) -> HomeSyncService:
    return HomeSyncService(slack, profiles, time_client)


def get_slack_oauth_service(
    oauth_client: SlackOAuthClient = Depends(get_oauth_client),
    profiles: ProfileRepository = Depends(get_profile_repository),
    cache: CacheService = Depends(get_cache),
) -> SlackOAuthService:
    return SlackOAuthService(oauth_client, profiles, cache)


def get_slack_interaction_service(
    profile_service: ProfileService = Depends(get_profile_service),
    slack: SlackPlatformClient = Depends(get_slack_platform_client),
    home_sync: HomeSyncService = Depends(get_home_sync_service),
) -> SlackInteractionService:
    return SlackInteractionService(profile_service, slack, home_sync)
