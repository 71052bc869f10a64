"""
Slack Authentication Guard for FastAPI.
Resolves the calling Slack user and verifies signed Slack webhooks.
"""

import json
from typing import Any, Dict, Optional
from urllib.parse import parse_qs

from fastapi import Depends, Request

from yourtyme.api.deps.providers import get_profile_repository, get_request_verifier
from yourtyme.core.exceptions import UnauthorizedError
from yourtyme.core.logging import get_logger
from yourtyme.core.security import SIGNATURE_HEADER, SlackRequestVerifier
from yourtyme.domain.models.user import UserProfile
from yourtyme.domain.repositories.profile_repository import ProfileRepository

logger = get_logger(__name__)

USER_ID_HEADER = "X-Slack-User-Id"


class AuthenticatedUser:
    """Authenticated Slack user data structure."""

    def __init__(self, user_id: str, profile: Optional[UserProfile] = None):
        self.user_id = user_id
        self.profile = profile


async def read_body_fields(request: Request) -> Dict[str, Any]:
    """
    Decode a JSON or form-encoded request body into a dict.

    Returns:
        The decoded fields, empty when the body is absent or unreadable
    """
    body = await request.body()
    if not body:
        return {}

    content_type = request.headers.get("content-type", "")
    if "application/x-www-form-urlencoded" in content_type:
        parsed = parse_qs(body.decode("utf-8"))
        return {key: values[0] for key, values in parsed.items() if values}

    try:
        data = json.loads(body)
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


async def extract_user_id(request: Request) -> str:
    """
    Find the caller's Slack user ID.

    Looked up in the X-Slack-User-Id header, then the `user_id` query
    parameter, then the `user_id` body field.

    Raises:
        UnauthorizedError: If no identity was supplied
    """
    user_id = request.headers.get(USER_ID_HEADER) or request.query_params.get("user_id")
    if not user_id:
        user_id = (await read_body_fields(request)).get("user_id")

    if not user_id or not isinstance(user_id, str):
        logger.warning(f"Request without Slack identity: {request.url.path}")
        raise UnauthorizedError("Missing Slack user identity")
    return user_id


async def get_current_user(
    request: Request,
    profiles: ProfileRepository = Depends(get_profile_repository),
) -> AuthenticatedUser:
    """
    FastAPI dependency for routes that need a known Slack user.

    Raises:
        UnauthorizedError: If no identity was supplied or the user has no profile
    """
    user_id = await extract_user_id(request)
    profile = await profiles.get(user_id)
    if profile is None:
        logger.warning(f"Rejected unknown Slack user {user_id}")
        raise UnauthorizedError("Unknown Slack user", details={"user_id": user_id})
    return AuthenticatedUser(user_id, profile)


async def verify_slack_request(
    request: Request,
    verifier: SlackRequestVerifier = Depends(get_request_verifier),
) -> bytes:
    """
    FastAPI dependency that rejects requests not signed by Slack.

    Returns:
        The verified raw body
    """
    body = await request.body()
    verifier.verify(body, request.headers)
    return body


async def get_city_writer(
    request: Request,
    verifier: SlackRequestVerifier = Depends(get_request_verifier),
) -> str:
    """
    Identity of a caller allowed to set a city.

    Slack-signed requests are verified and name the user in the body.
    Other callers only need to state an identity; first-time users have no
    profile yet, so existence is not checked.
    """
    if SIGNATURE_HEADER in request.headers:
        await verify_slack_request(request, verifier)
    return await extract_user_id(request)
