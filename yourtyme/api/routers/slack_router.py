"""
Slack Router for the YourTyme backend.
Events API, interactivity and OAuth install endpoints.
"""

import json
from typing import Any, Dict, Optional
from urllib.parse import parse_qs

from fastapi import APIRouter, BackgroundTasks, Depends, Query, Response
from fastapi.responses import HTMLResponse, RedirectResponse

from yourtyme.api.deps.providers import (
    get_home_sync_service,
    get_slack_interaction_service,
    get_slack_oauth_service,
)
from yourtyme.api.deps.slack_guard import verify_slack_request
from yourtyme.api.services.home_sync_service import HomeSyncService
from yourtyme.api.services.slack_interaction_service import SlackInteractionService
from yourtyme.api.services.slack_oauth_service import SlackOAuthService
from yourtyme.api.templates.oauth_response_templates import (
    get_oauth_error_template,
    get_oauth_generic_error_template,
)
from yourtyme.core.exceptions import (
    ValidationError,
    YourTymeException,
    get_exception_status_code,
)
from yourtyme.core.logging import get_logger, log_error, log_oauth_operation

logger = get_logger(__name__)

router = APIRouter()


def _json_body(body: bytes) -> Dict[str, Any]:
    try:
        data = json.loads(body or b"{}")
    except ValueError:
        raise ValidationError("Request body is not valid JSON")
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def _interaction_payload(body: bytes) -> Dict[str, Any]:
    form = parse_qs(body.decode("utf-8"))
    if "payload" not in form:
        raise ValidationError("Missing interaction payload")
    return _json_body(form["payload"][0].encode("utf-8"))


@router.post("/events")
async def slack_events(
    background_tasks: BackgroundTasks,
    body: bytes = Depends(verify_slack_request),
    interactions: SlackInteractionService = Depends(get_slack_interaction_service),
    home_sync: HomeSyncService = Depends(get_home_sync_service),
) -> Dict[str, Any]:
    """
    Receive Events API callbacks.

    The request is acknowledged immediately; a Home tab sync for
    `app_home_opened` runs after the response is sent.
    """
    payload = _json_body(body)

    if payload.get("type") == "url_verification":
        return {"challenge": payload.get("challenge")}

    user_id = interactions.home_opened_user(payload)
    if user_id:
        logger.info(f"App Home opened by {user_id}")
        background_tasks.add_task(home_sync.sync_home, user_id)

    return {"ok": True}


@router.post("/interactions")
async def slack_interactions(
    background_tasks: BackgroundTasks,
    body: bytes = Depends(verify_slack_request),
    interactions: SlackInteractionService = Depends(get_slack_interaction_service),
):
    """
    Receive Block Kit interactions.

    `set_city` button presses open the city modal; `set_city_modal`
    submissions are validated here and saved in the background.
    """
    payload = _interaction_payload(body)
    interaction_type = payload.get("type")

    if interaction_type == "block_actions":
        try:
            await interactions.open_set_city_modal(payload)
        except YourTymeException as e:
            log_error(e, {"operation": "open_set_city_modal"})
        return Response(status_code=200)

    if interactions.is_set_city_submission(payload):
        if not interactions.submitted_city(payload):
            return interactions.city_errors()
        background_tasks.add_task(interactions.save_submitted_city, payload)
        return Response(status_code=200)

    logger.info(f"Ignoring Slack interaction of type {interaction_type}")
    return Response(status_code=200)


@router.get("/install")
async def slack_install(
    service: SlackOAuthService = Depends(get_slack_oauth_service),
) -> RedirectResponse:
    """Redirect to Slack's authorize page."""
    return RedirectResponse(await service.build_install_url(), status_code=302)


@router.get("/oauth/callback", response_class=HTMLResponse)
async def slack_oauth_callback(
    code: Optional[str] = Query(None, description="Authorization code from Slack"),
    state: Optional[str] = Query(None, description="State issued by /slack/install"),
    error: Optional[str] = Query(None, description="Error reported by Slack"),
    service: SlackOAuthService = Depends(get_slack_oauth_service),
):
    """
    Handle the Slack OAuth redirect.

    Returns:
        A redirect to the dashboard, or an HTML error page
    """
    if error:
        log_oauth_operation("callback", status="denied", error=error)
        return HTMLResponse(
            content=get_oauth_error_template(f"Slack returned an error: {error}", 400),
            status_code=400,
        )

    try:
        profile = await service.handle_callback(code, state)
    except YourTymeException as e:
        status_code = get_exception_status_code(e)
        log_oauth_operation("callback", status="failed", error=e.message)
        return HTMLResponse(
            content=get_oauth_error_template(e.message, status_code),
            status_code=status_code,
        )
    except Exception as e:
        log_error(e, {"operation": "slack_oauth_callback"})
        return HTMLResponse(
            content=get_oauth_generic_error_template(str(e)), status_code=500
        )

    return RedirectResponse(service.dashboard_url(profile.user_id), status_code=302)
