"""
HTML templates for the user dashboard.
"""

from html import escape
from typing import Optional
from urllib.parse import urlencode

from yourtyme.api.templates.oauth_response_templates import render_page
from yourtyme.domain.models.user import UserProfile

DASHBOARD_ERROR_TEXT = "Failed to load user data. Please try again."
SLACK_APP_REDIRECT_URL = "https://slack.com/app_redirect"


def slack_app_link(app_id: Optional[str], team_id: Optional[str] = None) -> str:
    """Deep link that opens the app inside Slack."""
    params = {"app": app_id or ""}
    if team_id:
        params["team"] = team_id
    return f"{SLACK_APP_REDIRECT_URL}?{urlencode(params)}"


def get_dashboard_template(profile: UserProfile, app_id: Optional[str]) -> str:
    """
    Generate the dashboard page for a signed-in user.

    Args:
        profile: Stored profile of the user
        app_id: Slack app ID used for the "open in Slack" link

    Returns:
        HTML page
    """
    rows = [
        ("Slack ID", profile.user_id),
        ("Name", profile.display_name or "Not set"),
        ("City", profile.city or "Not set"),
        ("Team ID", profile.team_id or "Unknown"),
    ]
    table = "\n".join(
        f"            <tr><th>{label}</th><td>{escape(value)}</td></tr>"
        for label, value in rows
    )
    link = escape(slack_app_link(app_id, profile.team_id))
    body = f"""        <h1>Welcome to YourTyme</h1>
        <p class="subtitle">
            Your city is shown to teammates on the YourTyme Home tab in Slack.
        </p>
        <table class="details">
{table}
        </table>
        <a href="{link}" class="return-button">
            Go to YourTyme Slack App
        </a>"""
    return render_page("Dashboard", body)


def get_dashboard_error_template(message: str = DASHBOARD_ERROR_TEXT) -> str:
    """Dashboard page shown when the profile cannot be loaded."""
    body = f"""        <h1>Dashboard Unavailable</h1>
        <p class="subtitle">
            {escape(message)}
        </p>
        <a href="/slack/install" class="return-button">
            Sign In With Slack
        </a>"""
    return render_page("Dashboard", body, css_class="error")
