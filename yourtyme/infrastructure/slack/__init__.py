"""
Slack infrastructure module.
Provides the Web API client and the OAuth v2 client.
"""

from .oauth_client import SlackOAuthClient, SlackOAuthResult, slack_oauth_client
from .slack_client import SlackChannel, SlackPlatformClient, SlackUser, get_slack_client

__all__ = [
    "SlackOAuthClient",
    "SlackOAuthResult",
    "slack_oauth_client",
    "SlackChannel",
    "SlackPlatformClient",
    "SlackUser",
    "get_slack_client",
]
