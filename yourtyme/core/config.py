"""
Configuration management for the YourTyme backend.
Handles environment variables and application settings for the Slack add-on.
"""

from typing import Annotated, Any, Dict, List, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode

from yourtyme.core.exceptions import ConfigError


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Application
    APP_NAME: str = "YourTyme Backend"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # CORS
    ALLOWED_ORIGINS: Annotated[List[str], NoDecode] = [
        "http://localhost:5173",
        "https://yourtyme-slack.vercel.app",
    ]
    ALLOWED_HOSTS: Annotated[List[str], NoDecode] = [
        "localhost",
        "yourtyme-slack-backend.vercel.app",
    ]

    # Database - MongoDB
    MONGODB_URL: str = "mongodb://localhost:27017"
    MONGODB_DATABASE: str = "yourtyme"
    MONGODB_USERNAME: Optional[str] = None
    MONGODB_PASSWORD: Optional[str] = None

    # MongoDB Environment Variables (from .env)
    MONGO_URI: Optional[str] = None
    MONGO_DB_NAME: Optional[str] = None

    # Redis for OAuth state
    REDIS_URI: str = "redis://localhost:6379"
    REDIS_DB: int = 0
    OAUTH_STATE_EXPIRE_SECONDS: int = 600

    # Slack app credentials
    SLACK_BOT_TOKEN: Optional[str] = None
    SLACK_SIGNING_SECRET: Optional[str] = None
    SLACK_CLIENT_ID: Optional[str] = None
    SLACK_CLIENT_SECRET: Optional[str] = None
    SLACK_APP_ID: Optional[str] = None
    SLACK_REDIRECT_URI: str = "http://localhost:8000/slack/oauth/callback"
    SLACK_API_BASE_URL: str = "https://slack.com/api"
    SLACK_AUTHORIZE_URL: str = "https://slack.com/oauth/v2/authorize"
    SLACK_SCOPES: str = "channels:read,groups:read,users:read,chat:write"
    SLACK_USER_SCOPES: str = "users:read"
    SLACK_REQUEST_MAX_AGE_SECONDS: int = 60 * 5

    # Service and removed accounts never listed on the Home tab
    SLACK_IGNORED_USER_IDS: Annotated[List[str], NoDecode] = ["USLACKBOT"]

    # Frontend dashboard the OAuth callback redirects to
    FRONTEND_DASHBOARD_URL: str = "https://yourtyme-slack.vercel.app/dashboard"

    # World time lookup (api-ninjas)
    WORLDTIME_API_URL: str = "https://api.api-ninjas.com/v1/worldtime"
    API_NINJAS_KEY: Optional[str] = None
    WORLDTIME_TIMEOUT_SECONDS: float = 10.0

    # Home tab synchronisation
    SLACK_CHANNEL_PAGE_SIZE: int = 100
    EXTERNAL_CALL_TIMEOUT_SECONDS: float = 10.0
    SLACK_MAX_ATTEMPTS: int = 5
    SLACK_BACKOFF_BASE_SECONDS: float = 1.0
    SLACK_BACKOFF_FACTOR: float = 2.0
    SLACK_BACKOFF_CAP_SECONDS: float = 16.0
    PROFILE_LOOKUP_ATTEMPTS: int = 3
    PROFILE_LOOKUP_DELAY_SECONDS: float = 1.0
    TIME_LOOKUP_ATTEMPTS: int = 2
    HOME_PUBLISH_ATTEMPTS: int = 3
    HOME_SYNC_TIME_BUDGET_SECONDS: float = 25.0

    # Logging
    LOG_LEVEL: str = "INFO"

    @field_validator(
        "ALLOWED_ORIGINS", "ALLOWED_HOSTS", "SLACK_IGNORED_USER_IDS", mode="before"
    )
    @classmethod
    def parse_comma_list(cls, v):
        """Parse comma separated values from string or list."""
        if isinstance(v, str):
            return [item.strip() for item in v.split(",") if item.strip()]
        return v

    @field_validator("SLACK_CHANNEL_PAGE_SIZE")
    @classmethod
    def validate_page_size(cls, v):
        """Slack caps conversations.list pages at 1000; we stay at 100 or below."""
        if v < 1 or v > 100:
            raise ValueError("SLACK_CHANNEL_PAGE_SIZE must be between 1 and 100")
        return v

    @field_validator("ENVIRONMENT")
    @classmethod
    def validate_environment(cls, v):
        """Validate environment setting."""
        allowed_envs = ["development", "staging", "production"]
        if v not in allowed_envs:
            raise ValueError(f"Environment must be one of {allowed_envs}")
        return v

    def validate_required(self) -> None:
        """
        Ensure the credentials the service cannot run without are present.

        Raises:
            ConfigError: If a required credential is missing
        """
        missing = [
            name
            for name in ("SLACK_BOT_TOKEN", "SLACK_SIGNING_SECRET")
            if not getattr(self, name)
        ]
        if missing:
            raise ConfigError(
                f"Missing required configuration: {', '.join(missing)}",
                details={"missing": missing},
            )

    def get_oauth_config(self) -> Dict[str, Any]:
        """Get Slack OAuth configuration."""
        return {
            "client_id": self.SLACK_CLIENT_ID,
            "redirect_uri": self.SLACK_REDIRECT_URI,
            "scope": self.SLACK_SCOPES,
            "user_scope": self.SLACK_USER_SCOPES,
            "authorize_url": self.SLACK_AUTHORIZE_URL,
        }

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = True
        extra = "ignore"


# Create global settings instance
settings = Settings()


def get_mongodb_url() -> str:
    """
    Get MongoDB connection URL with authentication if credentials are provided.

    Returns:
        str: MongoDB connection URL
    """
    if settings.MONGO_URI:
        return settings.MONGO_URI

    if settings.MONGODB_USERNAME and settings.MONGODB_PASSWORD:
        base_url = settings.MONGODB_URL.replace("mongodb://", "")
        if "@" not in base_url:
            return f"mongodb://{settings.MONGODB_USERNAME}:{settings.MONGODB_PASSWORD}@{base_url}"

    return settings.MONGODB_URL


def get_mongodb_database_name() -> str:
    """
    Get MongoDB database name.

    Returns:
        str: MongoDB database name
    """
    if settings.MONGO_DB_NAME:
        return settings.MONGO_DB_NAME

    return settings.MONGODB_DATABASE


def is_production() -> bool:
    """Check if running in production environment."""
    return settings.ENVIRONMENT == "production"
