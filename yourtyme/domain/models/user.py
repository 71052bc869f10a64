"""
MongoDB model for YourTyme user profiles.
One document per Slack user, keyed by the Slack user ID.
"""

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

# Fields a caller may write through ProfileRepository.upsert
PROFILE_FIELDS = ("display_name", "city", "auth_token", "team_id")


class UserProfile(BaseModel):
    """Stored identity, city and auth metadata of a Slack user."""

    user_id: str = Field(..., description="Slack user ID")
    display_name: Optional[str] = Field(
        None, description="Display name, resolved lazily from Slack"
    )
    city: Optional[str] = Field(None, description="City; absent means not set")
    auth_token: Optional[str] = Field(
        None, description="User access token from the Slack OAuth flow"
    )
    team_id: Optional[str] = Field(None, description="Slack workspace ID")
    updated_at: Optional[datetime] = Field(None, description="Last write timestamp")

    class Config:
        extra = "ignore"

    def public_dict(self) -> Dict[str, Any]:
        """Profile fields safe to hand to the dashboard and API callers."""
        return self.model_dump(exclude={"auth_token"}, mode="json")
