"""
MongoDB models for channel communities.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

DEFAULT_CHANNEL_NAME = "Unknown"


class MemberSnapshot(BaseModel):
    """
    Point-in-time copy of a member's name and city.

    Snapshots are appended with set-union semantics and are never refreshed
    when the member later changes city, so they may lag the user profile.
    """

    user_id: str = Field(..., description="Slack user ID")
    display_name: Optional[str] = Field(None, description="Name at snapshot time")
    city: Optional[str] = Field(None, description="City at snapshot time")

    class Config:
        extra = "ignore"


class CommunityProfile(BaseModel):
    """Stored member roster of a Slack channel."""

    channel_id: str = Field(..., description="Slack channel ID")
    channel_name: str = Field(
        default=DEFAULT_CHANNEL_NAME, description="Channel name at creation"
    )
    members: List[MemberSnapshot] = Field(
        default_factory=list, description="Member snapshots"
    )
    creator_id: Optional[str] = Field(None, description="User who created the record")

    class Config:
        extra = "ignore"
