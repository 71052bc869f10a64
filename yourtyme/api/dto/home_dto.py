"""
DTOs for the Slack Home tab.
Inputs of the view builder and the result of a Home sync run.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class MemberRow(BaseModel):
    """One teammate line on the Home tab."""

    user_id: str = Field(..., description="Slack user ID")
    display_name: str = Field(..., description="Name shown on the Home tab")
    city: str = Field(..., description="City or a placeholder when unavailable")
    has_city: bool = Field(False, description="Whether `city` is a real value")
    local_time: Optional[str] = Field(
        None, description="Formatted local time, None when the lookup failed"
    )


class ChannelGroup(BaseModel):
    """Members listed under one channel heading."""

    channel_id: str = Field(..., description="Slack channel ID")
    channel_name: Optional[str] = Field(None, description="Channel name")
    members: List[MemberRow] = Field(default_factory=list, description="Rows")


class HomeSyncResult(BaseModel):
    """Outcome of a Home tab synchronisation."""

    user_id: str = Field(..., description="User the view was built for")
    view: Dict[str, Any] = Field(..., description="Published view payload")
    published: bool = Field(False, description="Whether Slack accepted the view")
    partial: bool = Field(False, description="Member resolution hit the time budget")
    fallback: bool = Field(False, description="The error view was published instead")
    channel_count: int = Field(0, description="Channel groups rendered")
    member_count: int = Field(0, description="Member rows rendered")
