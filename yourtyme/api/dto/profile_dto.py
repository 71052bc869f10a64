from typing import List, Optional

from pydantic import BaseModel, Field

from yourtyme.domain.models.community import MemberSnapshot


# Request DTOs
class AddCityRequestDTO(BaseModel):
    """Request DTO for setting a user's city."""

    user_id: Optional[str] = Field(
        None, description="Slack user ID, when not sent as X-Slack-User-Id"
    )
    city: str = Field(..., min_length=1, description="City name, e.g. London")
    channel_id: Optional[str] = Field(
        None, description="Channel to add a member snapshot to"
    )


class UpdateNameRequestDTO(BaseModel):
    """Request DTO for changing a display name."""

    user_id: Optional[str] = Field(
        None, description="Slack user ID, when not sent as X-Slack-User-Id"
    )
    name: str = Field(..., min_length=1, description="New display name")


# Response DTOs
class CityResponseDTO(BaseModel):
    """Response DTO for a user's city."""

    city: Optional[str] = Field(None, description="Stored city, null when unset")


class MembersResponseDTO(BaseModel):
    """Response DTO for a channel's member snapshots."""

    members: List[MemberSnapshot] = Field(
        default_factory=list, description="Member snapshots"
    )


class ClearMembersResponseDTO(BaseModel):
    """Response DTO for the bulk member clear."""

    success: bool = Field(True, description="Operation result")
    cleared: int = Field(0, description="Communities whose member list was emptied")
