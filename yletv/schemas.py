from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ChannelResponse(BaseModel):
    """Channel data model"""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="YLE service ID")
    title: str = Field(..., description="Channel display name")


class ProgramResponse(BaseModel):
    """Currently airing program"""
    model_config = ConfigDict(from_attributes=True)

    id: str = Field(..., description="Schedule entry ID")
    content_id: str = Field(..., description="Content item ID used for on-demand lookup")
    channel_id: str = Field(..., description="ID of the channel airing this program")
    channel: str = Field(..., description="Channel display name at build time")
    title: str
    description: str | None = None
    image_id: str = Field("", description="Artwork ID, empty when none is available")
    media_id: str | None = Field(None, description="On-demand media ID, null when not playable")
    playback_url: str | None = Field(None, description="Navigation token, present iff media_id is set")
    start_time: datetime
    end_time: datetime


class ChannelsResponse(BaseModel):
    built_at: datetime | None
    total_channels: int
    channels: list[ChannelResponse]


class ProgramsResponse(BaseModel):
    built_at: datetime | None
    total_programs: int
    programs: list[ProgramResponse]


class NavigateRequest(BaseModel):
    """Navigation event"""
    fragment: str = Field(..., description="Route fragment, e.g. 'channels/yle-tv1'")

    @field_validator('fragment')
    @classmethod
    def validate_fragment(cls, v: str) -> str:
        """Reject blank fragments"""
        if not v.strip():
            raise ValueError("fragment must not be empty")
        return v.strip()


class RouteStateResponse(BaseModel):
    """Route controller state"""
    state: Literal["uninitialized", "resolving", "ready", "error", "superseded"]
    generation: int
    fragment: str | None = None
    channel_id: str | None = None
    program: ProgramResponse | None = None
    url: str | None = Field(None, description="Decrypted stream URL, null for metadata-only programs")
    error: str | None = None


class PublishedRouteResponse(BaseModel):
    """Last result handed to the view layer"""
    published_at: datetime
    program: ProgramResponse | None = None
    url: str | None = None
    fragment: str | None = None
    error: str | None = None


class RouteResponse(BaseModel):
    current: RouteStateResponse
    published: PublishedRouteResponse | None = None
