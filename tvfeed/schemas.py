from datetime import datetime, time as dt_time

from pydantic import BaseModel, Field

from tvfeed.models import Programme, Thumbnail


class ProgrammeResponse(BaseModel):
    """Programme data model"""
    id: int = Field(..., description="Programme ID parsed from the item link, -1 if unknown")
    channel_id: int = Field(..., description="Channel ID parsed from the source URL, -1 if unknown")
    title: str = Field(..., description="Programme title")
    description: str = Field("", description="Programme description")
    start_date_time: datetime | None = Field(None, description="Start time in the service's local time zone")
    duration: int = Field(0, description="Duration in seconds")

    @classmethod
    def from_record(cls, programme: Programme) -> "ProgrammeResponse":
        return cls(
            id=programme.id,
            channel_id=programme.channel_id,
            title=programme.title,
            description=programme.description,
            start_date_time=programme.start_date_time,
            duration=programme.duration,
        )


class ThumbnailResponse(BaseModel):
    """Thumbnail data model"""
    url: str = Field(..., description="Image URL")
    time: dt_time = Field(..., description="Offset into the programme")

    @classmethod
    def from_record(cls, thumbnail: Thumbnail) -> "ThumbnailResponse":
        return cls(url=thumbnail.url, time=thumbnail.time)


class ProgrammeListResponse(BaseModel):
    count: int
    updated_at: datetime | None = None
    programmes: list[ProgrammeResponse]


class ThumbnailListResponse(BaseModel):
    count: int
    updated_at: datetime | None = None
    thumbnails: list[ThumbnailResponse]
