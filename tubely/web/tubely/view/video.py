"""View models for video endpoints."""

from __future__ import annotations

import datetime
import typing as t

import annotated_types as ant

from tubely.model import BaseModel, UserID, Video, VideoID


class VideoCreateRequest(BaseModel):
    title: t.Annotated[str, ant.MinLen(1), ant.MaxLen(256)]
    description: str = ""


class VideoResponse(BaseModel):
    video_id: VideoID
    user_id: UserID
    title: str
    description: str
    thumbnail_url: str | None
    video_url: str | None
    create_time: datetime.datetime
    update_time: datetime.datetime

    @classmethod
    def from_model(cls, video: Video) -> VideoResponse:
        return cls(**video.model_dump())


class VideoListResponse(BaseModel):
    videos: list[VideoResponse]
