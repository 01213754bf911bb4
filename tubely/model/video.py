import enum

from .base import BaseModel, WithTimestamps
from .id import UserID, VideoID


class AspectRatio(enum.Enum):
    """Coarse shape of a video's frame, used to namespace its object key."""

    Landscape = "landscape"
    Portrait = "portrait"
    Other = "other"


class MediaProbe(BaseModel):
    width: int
    height: int
    aspect_ratio: AspectRatio


class Video(WithTimestamps):
    video_id: VideoID
    user_id: UserID
    title: str
    description: str = ""
    thumbnail_url: str | None = None
    video_url: str | None = None
