__all__ = [
    # Base
    "BaseModel",
    "WithCtime",
    "WithMtime",
    "WithTimestamps",
    # Enums
    "DeploymentEnvironment",
    # ID Types
    "ShortUUIDKey",
    "UserID",
    "VideoID",
    # User
    "User",
    # Video
    "AspectRatio",
    "MediaProbe",
    "Video",
]

from .base import BaseModel, WithCtime, WithMtime, WithTimestamps
from .enum import DeploymentEnvironment
from .id import ShortUUIDKey, UserID, VideoID
from .user import User
from .video import AspectRatio, MediaProbe, Video
