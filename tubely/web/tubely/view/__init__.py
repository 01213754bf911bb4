"""View models for the Tubely web application."""

__all__ = [
    # Auth views
    "LoginRequest",
    "LoginResponse",
    "RegisterRequest",
    "TokenResponse",
    "UserResponse",
    # Video views
    "VideoCreateRequest",
    "VideoListResponse",
    "VideoResponse",
]

from .auth import LoginRequest, LoginResponse, RegisterRequest, TokenResponse, UserResponse
from .video import VideoCreateRequest, VideoListResponse, VideoResponse
