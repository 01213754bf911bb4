from __future__ import annotations

import typing as t

import annotated_types as ant
import pydantic as p

from .base import BaseSettings


class WebSettings(BaseSettings):
    tubely: TubelyWebSettings


class ServeSettings(BaseSettings):
    host: p.IPvAnyAddress
    port: t.Annotated[int, ant.Gt(0), ant.Le(65535)]


class AuthSettings(BaseSettings):
    """Authentication settings for JWT tokens."""

    jwt_algorithm: t.Literal["HS256"] = "HS256"
    access_token_expire_minutes: t.Annotated[int, ant.Gt(1)] = 60


class UploadSettings(BaseSettings):
    """Size ceilings for inbound uploads, in bytes."""

    max_video_bytes: t.Annotated[int, ant.Gt(0)] = 1 << 30
    max_thumbnail_bytes: t.Annotated[int, ant.Gt(0)] = 10 << 20


class TubelyWebSettings(BaseSettings):
    """Settings for the Tubely web application."""

    backend: ServeSettings
    cors_origins: list[str] = []
    auth: AuthSettings = AuthSettings()
    upload: UploadSettings = UploadSettings()
