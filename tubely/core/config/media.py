from __future__ import annotations

import typing as t
from pathlib import Path

import annotated_types as ant

from .base import BaseSettings


class ToolSettings(BaseSettings):
    """An external media tool and how long a single invocation may run."""

    binary: str
    timeout_seconds: t.Annotated[float, ant.Gt(0)] = 60.0


class MediaSettings(BaseSettings):
    ffprobe: ToolSettings = ToolSettings(binary="ffprobe", timeout_seconds=30.0)
    ffmpeg: ToolSettings = ToolSettings(binary="ffmpeg", timeout_seconds=600.0)
    # where uploads are staged while being probed and remuxed; the platform
    # temp directory when unset
    staging_path: Path | None = None
