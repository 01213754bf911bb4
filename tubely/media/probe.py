"""Inspect staged media and classify its frame shape."""

from __future__ import annotations

import typing as t
from pathlib import Path

import pydantic as p

from tubely.core.provider import LoggingProvider
from tubely.errors import ProbeFailed
from tubely.model import AspectRatio, MediaProbe

from .process import run_tool, ToolError

# exclusive bounds; 16:9 is ~1.7778 and 9:16 is 0.5625
LANDSCAPE_BOUNDS = (1.77, 1.78)
PORTRAIT_BOUNDS = (0.56, 0.57)


def classify_aspect_ratio(width: int, height: int) -> AspectRatio:
    """Classify a frame by its width/height ratio.

    Raises:
        ValueError: if height is not positive
    """
    if height <= 0:
        raise ValueError(f"height must be positive, got {height}")

    ratio = width / height
    if LANDSCAPE_BOUNDS[0] < ratio < LANDSCAPE_BOUNDS[1]:
        return AspectRatio.Landscape
    if PORTRAIT_BOUNDS[0] < ratio < PORTRAIT_BOUNDS[1]:
        return AspectRatio.Portrait
    return AspectRatio.Other


class Prober(t.Protocol):
    async def probe(self, path: Path) -> MediaProbe: ...


class ProbeStream(p.BaseModel):
    model_config = p.ConfigDict(extra="ignore")

    codec_type: str | None = None
    width: int = 0
    height: int = 0


class ProbeOutput(p.BaseModel):
    model_config = p.ConfigDict(extra="ignore")

    streams: list[ProbeStream] = []

    def primary_stream(self) -> ProbeStream | None:
        """The first video stream, or the first stream of any kind.

        A container may lead with an audio or data stream, whose missing
        dimensions would otherwise fail the probe; so video streams are
        preferred over plain stream order.
        """
        for stream in self.streams:
            if stream.codec_type == "video":
                return stream
        return self.streams[0] if self.streams else None


class FFProbeProber(object):
    """Probe media with ``ffprobe``'s JSON stream report."""

    def __init__(self, binary: str = "ffprobe", timeout_seconds: float = 30.0):
        self.binary = binary
        self.timeout_seconds = timeout_seconds
        self.logger = LoggingProvider.get_logger("cls")

    def argv(self, path: Path) -> list[str]:
        return [self.binary, "-v", "error", "-print_format", "json", "-show_streams", str(path)]

    async def probe(self, path: Path) -> MediaProbe:
        try:
            result = await run_tool(self.argv(path), timeout=self.timeout_seconds)
        except ToolError as e:
            self.logger.warning(
                "ffprobe failed",
                extra={"path": path, "reason": e.reason, "returncode": e.returncode, "stderr": e.stderr},
            )
            raise ProbeFailed() from e

        return self.parse(result.stdout, path)

    def parse(self, output: bytes | str, path: Path | None = None) -> MediaProbe:
        try:
            report = ProbeOutput.model_validate_json(output)
        except p.ValidationError as e:
            self.logger.warning("unparsable ffprobe output", extra={"path": path, "errors": e.errors()})
            raise ProbeFailed() from e

        stream = report.primary_stream()
        if stream is None:
            self.logger.warning("no streams found", extra={"path": path})
            raise ProbeFailed("no media streams found")

        try:
            aspect_ratio = classify_aspect_ratio(stream.width, stream.height)
        except ValueError as e:
            self.logger.warning(
                "unusable stream dimensions", extra={"path": path, "width": stream.width, "height": stream.height}
            )
            raise ProbeFailed("no usable video dimensions") from e

        self.logger.debug(
            "probed media",
            extra={"path": path, "width": stream.width, "height": stream.height, "aspect_ratio": aspect_ratio},
        )
        return MediaProbe(width=stream.width, height=stream.height, aspect_ratio=aspect_ratio)
