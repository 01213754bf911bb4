"""Repack media for progressive download without re-encoding."""

from __future__ import annotations

import contextlib
import typing as t
from pathlib import Path

from tubely.core.provider import LoggingProvider
from tubely.errors import RemuxFailed

from .process import run_tool, ToolError

OUTPUT_SUFFIX = ".processing"


class Remuxer(t.Protocol):
    async def remux(self, path: Path) -> Path: ...


class FFmpegRemuxer(object):
    """Move the MP4 index (``moov`` atom) to the front of the file.

    Streams are copied as-is; the output is written next to the input and the
    input is never modified.
    """

    def __init__(self, binary: str = "ffmpeg", timeout_seconds: float = 600.0):
        self.binary = binary
        self.timeout_seconds = timeout_seconds
        self.logger = LoggingProvider.get_logger("cls")

    @staticmethod
    def output_path(path: Path) -> Path:
        return path.with_name(path.name + OUTPUT_SUFFIX)

    def argv(self, path: Path, output: Path) -> list[str]:
        return [
            self.binary,
            "-nostdin",
            "-y",
            "-i",
            str(path),
            "-c",
            "copy",
            "-movflags",
            "faststart",
            "-f",
            "mp4",
            str(output),
        ]

    async def remux(self, path: Path) -> Path:
        output = self.output_path(path)
        try:
            await run_tool(self.argv(path, output), timeout=self.timeout_seconds)
        except ToolError as e:
            with contextlib.suppress(FileNotFoundError):
                output.unlink()
            self.logger.warning(
                "ffmpeg failed",
                extra={"path": path, "reason": e.reason, "returncode": e.returncode, "stderr": e.stderr},
            )
            raise RemuxFailed() from e

        if not output.is_file():
            self.logger.warning("ffmpeg produced no output", extra={"path": path, "output": output})
            raise RemuxFailed()
        return output
