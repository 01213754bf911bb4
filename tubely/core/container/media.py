from __future__ import annotations

import tempfile
from pathlib import Path

from dependency_injector.containers import DeclarativeContainer
from dependency_injector.providers import Callable, Configuration, Provider, Singleton

from tubely.media.probe import FFProbeProber, Prober
from tubely.media.remux import FFmpegRemuxer, Remuxer


def provide_staging_path(configured: Path | None) -> Path:
    path = Path(configured) if configured else Path(tempfile.gettempdir())
    path.mkdir(parents=True, exist_ok=True)
    return path


class MediaContainer(DeclarativeContainer):
    config = Configuration()

    prober: Provider[Prober] = Singleton(
        FFProbeProber, binary=config.ffprobe.binary, timeout_seconds=config.ffprobe.timeout_seconds
    )
    remuxer: Provider[Remuxer] = Singleton(
        FFmpegRemuxer, binary=config.ffmpeg.binary, timeout_seconds=config.ffmpeg.timeout_seconds
    )
    staging_path: Provider[Path] = Callable(provide_staging_path, configured=config.staging_path)
