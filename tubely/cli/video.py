"""CLI commands for inspecting media."""

from __future__ import annotations

import asyncio
from pathlib import Path

import tubely.lib.cli as click
from tubely.core import di
from tubely.errors import ProbeFailed
from tubely.media import Prober


@click.group("video")
def video():
    """Inspect media files."""
    ...


@video.command("probe")
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@di.inject
def video_probe(path: Path, prober: Prober = di.Provide["media.prober"]) -> None:
    """Report the dimensions and aspect-ratio class of PATH."""
    try:
        probe = asyncio.run(prober.probe(path))
    except ProbeFailed as e:
        click.echo(f"Error: {e.detail}", err=True)
        raise SystemExit(1) from e

    click.echo(f"{path}: {probe.width}x{probe.height} {probe.aspect_ratio.value}")
