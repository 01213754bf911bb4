"""Per-request temporary files for inbound uploads."""

from __future__ import annotations

import asyncio
import contextlib
import os
import tempfile
import typing as t
from pathlib import Path

from tubely.core.provider import LoggingProvider
from tubely.errors import PayloadTooLarge, StorageIOError

CHUNK_SIZE = 1 << 20


class AsyncReader(t.Protocol):
    async def read(self, size: int = -1) -> bytes: ...


class StagedUpload(t.NamedTuple):
    path: Path
    file: t.BinaryIO


@contextlib.contextmanager
def staged_file(directory: Path, suffix: str = "") -> t.Iterator[StagedUpload]:
    """Create an exclusively-owned temporary file, removed on exit.

    Raises:
        StorageIOError: if the file cannot be created
    """
    try:
        fd, name = tempfile.mkstemp(prefix="tubely-upload-", suffix=suffix, dir=directory)
    except OSError as e:
        LoggingProvider.get_logger().error("could not create staging file", extra={"directory": directory, "error": e})
        raise StorageIOError() from e

    path = Path(name)
    f = os.fdopen(fd, "w+b")
    try:
        yield StagedUpload(path, f)
    finally:
        f.close()
        path.unlink(missing_ok=True)


async def copy_limited(src: AsyncReader, dest: t.BinaryIO, max_bytes: int) -> int:
    """Copy ``src`` to completion into ``dest``, refusing more than ``max_bytes``.

    Raises:
        PayloadTooLarge: once the copy passes ``max_bytes``
        StorageIOError: if writing to ``dest`` fails
    """
    total = 0
    while chunk := await src.read(CHUNK_SIZE):
        total += len(chunk)
        if total > max_bytes:
            raise PayloadTooLarge(f"upload exceeds {max_bytes} bytes")
        try:
            await asyncio.to_thread(dest.write, chunk)
        except OSError as e:
            raise StorageIOError() from e

    try:
        await asyncio.to_thread(dest.flush)
    except OSError as e:
        raise StorageIOError() from e
    return total
