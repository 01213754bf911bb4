"""Tests for tubely.web.tubely.form."""

from __future__ import annotations

import typing as t

import pytest

from tubely.errors import BadRequest, PayloadTooLarge
from tubely.web.tubely.form import StreamedFilePart

BOUNDARY = "tubely-test-boundary"
CONTENT_TYPE = f"multipart/form-data; boundary={BOUNDARY}"


def file_part(name: str, filename: str, content_type: str, body: bytes) -> bytes:
    return (
        f"--{BOUNDARY}\r\n"
        f'Content-Disposition: form-data; name="{name}"; filename="{filename}"\r\n'
        f"Content-Type: {content_type}\r\n\r\n"
    ).encode() + body + b"\r\n"


def text_part(name: str, value: str) -> bytes:
    return f'--{BOUNDARY}\r\nContent-Disposition: form-data; name="{name}"\r\n\r\n{value}\r\n'.encode()


def closing() -> bytes:
    return f"--{BOUNDARY}--\r\n".encode()


class Chunks(object):
    """Yields a body in fixed-size chunks and remembers how much was taken."""

    def __init__(self, body: bytes, chunk_size: int = 64):
        self.body = body
        self.chunk_size = chunk_size
        self.sent = 0

    async def __aiter__(self) -> t.AsyncIterator[bytes]:
        while self.sent < len(self.body):
            chunk = self.body[self.sent : self.sent + self.chunk_size]
            self.sent += len(chunk)
            yield chunk


async def read_all(part: StreamedFilePart) -> bytes:
    out = bytearray()
    while chunk := await part.read(1000):
        out.extend(chunk)
    return bytes(out)


class TestStreamedFilePart(object):
    @pytest.mark.anyio
    async def test_reads_named_file(self) -> None:
        payload = bytes(range(256)) * 40
        body = text_part("title", "ignored") + file_part("video", "clip.mp4", "video/mp4", payload) + closing()

        part = await StreamedFilePart.open(CONTENT_TYPE, Chunks(body).__aiter__(), "video", 1 << 20)

        assert part.content_type == "video/mp4"
        assert part.filename == "clip.mp4"
        assert await read_all(part) == payload
        assert await part.read() == b""

    @pytest.mark.anyio
    async def test_headers_available_before_body_is_consumed(self) -> None:
        body = file_part("video", "clip.webm", "video/webm", b"\x00" * (1 << 20)) + closing()
        chunks = Chunks(body, chunk_size=4096)

        part = await StreamedFilePart.open(CONTENT_TYPE, chunks.__aiter__(), "video", 2 << 20)

        assert part.content_type == "video/webm"
        assert chunks.sent == 4096

    @pytest.mark.anyio
    async def test_skips_other_file_fields(self) -> None:
        body = (
            file_part("thumbnail", "a.png", "image/png", b"png")
            + file_part("video", "clip.mp4", "video/mp4", b"mp4")
            + closing()
        )

        part = await StreamedFilePart.open(CONTENT_TYPE, Chunks(body, 7).__aiter__(), "video", 1 << 20)

        assert await read_all(part) == b"mp4"

    @pytest.mark.anyio
    async def test_missing_field(self) -> None:
        body = text_part("video", "not a file") + closing()
        with pytest.raises(BadRequest):
            await StreamedFilePart.open(CONTENT_TYPE, Chunks(body).__aiter__(), "video", 1 << 20)

    @pytest.mark.anyio
    @pytest.mark.parametrize("content_type", [None, "application/json", "multipart/form-data"])
    async def test_not_multipart(self, content_type: str | None) -> None:
        with pytest.raises(BadRequest):
            await StreamedFilePart.open(content_type, Chunks(b"{}").__aiter__(), "video", 1 << 20)

    @pytest.mark.anyio
    async def test_malformed_body(self) -> None:
        with pytest.raises(BadRequest):
            await StreamedFilePart.open(CONTENT_TYPE, Chunks(b"garbage without a boundary").__aiter__(), "video", 1024)

    @pytest.mark.anyio
    async def test_body_limit_stops_consumption(self) -> None:
        body = file_part("video", "clip.mp4", "video/mp4", b"\x00" * (1 << 20)) + closing()
        chunks = Chunks(body, chunk_size=4096)
        part = await StreamedFilePart.open(CONTENT_TYPE, chunks.__aiter__(), "video", 64 << 10)

        with pytest.raises(PayloadTooLarge):
            await read_all(part)

        assert chunks.sent <= (64 << 10) + 4096
