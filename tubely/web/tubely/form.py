"""Read one file field of a ``multipart/form-data`` body as it arrives.

Nothing is spooled: the part's headers are available as soon as they have been
received, and its bytes are handed out only as the caller reads them, so an
upload can be refused on its declared type or its size before the rest of the
body is consumed.
"""

from __future__ import annotations

import typing as t

import python_multipart
from python_multipart.exceptions import FormParserError
from python_multipart.multipart import parse_options_header

from tubely.errors import BadRequest, PayloadTooLarge


class StreamedFilePart(object):
    """The first file part named ``field`` in a multipart body.

    Other parts are parsed and discarded. Every body byte pulled from
    ``stream`` counts towards ``max_body_bytes``.
    """

    def __init__(self, stream: t.AsyncIterator[bytes], boundary: bytes, field: str, max_body_bytes: int):
        self.field = field
        self.max_body_bytes = max_body_bytes
        self.content_type: str | None = None
        self.filename: str | None = None

        self._chunks = stream
        self._received = 0
        self._buffer = bytearray()
        self._found = False
        self._reading = False
        self._finished = False
        self._eof = False

        self._headers: list[tuple[bytes, bytes]] = []
        self._header_field = b""
        self._header_value = b""

        self._parser = python_multipart.MultipartParser(
            boundary,
            {
                "on_part_begin": self._on_part_begin,
                "on_part_data": self._on_part_data,
                "on_part_end": self._on_part_end,
                "on_header_field": self._on_header_field,
                "on_header_value": self._on_header_value,
                "on_header_end": self._on_header_end,
                "on_headers_finished": self._on_headers_finished,
            },
        )

    @classmethod
    async def open(
        cls, content_type: str | None, stream: t.AsyncIterator[bytes], field: str, max_body_bytes: int
    ) -> StreamedFilePart:
        """Read just far enough into the body to see the headers of ``field``.

        Raises:
            BadRequest: the body is not multipart, is malformed, or has no such file field
            PayloadTooLarge: the body passed ``max_body_bytes`` before the field was found
        """
        media_type, options = parse_options_header(content_type or "")
        boundary = options.get(b"boundary")
        if media_type != b"multipart/form-data" or not boundary:
            raise BadRequest("expected a multipart/form-data body")

        part = cls(stream, boundary, field, max_body_bytes)
        while not part._found and not part._eof:
            await part._pull()
        if not part._found:
            raise BadRequest(f"missing multipart file field '{field}'")
        return part

    async def read(self, size: int = -1) -> bytes:
        while not self._buffer and not self._finished and not self._eof:
            await self._pull()

        if size < 0 or size >= len(self._buffer):
            data = bytes(self._buffer)
            self._buffer.clear()
        else:
            data = bytes(self._buffer[:size])
            del self._buffer[:size]
        return data

    async def _pull(self) -> None:
        chunk = await anext(self._chunks, None)
        try:
            if chunk is None:
                self._eof = True
                self._parser.finalize()
                return
            self._received += len(chunk)
            if self._received > self.max_body_bytes:
                raise PayloadTooLarge(f"request body exceeds {self.max_body_bytes} bytes")
            self._parser.write(chunk)
        except FormParserError as e:
            raise BadRequest("malformed multipart body") from e

    def _on_part_begin(self) -> None:
        self._headers = []

    def _on_header_field(self, data: bytes, start: int, end: int) -> None:
        self._header_field += data[start:end]

    def _on_header_value(self, data: bytes, start: int, end: int) -> None:
        self._header_value += data[start:end]

    def _on_header_end(self) -> None:
        self._headers.append((self._header_field.lower(), self._header_value))
        self._header_field = b""
        self._header_value = b""

    def _on_headers_finished(self) -> None:
        headers = dict(self._headers)
        _, options = parse_options_header(headers.get(b"content-disposition", b""))
        is_target = (
            not self._found
            and options.get(b"name", b"").decode("utf-8", errors="replace") == self.field
            and b"filename" in options
        )
        if is_target:
            self._found = self._reading = True
            self.filename = options[b"filename"].decode("utf-8", errors="replace")
            if b"content-type" in headers:
                self.content_type = headers[b"content-type"].decode("latin-1")

    def _on_part_data(self, data: bytes, start: int, end: int) -> None:
        if self._reading:
            self._buffer.extend(data[start:end])

    def _on_part_end(self) -> None:
        if self._reading:
            self._reading = False
            self._finished = True
