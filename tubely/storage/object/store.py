"""Object storage interface and implementations."""

from __future__ import annotations

import abc
import asyncio
import io
import shutil
import typing as t
from pathlib import Path

import boto3
import pydantic as p
from botocore.exceptions import BotoCoreError, ClientError

from tubely.core.provider import LoggingProvider

if t.TYPE_CHECKING:
    from typing import BinaryIO


class ObjectStoreError(Exception):
    """A write to the object store did not complete."""

    def __init__(self, key: str, reason: str):
        self.key = key
        self.reason = reason
        super().__init__(f"{key}: {reason}")


class UploadResult(p.BaseModel):
    """Result of an upload operation."""

    model_config = p.ConfigDict(frozen=True)

    # The URL to access the uploaded file
    url: str

    # Size of the uploaded file in bytes
    size: int

    # Content type of the file
    content_type: str


class ObjectStore(abc.ABC):
    """Abstract base class for object storage."""

    @abc.abstractmethod
    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> UploadResult:
        """Upload data to storage.

        Args:
            key: The storage key (path/filename) for the object.
            data: The file contents as bytes.
            content_type: MIME type of the file.

        Raises:
            ObjectStoreError: if the object was not written.
        """
        ...

    @abc.abstractmethod
    async def upload_stream(
        self,
        key: str,
        file: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> UploadResult:
        """Upload the remaining contents of a file-like object to storage.

        Raises:
            ObjectStoreError: if the object was not written.
        """
        ...

    @abc.abstractmethod
    def get_url(self, key: str) -> str:
        """Get the public URL for an object."""
        ...


class LocalObjectStore(ObjectStore):
    """Local filesystem implementation for development."""

    def __init__(self, base_path: Path, url_prefix: str = "/assets") -> None:
        """Initialize local object store.

        Args:
            base_path: Directory to store files in.
            url_prefix: URL prefix for accessing files (served by the web app).
        """
        self.base_path = base_path
        self._url_prefix = url_prefix.rstrip("/")
        self.base_path.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        path = (self.base_path / key).resolve()
        if not path.is_relative_to(self.base_path.resolve()):
            raise ObjectStoreError(key, "key escapes the store root")
        return path

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> UploadResult:
        return await self.upload_stream(key, io.BytesIO(data), content_type)

    async def upload_stream(
        self,
        key: str,
        file: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> UploadResult:
        file_path = self._path(key)
        try:
            size = await asyncio.to_thread(self._write, file_path, file)
        except OSError as e:
            raise ObjectStoreError(key, str(e)) from e

        return UploadResult(url=self.get_url(key), size=size, content_type=content_type)

    @staticmethod
    def _write(path: Path, file: BinaryIO) -> int:
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, "wb") as dest:
            shutil.copyfileobj(file, dest)
        return path.stat().st_size

    @property
    def url_prefix(self) -> str:
        return self._url_prefix

    def get_url(self, key: str) -> str:
        return f"{self._url_prefix}/{key}"


class S3ObjectStore(ObjectStore):
    """Amazon S3 implementation.

    boto3 is synchronous, so each call runs in a worker thread and only blocks
    the request that issued it.
    """

    def __init__(
        self,
        bucket: str,
        region: str,
        endpoint_url: str | None = None,
        access_key_id: str | None = None,
        secret_access_key: str | None = None,
        client: t.Any = None,
    ) -> None:
        self.bucket = bucket
        self.region = region
        if client is None:
            # missing credentials fall through to boto3's default chain
            client = boto3.client(
                "s3",
                region_name=region,
                endpoint_url=endpoint_url,
                aws_access_key_id=access_key_id,
                aws_secret_access_key=secret_access_key,
            )
        self.client = client
        self.logger = LoggingProvider.get_logger("cls")

    async def upload(
        self,
        key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
    ) -> UploadResult:
        return await self.upload_stream(key, io.BytesIO(data), content_type)

    async def upload_stream(
        self,
        key: str,
        file: BinaryIO,
        content_type: str = "application/octet-stream",
    ) -> UploadResult:
        start = file.tell()
        size = file.seek(0, io.SEEK_END) - start
        file.seek(start)

        try:
            await asyncio.to_thread(
                self.client.upload_fileobj, file, self.bucket, key, ExtraArgs={"ContentType": content_type}
            )
        except (BotoCoreError, ClientError) as e:
            raise ObjectStoreError(key, str(e)) from e

        self.logger.debug("stored object", extra={"bucket": self.bucket, "key": key, "size": size})
        return UploadResult(url=self.get_url(key), size=size, content_type=content_type)

    def get_url(self, key: str) -> str:
        return f"https://{self.bucket}.s3.{self.region}.amazonaws.com/{key}"
