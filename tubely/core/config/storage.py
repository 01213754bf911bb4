from __future__ import annotations

import typing as t
from pathlib import Path

import pydantic as p

from .base import BaseSettings


class ObjectSettings(BaseSettings):
    """Object storage settings for published videos and thumbnails."""

    backend: t.Literal["local", "s3"] = "local"
    local_path: Path | None = None
    local_url_prefix: str = "/assets"
    s3_bucket: str | None = None
    s3_region: str | None = None
    s3_endpoint: str | None = None  # for S3-compatible providers, e.g. MinIO

    @p.model_validator(mode="after")
    def check_s3_identity(self) -> t.Self:
        if self.backend == "s3" and not (self.s3_bucket and self.s3_region):
            raise ValueError("s3 backend requires s3_bucket and s3_region")
        return self


class StorageSettings(BaseSettings):
    persistent: PersistentSettings
    object: ObjectSettings = ObjectSettings()


class PersistentSettings(BaseSettings):
    postgresql: PostgresqlSettings


class PostgresqlSettings(BaseSettings):
    host: p.IPvAnyAddress | str | None = None
    port: int = 5432
    database: str
    driver: t.Literal["postgresql+psycopg"] = "postgresql+psycopg"
