"""Publish an uploaded thumbnail image; a plain byte copy with no processing."""

from __future__ import annotations

import io

import sqlalchemy.exc

import tubely.lib.util as util
from tubely.core.provider import LoggingProvider
from tubely.errors import MetadataUpdateFailed, UnsupportedMediaType, UploadFailed
from tubely.model import Video
from tubely.storage import Session
from tubely.storage import video as video_storage
from tubely.storage.object import ObjectStore, ObjectStoreError

from .key import derive_thumbnail_key
from .staging import AsyncReader, copy_limited

THUMBNAIL_EXTENSIONS = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/gif": "gif",
}


class ThumbnailPipeline(object):
    def __init__(self, object_store: ObjectStore, max_bytes: int):
        self.object_store = object_store
        self.max_bytes = max_bytes
        self.logger = LoggingProvider.get_logger("cls")

    async def run(self, video: Video, upload: AsyncReader, content_type: str | None, session: Session) -> Video:
        media_type = util.media_type(content_type or "")
        extension = THUMBNAIL_EXTENSIONS.get(media_type)
        if extension is None:
            raise UnsupportedMediaType(f"expected one of {sorted(THUMBNAIL_EXTENSIONS)}, got {media_type or 'nothing'}")

        buf = io.BytesIO()
        size = await copy_limited(upload, buf, self.max_bytes)

        key = derive_thumbnail_key(extension)
        extra = {"video_id": video.video_id, "key": key, "size": size}
        try:
            result = await self.object_store.upload(key, buf.getvalue(), media_type)
        except ObjectStoreError as e:
            self.logger.error("could not store thumbnail", extra={**extra, "reason": e.reason})
            raise UploadFailed() from e

        try:
            with session.begin():
                updated = video_storage.update(video.video_id, thumbnail_url=result.url, session=session)
        except (sqlalchemy.exc.SQLAlchemyError, KeyError) as e:
            self.logger.error("stored thumbnail was not recorded", extra={**extra, "url": result.url, "error": e})
            raise MetadataUpdateFailed() from e

        self.logger.info("published thumbnail", extra={**extra, "url": result.url})
        return updated
