"""Publish an uploaded video: stage, probe, remux, store, record."""

from __future__ import annotations

import contextlib
from pathlib import Path

import sqlalchemy.exc

import tubely.lib.util as util
from tubely.core.provider import LoggingProvider
from tubely.errors import MetadataUpdateFailed, StorageIOError, UnsupportedMediaType, UploadFailed
from tubely.model import Video
from tubely.storage import Session
from tubely.storage import video as video_storage
from tubely.storage.object import ObjectStore, ObjectStoreError

from .key import derive_object_key
from .probe import Prober
from .remux import Remuxer
from .staging import AsyncReader, copy_limited, staged_file

VIDEO_MEDIA_TYPES = frozenset({"video/mp4"})


class UploadPipeline(object):
    """Drives a single video upload from inbound bytes to a published URL.

    The object is written before the record is updated, so a recorded
    ``video_url`` always names a stored object. Every temporary file is
    released when :meth:`run` returns or raises.
    """

    def __init__(
        self,
        prober: Prober,
        remuxer: Remuxer,
        object_store: ObjectStore,
        staging_path: Path,
        max_bytes: int,
    ):
        self.prober = prober
        self.remuxer = remuxer
        self.object_store = object_store
        self.staging_path = staging_path
        self.max_bytes = max_bytes
        self.logger = LoggingProvider.get_logger("cls")

    async def run(self, video: Video, upload: AsyncReader, content_type: str | None, session: Session) -> Video:
        """Publish ``upload`` as the video for ``video``, an already-authorized record.

        Raises:
            UnsupportedMediaType: ``content_type`` is not ``video/mp4``; nothing is staged
            PayloadTooLarge: the upload passed the configured ceiling
            StorageIOError: the upload could not be staged
            ProbeFailed: the upload could not be inspected
            RemuxFailed: the upload could not be repacked
            UploadFailed: the object store refused the write; the record is unchanged
            MetadataUpdateFailed: the object was stored but the record was not updated
        """
        media_type = util.media_type(content_type or "")
        if media_type not in VIDEO_MEDIA_TYPES:
            raise UnsupportedMediaType(f"expected video/mp4, got {media_type or 'nothing'}")

        extra = {"video_id": video.video_id}
        with contextlib.ExitStack() as stack:
            staged = stack.enter_context(staged_file(self.staging_path, suffix=".mp4"))
            size = await copy_limited(upload, staged.file, self.max_bytes)
            try:
                staged.file.seek(0)
            except OSError as e:
                raise StorageIOError() from e
            self.logger.info("staged upload", extra={**extra, "path": staged.path, "size": size})

            probe = await self.prober.probe(staged.path)
            processed = await self.remuxer.remux(staged.path)
            stack.callback(processed.unlink, missing_ok=True)

            try:
                body = stack.enter_context(processed.open("rb"))
            except OSError as e:
                raise StorageIOError() from e

            key = derive_object_key(probe.aspect_ratio)
            extra.update(key=key, aspect_ratio=probe.aspect_ratio)
            try:
                result = await self.object_store.upload_stream(key, body, media_type)
            except ObjectStoreError as e:
                self.logger.error("could not store video", extra={**extra, "reason": e.reason})
                raise UploadFailed() from e
            self.logger.info("stored video", extra={**extra, "url": result.url, "size": result.size})

            try:
                with session.begin():
                    updated = video_storage.update(video.video_id, video_url=result.url, session=session)
            except (sqlalchemy.exc.SQLAlchemyError, KeyError) as e:
                # the stored object is now unreferenced; it is left in place
                self.logger.error("stored video was not recorded", extra={**extra, "url": result.url, "error": e})
                raise MetadataUpdateFailed() from e

        self.logger.info("published video", extra={**extra, "url": updated.video_url})
        return updated
