"""Tests for the video and thumbnail publish pipelines."""

from __future__ import annotations

import io
import typing as t
from pathlib import Path

import pytest
from sqlalchemy.orm import Session

from conftest import FailingObjectStore, FakeProber, FakeRemuxer
from tubely.errors import (
    MetadataUpdateFailed,
    PayloadTooLarge,
    ProbeFailed,
    RemuxFailed,
    UnsupportedMediaType,
    UploadFailed,
)
from tubely.media.pipeline import UploadPipeline
from tubely.media.thumbnail import ThumbnailPipeline
from tubely.model import User, Video
from tubely.storage import video as video_storage
from tubely.storage.object import LocalObjectStore, S3ObjectStore
from tubely.storage.table import videos

MP4_BYTES = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 4096
PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 128


class BytesReader(object):
    """An in-memory stand-in for an inbound multipart file."""

    def __init__(self, data: bytes):
        self.buf = io.BytesIO(data)
        self.reads = 0

    async def read(self, size: int = -1) -> bytes:
        self.reads += 1
        return self.buf.read(size)


class RecordingS3Client(object):
    def __init__(self):
        self.uploads: list[dict[str, t.Any]] = []

    def upload_fileobj(self, file: t.BinaryIO, bucket: str, key: str, ExtraArgs: dict[str, str] | None = None):
        self.uploads.append({"bucket": bucket, "key": key, "body": file.read(), "extra": ExtraArgs})


def reload(video: Video, session: Session) -> Video:
    with session.begin():
        found = video_storage.get(video.video_id, session=session)
    assert found is not None
    return found


@pytest.fixture
def draft(owner: User, video_factory: t.Callable[..., Video]) -> Video:
    return video_factory(owner)


@pytest.fixture
def pipeline(
    prober: FakeProber, remuxer: FakeRemuxer, object_store: LocalObjectStore, staging_path: Path
) -> UploadPipeline:
    return UploadPipeline(
        prober=prober, remuxer=remuxer, object_store=object_store, staging_path=staging_path, max_bytes=1 << 20
    )


class TestUploadPipeline(object):
    @pytest.mark.anyio
    async def test_publishes_landscape_video_to_s3(
        self,
        draft: Video,
        db_session: Session,
        prober: FakeProber,
        remuxer: FakeRemuxer,
        staging_path: Path,
    ) -> None:
        client = RecordingS3Client()
        store = S3ObjectStore(bucket="tubely-test", region="us-west-2", client=client)
        pipeline = UploadPipeline(
            prober=prober, remuxer=remuxer, object_store=store, staging_path=staging_path, max_bytes=1 << 20
        )

        updated = await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4", db_session)

        [upload] = client.uploads
        assert upload["bucket"] == "tubely-test"
        assert upload["key"].startswith("landscape/")
        assert upload["key"].endswith(".mp4")
        assert upload["extra"] == {"ContentType": "video/mp4"}
        # the remuxed file is what gets stored, not the raw upload
        assert upload["body"] == b"faststart:" + MP4_BYTES

        assert updated.video_url == f"https://tubely-test.s3.us-west-2.amazonaws.com/{upload['key']}"
        assert reload(draft, db_session).video_url == updated.video_url
        assert list(staging_path.iterdir()) == []

    @pytest.mark.anyio
    async def test_publishes_portrait_video_locally(
        self,
        draft: Video,
        db_session: Session,
        pipeline: UploadPipeline,
        prober: FakeProber,
        object_store: LocalObjectStore,
        staging_path: Path,
    ) -> None:
        prober.width, prober.height = 1080, 1920

        updated = await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4; codecs=avc1", db_session)

        assert updated.video_url is not None
        key = updated.video_url.removeprefix("/assets/")
        assert key.startswith("portrait/")
        assert (object_store.base_path / key).read_bytes() == b"faststart:" + MP4_BYTES
        assert list(staging_path.iterdir()) == []

    @pytest.mark.anyio
    async def test_probes_staged_upload_then_remuxes_it(
        self, draft: Video, db_session: Session, pipeline: UploadPipeline, prober: FakeProber, remuxer: FakeRemuxer
    ) -> None:
        await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4", db_session)

        [probed] = prober.calls
        assert remuxer.calls == [probed]
        assert probed.suffix == ".mp4"
        assert not probed.exists()
        assert not remuxer.outputs[0].exists()

    @pytest.mark.anyio
    @pytest.mark.parametrize("content_type", ["video/webm", "image/png", "", None])
    async def test_rejects_other_media_types_before_staging(
        self,
        content_type: str | None,
        draft: Video,
        db_session: Session,
        pipeline: UploadPipeline,
        prober: FakeProber,
        staging_path: Path,
    ) -> None:
        upload = BytesReader(MP4_BYTES)

        with pytest.raises(UnsupportedMediaType):
            await pipeline.run(draft, upload, content_type, db_session)

        assert upload.reads == 0
        assert prober.calls == []
        assert list(staging_path.iterdir()) == []
        assert reload(draft, db_session).video_url is None

    @pytest.mark.anyio
    async def test_probe_failure_removes_staged_file(
        self,
        draft: Video,
        db_session: Session,
        pipeline: UploadPipeline,
        prober: FakeProber,
        remuxer: FakeRemuxer,
        object_store: LocalObjectStore,
        staging_path: Path,
    ) -> None:
        prober.fail = True

        with pytest.raises(ProbeFailed):
            await pipeline.run(draft, BytesReader(b"not a video"), "video/mp4", db_session)

        assert remuxer.calls == []
        assert list(staging_path.iterdir()) == []
        assert list(object_store.base_path.iterdir()) == []
        assert reload(draft, db_session) == draft

    @pytest.mark.anyio
    async def test_remux_failure_removes_staged_file(
        self,
        draft: Video,
        db_session: Session,
        pipeline: UploadPipeline,
        remuxer: FakeRemuxer,
        staging_path: Path,
    ) -> None:
        remuxer.fail = True

        with pytest.raises(RemuxFailed):
            await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4", db_session)

        assert list(staging_path.iterdir()) == []
        assert reload(draft, db_session).video_url is None

    @pytest.mark.anyio
    async def test_oversized_upload(
        self,
        draft: Video,
        db_session: Session,
        prober: FakeProber,
        remuxer: FakeRemuxer,
        object_store: LocalObjectStore,
        staging_path: Path,
    ) -> None:
        pipeline = UploadPipeline(
            prober=prober, remuxer=remuxer, object_store=object_store, staging_path=staging_path, max_bytes=1024
        )

        with pytest.raises(PayloadTooLarge):
            await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4", db_session)

        assert prober.calls == []
        assert list(staging_path.iterdir()) == []

    @pytest.mark.anyio
    async def test_upload_at_the_limit_is_accepted(
        self,
        draft: Video,
        db_session: Session,
        prober: FakeProber,
        remuxer: FakeRemuxer,
        object_store: LocalObjectStore,
        staging_path: Path,
    ) -> None:
        pipeline = UploadPipeline(
            prober=prober,
            remuxer=remuxer,
            object_store=object_store,
            staging_path=staging_path,
            max_bytes=len(MP4_BYTES),
        )

        updated = await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4", db_session)

        assert updated.video_url is not None

    @pytest.mark.anyio
    async def test_store_failure_leaves_record_unchanged(
        self,
        tmp_path: Path,
        draft: Video,
        db_session: Session,
        prober: FakeProber,
        remuxer: FakeRemuxer,
        staging_path: Path,
    ) -> None:
        pipeline = UploadPipeline(
            prober=prober,
            remuxer=remuxer,
            object_store=FailingObjectStore(tmp_path / "down"),
            staging_path=staging_path,
            max_bytes=1 << 20,
        )

        with pytest.raises(UploadFailed):
            await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4", db_session)

        assert reload(draft, db_session) == draft
        assert list(staging_path.iterdir()) == []

    @pytest.mark.anyio
    async def test_vanished_record_after_store(
        self,
        draft: Video,
        db_session: Session,
        pipeline: UploadPipeline,
        object_store: LocalObjectStore,
        staging_path: Path,
    ) -> None:
        with db_session.begin():
            db_session.execute(videos.__table__.delete().where(videos.video_id == draft.video_id))

        with pytest.raises(MetadataUpdateFailed):
            await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4", db_session)

        # the object was written before the record update was attempted
        stored = [p for p in object_store.base_path.rglob("*") if p.is_file()]
        assert len(stored) == 1
        assert list(staging_path.iterdir()) == []

    @pytest.mark.anyio
    async def test_replacing_a_video_stores_a_new_object(
        self,
        draft: Video,
        db_session: Session,
        pipeline: UploadPipeline,
        object_store: LocalObjectStore,
    ) -> None:
        first = await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4", db_session)
        second = await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4", db_session)

        assert first.video_url != second.video_url
        assert reload(draft, db_session).video_url == second.video_url


class TestThumbnailPipeline(object):
    @pytest.mark.anyio
    async def test_publishes_image(self, draft: Video, db_session: Session, object_store: LocalObjectStore) -> None:
        pipeline = ThumbnailPipeline(object_store=object_store, max_bytes=1 << 20)

        updated = await pipeline.run(draft, BytesReader(PNG_BYTES), "image/png", db_session)

        assert updated.thumbnail_url is not None
        assert updated.thumbnail_url.startswith("/assets/thumbnails/")
        assert updated.thumbnail_url.endswith(".png")
        key = updated.thumbnail_url.removeprefix("/assets/")
        assert (object_store.base_path / key).read_bytes() == PNG_BYTES
        assert updated.video_url is None

    @pytest.mark.anyio
    async def test_rejects_non_images(self, draft: Video, db_session: Session, object_store: LocalObjectStore) -> None:
        pipeline = ThumbnailPipeline(object_store=object_store, max_bytes=1 << 20)

        with pytest.raises(UnsupportedMediaType):
            await pipeline.run(draft, BytesReader(MP4_BYTES), "video/mp4", db_session)

        assert reload(draft, db_session).thumbnail_url is None

    @pytest.mark.anyio
    async def test_oversized_image(self, draft: Video, db_session: Session, object_store: LocalObjectStore) -> None:
        pipeline = ThumbnailPipeline(object_store=object_store, max_bytes=16)

        with pytest.raises(PayloadTooLarge):
            await pipeline.run(draft, BytesReader(PNG_BYTES), "image/png", db_session)

        assert list(object_store.base_path.iterdir()) == []
