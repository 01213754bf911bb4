"""Tests for tubely.storage.video."""

from __future__ import annotations

import pytest
from sqlalchemy.orm import Session

from tubely.model import User, VideoID
from tubely.storage import video as video_storage


class TestVideoStorage(object):
    def test_create_and_get(self, owner: User, db_session: Session) -> None:
        with db_session.begin():
            video = video_storage.create(
                user_id=owner.user_id, title="Boots on the ground", description="unboxing", session=db_session
            )

        assert video.video_id.startswith("video$")
        assert video.user_id == owner.user_id
        assert video.description == "unboxing"
        assert video.thumbnail_url is None
        assert video.video_url is None
        assert video.create_time is not None

        with db_session.begin():
            assert video_storage.get(video.video_id, session=db_session) == video

    def test_get_missing(self, db_session: Session) -> None:
        with db_session.begin():
            assert video_storage.get(VideoID(), session=db_session) is None

    def test_find_only_returns_own_videos(self, owner: User, stranger: User, db_session: Session) -> None:
        with db_session.begin():
            mine = {
                video_storage.create(user_id=owner.user_id, title=f"mine {i}", session=db_session).video_id
                for i in range(3)
            }
            video_storage.create(user_id=stranger.user_id, title="theirs", session=db_session)

        with db_session.begin():
            found = video_storage.find(user_id=owner.user_id, session=db_session)

        assert {v.video_id for v in found} == mine

    def test_update_sets_only_given_fields(self, owner: User, db_session: Session) -> None:
        with db_session.begin():
            video = video_storage.create(user_id=owner.user_id, title="draft", session=db_session)
            updated = video_storage.update(
                video.video_id, video_url="https://bucket.s3.us-east-1.amazonaws.com/landscape/a.mp4", session=db_session
            )

        assert updated.video_url == "https://bucket.s3.us-east-1.amazonaws.com/landscape/a.mp4"
        assert updated.title == "draft"
        assert updated.thumbnail_url is None

    def test_update_can_clear_a_url(self, owner: User, db_session: Session) -> None:
        with db_session.begin():
            video = video_storage.create(user_id=owner.user_id, title="draft", session=db_session)
            video_storage.update(video.video_id, thumbnail_url="/assets/thumbnails/a.png", session=db_session)
            cleared = video_storage.update(video.video_id, thumbnail_url=None, session=db_session)

        assert cleared.thumbnail_url is None

    def test_update_missing(self, db_session: Session) -> None:
        with pytest.raises(KeyError):
            with db_session.begin():
                video_storage.update(VideoID(), title="nope", session=db_session)
