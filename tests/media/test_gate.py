"""Tests for the ownership gate."""

from __future__ import annotations

import typing as t

import pytest
from sqlalchemy.orm import Session

from tubely.errors import Forbidden, NotFound
from tubely.media.gate import authorize_video_owner
from tubely.model import User, Video, VideoID


class TestAuthorizeVideoOwner(object):
    def test_owner(self, owner: User, video_factory: t.Callable[..., Video], db_session: Session) -> None:
        video = video_factory(owner)
        with db_session.begin():
            assert authorize_video_owner(str(video.video_id), owner, session=db_session) == video

    def test_stranger(
        self, owner: User, stranger: User, video_factory: t.Callable[..., Video], db_session: Session
    ) -> None:
        video = video_factory(owner)
        with pytest.raises(Forbidden):
            with db_session.begin():
                authorize_video_owner(str(video.video_id), stranger, session=db_session)

    def test_unknown_video(self, owner: User, db_session: Session) -> None:
        with pytest.raises(NotFound):
            with db_session.begin():
                authorize_video_owner(str(VideoID()), owner, session=db_session)

    @pytest.mark.parametrize("video_id", ["", "12345", "user$abc", "video$"])
    def test_malformed_id(self, video_id: str, owner: User, db_session: Session) -> None:
        with pytest.raises(NotFound):
            with db_session.begin():
                authorize_video_owner(video_id, owner, session=db_session)
