from __future__ import annotations

import typing as t

import sqlalchemy as sqla

from tubely.core import di
from tubely.lib import NotSet
from tubely.model import UserID, Video, VideoID

from . import Session
from .table import videos


def get(video_id: VideoID, session: Session = di.Provide["storage.persistent.session"]) -> Video | None:
    stmt = sqla.select(videos.__table__).where(videos.video_id == video_id)
    row = session.execute(stmt).mappings().one_or_none()
    return Video(**row) if row is not None else None


def find(*, user_id: UserID, session: Session = di.Provide["storage.persistent.session"]) -> tuple[Video, ...]:
    """Videos owned by a user, newest first."""
    stmt = (
        sqla.select(videos.__table__)
        .where(videos.user_id == user_id)
        .order_by(videos.create_time.desc(), videos.video_id)
    )
    rows = session.execute(stmt).mappings().all()
    return tuple(Video(**row) for row in rows)


def create(
    *,
    user_id: UserID,
    title: str,
    description: str = "",
    session: Session = di.Provide["storage.persistent.session"],
) -> Video:
    video = videos(video_id=VideoID(), user_id=user_id, title=title, description=description)
    session.add(video)
    session.flush()
    return get(video.video_id, session=session)  # type: ignore[return-value]


def update(
    video_id: VideoID,
    *,
    title: str | NotSet = NotSet(),
    description: str | NotSet = NotSet(),
    thumbnail_url: str | None | NotSet = NotSet(),
    video_url: str | None | NotSet = NotSet(),
    session: Session = di.Provide["storage.persistent.session"],
) -> Video:
    """Update a video record.

    Uses NotSet sentinel for parameters where None is a valid update value.

    Raises:
        KeyError: If video_id does not correspond to a video
    """
    values: dict[str, t.Any] = {
        k: v
        for k, v in (
            ("title", title),
            ("description", description),
            ("thumbnail_url", thumbnail_url),
            ("video_url", video_url),
        )
        if not isinstance(v, NotSet)
    }
    if not values:
        # no-op update to verify the video exists
        values = {"video_id": video_id}

    result = session.execute(sqla.update(videos).where(videos.video_id == video_id).values(**values))
    if result.rowcount == 0:  # pyright: ignore[reportAttributeAccessIssue]
        raise KeyError(f"Video {video_id} not found")
    session.flush()
    return get(video_id, session=session)  # type: ignore[return-value]
