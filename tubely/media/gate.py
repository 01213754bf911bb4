"""Ownership checks run before a request touches any video."""

from __future__ import annotations

from tubely.core import di
from tubely.errors import Forbidden, NotFound
from tubely.model import User, Video, VideoID
from tubely.storage import Session
from tubely.storage import video as video_storage


def authorize_video_owner(
    video_id: str, user: User, session: Session = di.Provide["storage.persistent.session"]
) -> Video:
    """Fetch a video on behalf of ``user``.

    Has no side effects, and so is safe to run before staging or parsing an
    upload.

    Raises:
        NotFound: no such video, or ``video_id`` is not a well-formed video ID
        Forbidden: the video belongs to someone else
    """
    try:
        vid = VideoID(video_id)
    except ValueError:
        raise NotFound("video not found") from None

    video = video_storage.get(vid, session=session)
    if video is None:
        raise NotFound("video not found")
    if video.user_id != user.user_id:
        raise Forbidden()
    return video
