import datetime

from sqlalchemy import DateTime, ForeignKey, func
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, MappedAsDataclass

from tubely.model import UserID, VideoID

from .type import ShortUUIDKeyType


class base(MappedAsDataclass, DeclarativeBase):
    type_annotation_map = {
        UserID: ShortUUIDKeyType(UserID),
        VideoID: ShortUUIDKeyType(VideoID),
        datetime.datetime: DateTime(timezone=True),
    }


class users(base):
    __tablename__ = "users"

    user_id: Mapped[UserID] = mapped_column(primary_key=True)
    email: Mapped[str] = mapped_column(unique=True)
    password_hash: Mapped[str]
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())


class videos(base):
    __tablename__ = "videos"

    video_id: Mapped[VideoID] = mapped_column(primary_key=True)
    user_id: Mapped[UserID] = mapped_column(ForeignKey("users.user_id", ondelete="CASCADE"), index=True)
    title: Mapped[str]
    description: Mapped[str] = mapped_column(default="")
    thumbnail_url: Mapped[str | None] = mapped_column(default=None)
    video_url: Mapped[str | None] = mapped_column(default=None)
    create_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now())
    update_time: Mapped[datetime.datetime] = mapped_column(default=None, server_default=func.now(), onupdate=func.now())
