"""Initial schema: users and their videos

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""

import typing as t

from alembic import op
from sqlalchemy import func as f
from sqlalchemy.schema import Column, ForeignKey
from sqlalchemy.types import DateTime, String

# revision identifiers, used by Alembic.
revision: str = "001_initial"
down_revision: str | None = None
branch_labels: str | t.Sequence[str] | None = None
depends_on: str | t.Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "users",
        Column("user_id", String(22), primary_key=True),
        Column("email", String, unique=True, nullable=False),
        Column("password_hash", String, nullable=False),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )

    op.create_table(
        "videos",
        Column("video_id", String(22), primary_key=True),
        Column("user_id", String(22), ForeignKey("users.user_id", ondelete="CASCADE"), nullable=False),
        Column("title", String, nullable=False),
        Column("description", String, nullable=False, server_default=""),
        Column("thumbnail_url", String, nullable=True),
        Column("video_url", String, nullable=True),
        Column("create_time", DateTime(timezone=True), server_default=f.now(), nullable=False),
        Column("update_time", DateTime(timezone=True), server_default=f.now(), onupdate=f.now(), nullable=False),
    )
    op.create_index("ix_videos_user_id", "videos", ["user_id"])


def downgrade() -> None:
    op.drop_index("ix_videos_user_id", table_name="videos")
    op.drop_table("videos")
    op.drop_table("users")
