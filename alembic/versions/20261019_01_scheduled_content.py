"""
Scheduled content tables.

- watch_videos (single + series with JSONB seasons/episodes)
- events
- movies
Each carries the visibility window columns scanned by the expiry engine.
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic.
revision = "20261019_01_scheduled_content"
down_revision = None
branch_labels = None
depends_on = None


def _visibility_columns() -> list:
    return [
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("is_scheduled", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("visible_from", sa.DateTime(timezone=True), nullable=True),
        sa.Column("visible_until", sa.DateTime(timezone=True), nullable=True),
        sa.Column("auto_delete_on_expiry", sa.Boolean(), nullable=False, server_default=sa.text("false")),
    ]


def _timestamp_columns() -> list:
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    ]


def upgrade() -> None:
    # --- watch_videos ---
    op.create_table(
        "watch_videos",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("thumbnail_url", sa.String(length=1024), nullable=True),
        sa.Column("video_type", sa.String(length=16), nullable=False, server_default=sa.text("'single'")),
        sa.Column("status", sa.String(length=32), nullable=False, server_default=sa.text("'published'")),
        sa.Column("seasons", postgresql.JSONB(astext_type=sa.Text()), nullable=False, server_default=sa.text("'[]'::jsonb")),
        sa.Column("total_episodes", sa.Integer(), nullable=False, server_default=sa.text("0")),
        *_visibility_columns(),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_watch_videos"),
    )
    op.create_index("ix_watch_videos_expiry_scan", "watch_videos", ["is_scheduled", "is_active", "visible_until"])
    op.create_index("ix_watch_videos_video_type", "watch_videos", ["video_type"])
    op.create_index("ix_watch_videos_seasons_gin", "watch_videos", ["seasons"], postgresql_using="gin")

    # --- events ---
    op.create_table(
        "events",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("poster_image", sa.String(length=1024), nullable=True),
        sa.Column("venue", sa.String(length=255), nullable=True),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default=sa.text("'upcoming'")),
        *_visibility_columns(),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_events"),
    )
    op.create_index("ix_events_expiry_scan", "events", ["is_scheduled", "is_active", "visible_until"])
    op.create_index("ix_events_status", "events", ["status"])

    # --- movies ---
    op.create_table(
        "movies",
        sa.Column("id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("poster_url", sa.String(length=1024), nullable=True),
        sa.Column("release_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(length=32), nullable=False, server_default=sa.text("'upcoming'")),
        *_visibility_columns(),
        *_timestamp_columns(),
        sa.PrimaryKeyConstraint("id", name="pk_movies"),
    )
    op.create_index("ix_movies_expiry_scan", "movies", ["is_scheduled", "is_active", "visible_until"])
    op.create_index("ix_movies_status", "movies", ["status"])


def downgrade() -> None:
    op.drop_index("ix_movies_status", table_name="movies")
    op.drop_index("ix_movies_expiry_scan", table_name="movies")
    op.drop_table("movies")

    op.drop_index("ix_events_status", table_name="events")
    op.drop_index("ix_events_expiry_scan", table_name="events")
    op.drop_table("events")

    op.drop_index("ix_watch_videos_seasons_gin", table_name="watch_videos")
    op.drop_index("ix_watch_videos_video_type", table_name="watch_videos")
    op.drop_index("ix_watch_videos_expiry_scan", table_name="watch_videos")
    op.drop_table("watch_videos")
