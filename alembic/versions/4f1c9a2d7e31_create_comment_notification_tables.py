"""create_comment_notification_tables

Revision ID: 4f1c9a2d7e31
Revises:
Create Date: 2026-10-16 10:12:44.104512

"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


# revision identifiers, used by Alembic.
revision: str = "4f1c9a2d7e31"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.text("CURRENT_TIMESTAMP"),
    )


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("full_name", sa.String(), nullable=True),
        sa.Column("nickname", sa.String(), nullable=True),
        sa.Column("avatar_url", sa.String(), nullable=True),
        sa.Column("is_admin", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("suspended_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "newsletter_opt_in", sa.Boolean(), nullable=False, server_default=sa.true()
        ),
        _created_at(),
    )
    op.create_index("ix_profiles_email", "profiles", ["email"])
    op.create_index("ix_profiles_nickname", "profiles", ["nickname"], unique=True)

    op.create_table(
        "photos",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("short_id", sa.String(length=16), nullable=False),
        sa.Column("title", sa.String(), nullable=True),
        sa.Column("url", sa.Text(), nullable=True),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _created_at(),
    )
    op.create_index("ix_photos_short_id", "photos", ["short_id"], unique=True)
    op.create_index("ix_photos_user_id", "photos", ["user_id"])

    op.create_table(
        "albums",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("cover_image_url", sa.Text(), nullable=True),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _created_at(),
    )
    op.create_index("ix_albums_slug", "albums", ["slug"])
    op.create_index("ix_albums_user_id", "albums", ["user_id"])

    op.create_table(
        "album_photos",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "album_id",
            sa.String(length=36),
            sa.ForeignKey("albums.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "photo_id",
            sa.String(length=36),
            sa.ForeignKey("photos.id", ondelete="CASCADE"),
            nullable=False,
        ),
        _created_at(),
        sa.UniqueConstraint("album_id", "photo_id", name="uq_album_photo"),
    )
    op.create_index("ix_album_photos_album_id", "album_photos", ["album_id"])
    op.create_index("ix_album_photos_photo_id", "album_photos", ["photo_id"])

    op.create_table(
        "events",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("cover_image", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_events_slug", "events", ["slug"], unique=True)

    op.create_table(
        "challenges",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("title", sa.String(), nullable=False),
        sa.Column("slug", sa.String(), nullable=False),
        sa.Column("cover_image_url", sa.Text(), nullable=True),
        _created_at(),
    )
    op.create_index("ix_challenges_slug", "challenges", ["slug"], unique=True)

    op.create_table(
        "comments",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column("entity_type", sa.String(length=16), nullable=False),
        sa.Column(
            "photo_id",
            sa.String(length=36),
            sa.ForeignKey("photos.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "album_id",
            sa.String(length=36),
            sa.ForeignKey("albums.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "event_id",
            sa.Integer(),
            sa.ForeignKey("events.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "challenge_id",
            sa.String(length=36),
            sa.ForeignKey("challenges.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column(
            "author_id",
            sa.String(length=36),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("comment_text", sa.Text(), nullable=False),
        sa.Column(
            "parent_comment_id",
            sa.String(length=36),
            sa.ForeignKey("comments.id", ondelete="SET NULL"),
            nullable=True,
        ),
        _created_at(),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_comments_entity",
        "comments",
        ["entity_type", "photo_id", "album_id", "event_id", "challenge_id"],
    )
    op.create_index("ix_comments_author_id", "comments", ["author_id"])
    op.create_index("ix_comments_parent_comment_id", "comments", ["parent_comment_id"])

    op.create_table(
        "notifications",
        sa.Column("id", sa.String(length=36), primary_key=True),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "actor_id",
            sa.String(length=36),
            sa.ForeignKey("profiles.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("type", sa.String(length=32), nullable=False),
        sa.Column("entity_type", sa.String(length=16), nullable=True),
        sa.Column("entity_id", sa.String(length=36), nullable=True),
        sa.Column(
            "data",
            sa.JSON().with_variant(postgresql.JSONB(), "postgresql"),
            nullable=False,
        ),
        _created_at(),
        sa.Column("seen_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("dismissed_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_notifications_user_id", "notifications", ["user_id"])
    op.create_index(
        "ix_notifications_user_created", "notifications", ["user_id", "created_at"]
    )

    email_types = op.create_table(
        "email_types",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("type_key", sa.String(length=32), nullable=False, unique=True),
        sa.Column("type_label", sa.String(), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
    )

    op.create_table(
        "email_preferences",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.String(length=36),
            sa.ForeignKey("profiles.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "email_type_id",
            sa.Integer(),
            sa.ForeignKey("email_types.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("opted_out", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.text("CURRENT_TIMESTAMP"),
        ),
        sa.UniqueConstraint(
            "user_id", "email_type_id", name="uq_email_preference_user_type"
        ),
    )
    op.create_index("ix_email_preferences_user_id", "email_preferences", ["user_id"])

    op.bulk_insert(
        email_types,
        [
            {
                "type_key": "events",
                "type_label": "Event announcements",
                "description": "New events and event reminders",
            },
            {
                "type_key": "newsletter",
                "type_label": "Newsletter",
                "description": "Community news and featured photos",
            },
            {
                "type_key": "notifications",
                "type_label": "Comment notifications",
                "description": "Comments on your photos and albums, and replies to your comments",
            },
        ],
    )


def downgrade() -> None:
    op.drop_table("email_preferences")
    op.drop_table("email_types")
    op.drop_index("ix_notifications_user_created", table_name="notifications")
    op.drop_index("ix_notifications_user_id", table_name="notifications")
    op.drop_table("notifications")
    op.drop_table("comments")
    op.drop_table("challenges")
    op.drop_table("events")
    op.drop_table("album_photos")
    op.drop_table("albums")
    op.drop_table("photos")
    op.drop_table("profiles")
