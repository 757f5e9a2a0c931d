"""Initial SocialHub schema

Revision ID: 001
Revises: None
Create Date: 2026-10-19 00:00:00.000000+00:00

What:  Accounts and the follow graph, posts with likes/hashtags/mentions,
       threaded comments, stories with views, direct messages and
       notifications.
How:   UUID primary keys, TIMESTAMP WITH TIME ZONE, composite primary keys
       on every edge table so a duplicate edge is impossible.

Rollback: downgrade() drops everything (destructive).
"""

from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

NOTIFICATION_KINDS = ("LIKE", "COMMENT", "MENTION", "FOLLOW", "MESSAGE")


def _uuid():
    return postgresql.UUID(as_uuid=True)


def _created_at():
    return sa.Column(
        "created_at",
        sa.TIMESTAMP(timezone=True),
        server_default=sa.text("CURRENT_TIMESTAMP"),
        nullable=False,
    )


def _account_fk(name: str, nullable: bool = False, ondelete: str = "CASCADE", **kwargs):
    return sa.Column(
        name,
        _uuid(),
        sa.ForeignKey("accounts.id", ondelete=ondelete),
        nullable=nullable,
        **kwargs,
    )


def upgrade() -> None:
    # ── Accounts & follow graph ──────────────────────────────────────────
    op.create_table(
        "accounts",
        sa.Column("id", _uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("first_name", sa.String(100)),
        sa.Column("last_name", sa.String(100)),
        sa.Column("bio", sa.Text()),
        sa.Column("avatar", sa.String(500)),
        sa.Column("cover_photo", sa.String(500)),
        sa.Column("website", sa.String(255)),
        sa.Column("location", sa.String(255)),
        sa.Column("is_verified", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("is_private", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("refresh_token_hash", sa.String(255)),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.TIMESTAMP(timezone=True),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email", name="uq_accounts_email"),
        sa.UniqueConstraint("username", name="uq_accounts_username"),
    )

    op.create_table(
        "follows",
        _account_fk("follower_id"),
        _account_fk("followee_id"),
        _created_at(),
        sa.PrimaryKeyConstraint("follower_id", "followee_id"),
        sa.CheckConstraint("follower_id != followee_id", name="ck_follows_no_self_follow"),
    )
    op.create_index("idx_follows_followee", "follows", ["followee_id", "created_at"])

    # ── Posts ────────────────────────────────────────────────────────────
    op.create_table(
        "posts",
        sa.Column("id", _uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        _account_fk("owner_id"),
        sa.Column("content", sa.Text()),
        sa.Column("media_urls", sa.JSON(), server_default=sa.text("'[]'"), nullable=False),
        sa.Column("media_type", sa.String(20), server_default=sa.text("'IMAGE'"), nullable=False),
        sa.Column("location", sa.String(255)),
        sa.Column("is_public", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("comments_enabled", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("likes_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("comments_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column("views_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_posts_owner_created", "posts", ["owner_id", "created_at"])
    op.create_index("idx_posts_created", "posts", ["created_at"])

    op.create_table(
        "post_likes",
        sa.Column("post_id", _uuid(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        _account_fk("account_id"),
        _created_at(),
        sa.PrimaryKeyConstraint("post_id", "account_id"),
    )

    op.create_table(
        "hashtags",
        sa.Column("id", _uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name", name="uq_hashtags_name"),
    )
    op.create_index("idx_hashtags_count", "hashtags", ["count"])

    op.create_table(
        "post_hashtags",
        sa.Column("post_id", _uuid(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        sa.Column(
            "hashtag_id", _uuid(), sa.ForeignKey("hashtags.id", ondelete="CASCADE"), nullable=False
        ),
        sa.PrimaryKeyConstraint("post_id", "hashtag_id"),
    )

    op.create_table(
        "post_mentions",
        sa.Column("post_id", _uuid(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        _account_fk("account_id"),
        sa.PrimaryKeyConstraint("post_id", "account_id"),
    )

    # ── Comments ─────────────────────────────────────────────────────────
    op.create_table(
        "comments",
        sa.Column("id", _uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        sa.Column("post_id", _uuid(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False),
        _account_fk("owner_id"),
        sa.Column("parent_id", _uuid(), sa.ForeignKey("comments.id", ondelete="CASCADE")),
        sa.Column("content", sa.Text(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_comments_post_created", "comments", ["post_id", "created_at"])
    op.create_index("idx_comments_parent", "comments", ["parent_id"])

    # ── Stories ──────────────────────────────────────────────────────────
    op.create_table(
        "stories",
        sa.Column("id", _uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        _account_fk("owner_id"),
        sa.Column("media_url", sa.String(500), nullable=False),
        sa.Column("media_type", sa.String(20), server_default=sa.text("'IMAGE'"), nullable=False),
        sa.Column("caption", sa.Text()),
        sa.Column("views_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        _created_at(),
        sa.Column("expires_at", sa.TIMESTAMP(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("idx_stories_owner_expires", "stories", ["owner_id", "expires_at"])

    op.create_table(
        "story_views",
        sa.Column(
            "story_id", _uuid(), sa.ForeignKey("stories.id", ondelete="CASCADE"), nullable=False
        ),
        _account_fk("viewer_id"),
        _created_at(),
        sa.PrimaryKeyConstraint("story_id", "viewer_id"),
    )

    # ── Messages ─────────────────────────────────────────────────────────
    op.create_table(
        "messages",
        sa.Column("id", _uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        _account_fk("sender_id"),
        _account_fk("receiver_id"),
        sa.Column("content", sa.Text()),
        sa.Column("media_url", sa.String(500)),
        sa.Column("is_read", sa.Boolean(), server_default=sa.false(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_messages_pair_created", "messages", ["sender_id", "receiver_id", "created_at"]
    )
    op.create_index("idx_messages_receiver_unread", "messages", ["receiver_id", "is_read"])

    # ── Notifications ────────────────────────────────────────────────────
    op.create_table(
        "notifications",
        sa.Column("id", _uuid(), server_default=sa.text("gen_random_uuid()"), nullable=False),
        _account_fk("recipient_id"),
        _account_fk("sender_id", nullable=True, ondelete="SET NULL"),
        sa.Column("kind", sa.Enum(*NOTIFICATION_KINDS, name="notification_kind"), nullable=False),
        # Polymorphic: post, comment or message id depending on kind; no FK
        sa.Column("entity_id", _uuid()),
        sa.Column("message", sa.String(500), nullable=False),
        sa.Column("is_read", sa.Boolean(), server_default=sa.false(), nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "idx_notifications_recipient_created", "notifications", ["recipient_id", "created_at"]
    )
    op.create_index(
        "idx_notifications_recipient_unread", "notifications", ["recipient_id", "is_read"]
    )


def downgrade() -> None:
    for table in (
        "notifications",
        "messages",
        "story_views",
        "stories",
        "comments",
        "post_mentions",
        "post_hashtags",
        "hashtags",
        "post_likes",
        "posts",
        "follows",
        "accounts",
    ):
        op.drop_table(table)
    sa.Enum(name="notification_kind").drop(op.get_bind(), checkfirst=True)
