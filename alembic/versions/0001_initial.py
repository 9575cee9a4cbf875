"""initial schema

Revision ID: 0001_initial
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

import sqlalchemy as sa
from alembic import op

revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


def _base_columns() -> list:
    return [
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("created_at", sa.DateTime(), nullable=False),
        sa.Column("updated_at", sa.DateTime(), nullable=False),
    ]


def _user_fk(name: str) -> sa.Column:
    return sa.Column(
        name, sa.Integer(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )


def upgrade() -> None:
    op.create_table(
        "users",
        *_base_columns(),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("email", sa.String(100), nullable=False),
        sa.Column("hashed_password", sa.String(255), nullable=False),
        sa.Column("full_name", sa.String(100), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("status", sa.String(255), nullable=True),
        sa.Column("sex", sa.String(20), nullable=True),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("last_active_at", sa.DateTime(), nullable=True),
    )
    op.create_index("ix_users_id", "users", ["id"], unique=False)
    op.create_index("ix_users_username", "users", ["username"], unique=True)
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_created_at", "users", ["created_at"], unique=False)

    op.create_table(
        "follows",
        *_base_columns(),
        _user_fk("source_id"),
        _user_fk("target_id"),
        sa.UniqueConstraint("source_id", "target_id", name="unique_follow"),
        sa.CheckConstraint("source_id <> target_id", name="check_follow_not_self"),
    )
    op.create_index("ix_follows_id", "follows", ["id"], unique=False)
    op.create_index("ix_follows_source_id", "follows", ["source_id"], unique=False)
    op.create_index("ix_follows_target_id", "follows", ["target_id"], unique=False)
    op.create_index("ix_follows_created_at", "follows", ["created_at"], unique=False)

    op.create_table(
        "friendships",
        *_base_columns(),
        _user_fk("user1_id"),
        _user_fk("user2_id"),
        sa.UniqueConstraint("user1_id", "user2_id", name="unique_friendship"),
        sa.CheckConstraint("user1_id < user2_id", name="check_friendship_order"),
    )
    op.create_index("ix_friendships_id", "friendships", ["id"], unique=False)
    op.create_index("ix_friendships_user1_id", "friendships", ["user1_id"], unique=False)
    op.create_index("ix_friendships_user2_id", "friendships", ["user2_id"], unique=False)

    op.create_table(
        "posts",
        *_base_columns(),
        _user_fk("user_id"),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("like_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("comment_count", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_posts_id", "posts", ["id"], unique=False)
    op.create_index("ix_posts_user_id", "posts", ["user_id"], unique=False)
    op.create_index("ix_posts_created_at", "posts", ["created_at"], unique=False)

    op.create_table(
        "comments",
        *_base_columns(),
        sa.Column(
            "post_id", sa.Integer(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
        ),
        _user_fk("user_id"),
        sa.Column("content", sa.Text(), nullable=False),
    )
    op.create_index("ix_comments_id", "comments", ["id"], unique=False)
    op.create_index("ix_comments_post_id", "comments", ["post_id"], unique=False)
    op.create_index("ix_comments_user_id", "comments", ["user_id"], unique=False)
    op.create_index("ix_comments_created_at", "comments", ["created_at"], unique=False)

    op.create_table(
        "likes",
        *_base_columns(),
        _user_fk("user_id"),
        sa.Column(
            "post_id", sa.Integer(), sa.ForeignKey("posts.id", ondelete="CASCADE"), nullable=False
        ),
        sa.UniqueConstraint("user_id", "post_id", name="unique_post_like"),
    )
    op.create_index("ix_likes_id", "likes", ["id"], unique=False)
    op.create_index("ix_likes_post_id", "likes", ["post_id"], unique=False)
    op.create_index("ix_likes_user_id", "likes", ["user_id"], unique=False)

    op.create_table(
        "chats",
        *_base_columns(),
        sa.Column("name", sa.String(100), nullable=False),
    )
    op.create_index("ix_chats_id", "chats", ["id"], unique=False)

    op.create_table(
        "chat_members",
        *_base_columns(),
        sa.Column(
            "chat_id", sa.Integer(), sa.ForeignKey("chats.id", ondelete="CASCADE"), nullable=False
        ),
        _user_fk("user_id"),
        sa.Column("type", sa.String(20), nullable=False),
        sa.UniqueConstraint("chat_id", "user_id", name="unique_chat_member"),
    )
    op.create_index("ix_chat_members_id", "chat_members", ["id"], unique=False)
    op.create_index("ix_chat_members_chat_id", "chat_members", ["chat_id"], unique=False)
    op.create_index("ix_chat_members_user_id", "chat_members", ["user_id"], unique=False)

    op.create_table(
        "messages",
        *_base_columns(),
        sa.Column(
            "chat_id", sa.Integer(), sa.ForeignKey("chats.id", ondelete="CASCADE"), nullable=False
        ),
        _user_fk("sender_id"),
        sa.Column("content", sa.Text(), nullable=False),
    )
    op.create_index("ix_messages_id", "messages", ["id"], unique=False)
    op.create_index("ix_messages_chat_id", "messages", ["chat_id"], unique=False)
    op.create_index("ix_messages_created_at", "messages", ["created_at"], unique=False)

    op.create_table(
        "medias",
        *_base_columns(),
        _user_fk("user_id"),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_path", sa.String(255), nullable=False),
        sa.Column("content_type", sa.String(100), nullable=True),
        sa.Column("size", sa.Integer(), nullable=False, server_default="0"),
    )
    op.create_index("ix_medias_id", "medias", ["id"], unique=False)
    op.create_index("ix_medias_user_id", "medias", ["user_id"], unique=False)


def downgrade() -> None:
    op.drop_table("medias")
    op.drop_table("messages")
    op.drop_table("chat_members")
    op.drop_table("chats")
    op.drop_table("likes")
    op.drop_table("comments")
    op.drop_table("posts")
    op.drop_table("friendships")
    op.drop_table("follows")
    op.drop_table("users")
