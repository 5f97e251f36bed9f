"""Community forum: categories, posts, tags, replies, interactions, moderation.

The users table belongs to the identity service; it is only created here when
missing so a standalone database can run the forum.

Revision ID: 001_community_tables
Revises:
Create Date: 2026-10-19
"""

from collections.abc import Sequence

from alembic import op

revision: str = "001_community_tables"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    # --- Users (identity service, read-only here) ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS users (
            id BIGSERIAL PRIMARY KEY,
            email VARCHAR(320) UNIQUE NOT NULL,
            name VARCHAR(128) NOT NULL,
            avatar_url TEXT,
            role VARCHAR(16) NOT NULL DEFAULT 'subscriber',
            is_banned BOOLEAN NOT NULL DEFAULT false,
            banned_until TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Categories ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS community_categories (
            id BIGSERIAL PRIMARY KEY,
            name VARCHAR(100) UNIQUE NOT NULL,
            description VARCHAR(500),
            color VARCHAR(16) NOT NULL DEFAULT '#3B82F6',
            icon VARCHAR(32) NOT NULL DEFAULT 'folder',
            display_order INTEGER NOT NULL DEFAULT 0,
            is_active BOOLEAN NOT NULL DEFAULT true,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    # --- Posts ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS community_posts (
            id BIGSERIAL PRIMARY KEY,
            title VARCHAR(255) NOT NULL,
            content TEXT NOT NULL,
            author_id BIGINT NOT NULL REFERENCES users(id),
            category VARCHAR(100) NOT NULL DEFAULT 'general',
            is_pinned BOOLEAN NOT NULL DEFAULT false,
            is_locked BOOLEAN NOT NULL DEFAULT false,
            is_featured BOOLEAN NOT NULL DEFAULT false,
            is_deleted BOOLEAN NOT NULL DEFAULT false,
            views_count INTEGER NOT NULL DEFAULT 0 CHECK (views_count >= 0),
            likes_count INTEGER NOT NULL DEFAULT 0 CHECK (likes_count >= 0),
            dislikes_count INTEGER NOT NULL DEFAULT 0 CHECK (dislikes_count >= 0),
            replies_count INTEGER NOT NULL DEFAULT 0 CHECK (replies_count >= 0),
            last_activity_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_community_posts_listing "
        "ON community_posts(is_deleted, is_pinned, last_activity_at)"
    )
    op.execute("CREATE INDEX IF NOT EXISTS idx_community_posts_category ON community_posts(category)")

    op.execute("""
        CREATE TABLE IF NOT EXISTS community_post_tags (
            id BIGSERIAL PRIMARY KEY,
            post_id BIGINT NOT NULL REFERENCES community_posts(id) ON DELETE CASCADE,
            tag VARCHAR(64) NOT NULL,
            CONSTRAINT uq_community_post_tag UNIQUE (post_id, tag)
        )
    """)
    op.execute("CREATE INDEX IF NOT EXISTS idx_community_post_tags_tag ON community_post_tags(tag)")

    # --- Replies ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS community_replies (
            id BIGSERIAL PRIMARY KEY,
            content TEXT NOT NULL,
            post_id BIGINT NOT NULL REFERENCES community_posts(id) ON DELETE CASCADE,
            author_id BIGINT NOT NULL REFERENCES users(id),
            parent_reply_id BIGINT REFERENCES community_replies(id),
            depth INTEGER NOT NULL DEFAULT 0 CHECK (depth BETWEEN 0 AND 3),
            likes_count INTEGER NOT NULL DEFAULT 0 CHECK (likes_count >= 0),
            dislikes_count INTEGER NOT NULL DEFAULT 0 CHECK (dislikes_count >= 0),
            is_deleted BOOLEAN NOT NULL DEFAULT false,
            is_edited BOOLEAN NOT NULL DEFAULT false,
            edited_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_community_replies_tree "
        "ON community_replies(post_id, depth, created_at)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_community_replies_parent ON community_replies(parent_reply_id)"
    )

    # --- Interaction ledger ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS community_interactions (
            id BIGSERIAL PRIMARY KEY,
            user_id BIGINT NOT NULL REFERENCES users(id) ON DELETE CASCADE,
            target_type VARCHAR(16) NOT NULL CHECK (target_type IN ('post', 'reply')),
            target_id BIGINT NOT NULL,
            interaction_type VARCHAR(16) NOT NULL
                CHECK (interaction_type IN ('like', 'dislike', 'bookmark', 'view')),
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_community_interaction UNIQUE (user_id, target_type, target_id, interaction_type)
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_community_interactions_target "
        "ON community_interactions(target_type, target_id)"
    )

    # --- Moderation ---
    op.execute("""
        CREATE TABLE IF NOT EXISTS moderation_actions (
            id BIGSERIAL PRIMARY KEY,
            moderator_id BIGINT NOT NULL REFERENCES users(id),
            action_type VARCHAR(32) NOT NULL,
            target_type VARCHAR(16) NOT NULL,
            target_id BIGINT NOT NULL,
            reason TEXT,
            metadata JSON NOT NULL DEFAULT '{}',
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
        )
    """)

    op.execute("""
        CREATE TABLE IF NOT EXISTS moderation_reports (
            id BIGSERIAL PRIMARY KEY,
            reporter_id BIGINT NOT NULL REFERENCES users(id),
            target_type VARCHAR(16) NOT NULL,
            target_id BIGINT NOT NULL,
            reason VARCHAR(100) NOT NULL,
            description TEXT,
            priority VARCHAR(16) NOT NULL DEFAULT 'medium',
            status VARCHAR(16) NOT NULL DEFAULT 'pending',
            moderator_id BIGINT REFERENCES users(id),
            moderator_notes TEXT,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            resolved_at TIMESTAMPTZ
        )
    """)
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_moderation_reports_status ON moderation_reports(status, priority)"
    )
    op.execute(
        "CREATE INDEX IF NOT EXISTS idx_moderation_reports_target "
        "ON moderation_reports(reporter_id, target_type, target_id)"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS moderation_reports")
    op.execute("DROP TABLE IF EXISTS moderation_actions")
    op.execute("DROP TABLE IF EXISTS community_interactions")
    op.execute("DROP TABLE IF EXISTS community_replies")
    op.execute("DROP TABLE IF EXISTS community_post_tags")
    op.execute("DROP TABLE IF EXISTS community_posts")
    op.execute("DROP TABLE IF EXISTS community_categories")
