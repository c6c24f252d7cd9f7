"""005: create posts and comments tables

Revision ID: 005
Revises: 004
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE posts (
            id              VARCHAR(64)     PRIMARY KEY,
            author_id       VARCHAR(128)    NOT NULL,
            author_name     VARCHAR(100)    NOT NULL,
            category        VARCHAR(20)     NOT NULL,
            title           VARCHAR(100)    NOT NULL,
            content         TEXT            NOT NULL,
            tags            TEXT[]          NOT NULL DEFAULT '{}',
            attachments     TEXT[]          NOT NULL DEFAULT '{}',
            status          VARCHAR(20)     NOT NULL DEFAULT 'active',
            view_count      INT             NOT NULL DEFAULT 0,
            comment_count   INT             NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_posts_status CHECK (
                status IN ('active', 'hidden', 'deleted', 'reported')
            ),
            CONSTRAINT ck_posts_category CHECK (
                category IN ('general', 'qna', 'event', 'marketplace', 'lesson', 'review')
            ),
            CONSTRAINT ck_posts_counters CHECK (view_count >= 0 AND comment_count >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_posts_status_created ON posts (status, created_at DESC, id DESC);")
    op.execute("CREATE INDEX idx_posts_author ON posts (author_id, created_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_posts_updated_at
            BEFORE UPDATE ON posts
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)

    op.execute("""
        CREATE TABLE comments (
            id              VARCHAR(64)     PRIMARY KEY,
            post_id         VARCHAR(64)     NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
            author_id       VARCHAR(128)    NOT NULL,
            author_name     VARCHAR(100)    NOT NULL,
            content         VARCHAR(1000)   NOT NULL,
            parent_id       VARCHAR(64)     REFERENCES comments(id),
            status          VARCHAR(20)     NOT NULL DEFAULT 'active',
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_comments_status CHECK (
                status IN ('active', 'hidden', 'deleted', 'reported')
            )
        );
    """)
    op.execute("CREATE INDEX idx_comments_post_created ON comments (post_id, created_at, id);")
    op.execute("""
        CREATE TRIGGER trg_comments_updated_at
            BEFORE UPDATE ON comments
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS comments CASCADE;")
    op.execute("DROP TABLE IF EXISTS posts CASCADE;")
