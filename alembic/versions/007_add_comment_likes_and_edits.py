"""007: comment like counter, like rows and edit history

Revision ID: 007
Revises: 006
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        ALTER TABLE comments
            ADD COLUMN like_count INT NOT NULL DEFAULT 0,
            ADD COLUMN edited_at  TIMESTAMPTZ,
            ADD CONSTRAINT ck_comments_like_count CHECK (like_count >= 0);
    """)

    op.execute("""
        CREATE TABLE comment_likes (
            comment_id  VARCHAR(64)     NOT NULL REFERENCES comments(id) ON DELETE CASCADE,
            user_id     VARCHAR(128)    NOT NULL,
            created_at  TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            PRIMARY KEY (comment_id, user_id)
        );
    """)

    op.execute("""
        CREATE TABLE comment_edits (
            id          BIGSERIAL       PRIMARY KEY,
            comment_id  VARCHAR(64)     NOT NULL REFERENCES comments(id) ON DELETE CASCADE,
            content     VARCHAR(1000)   NOT NULL,
            edited_at   TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_comment_edits_comment ON comment_edits (comment_id, edited_at);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS comment_edits;")
    op.execute("DROP TABLE IF EXISTS comment_likes;")
    op.execute("""
        ALTER TABLE comments
            DROP CONSTRAINT IF EXISTS ck_comments_like_count,
            DROP COLUMN IF EXISTS edited_at,
            DROP COLUMN IF EXISTS like_count;
    """)
