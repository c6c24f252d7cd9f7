"""008: create notifications table

Revision ID: 008
Revises: 007
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE notifications (
            id                  VARCHAR(64)     PRIMARY KEY,
            recipient_id        VARCHAR(128)    NOT NULL,
            type                VARCHAR(30)     NOT NULL,
            title               VARCHAR(100)    NOT NULL,
            message             VARCHAR(500)    NOT NULL,
            related_post_id     VARCHAR(64),
            related_comment_id  VARCHAR(64),
            related_user_id     VARCHAR(128),
            related_user_name   VARCHAR(100),
            action_url          VARCHAR(300),
            is_read             BOOLEAN         NOT NULL DEFAULT FALSE,
            read_at             TIMESTAMPTZ,
            status              VARCHAR(20)     NOT NULL DEFAULT 'active',
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_notifications_type CHECK (
                type IN ('new_comment', 'comment_reply', 'comment_like', 'system')
            ),
            CONSTRAINT ck_notifications_status CHECK (status IN ('active', 'deleted'))
        );
    """)
    op.execute("""
        CREATE INDEX idx_notifications_recipient
            ON notifications (recipient_id, created_at DESC, id DESC)
            WHERE status = 'active';
    """)
    op.execute("""
        CREATE INDEX idx_notifications_unread
            ON notifications (recipient_id)
            WHERE status = 'active' AND is_read = FALSE;
    """)
    op.execute("""
        CREATE TRIGGER trg_notifications_updated_at
            BEFORE UPDATE ON notifications
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications CASCADE;")
