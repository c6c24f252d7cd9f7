"""004: create inquiry_messages table

Revision ID: 004
Revises: 003
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE inquiry_messages (
            id              VARCHAR(64)     PRIMARY KEY,
            inquiry_id      VARCHAR(64)     NOT NULL REFERENCES item_inquiries(id) ON DELETE CASCADE,
            sender_id       VARCHAR(128)    NOT NULL,
            sender_name     VARCHAR(100)    NOT NULL,
            sender_type     VARCHAR(10)     NOT NULL,
            message_type    VARCHAR(20)     NOT NULL DEFAULT 'text',
            content         TEXT            NOT NULL,
            image_url       TEXT,
            proposed_price  BIGINT,
            original_price  BIGINT,
            is_read         BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_messages_sender_type CHECK (sender_type IN ('buyer', 'seller')),
            CONSTRAINT ck_messages_type CHECK (
                message_type IN ('text', 'image', 'price_proposal', 'system')
            ),
            CONSTRAINT ck_messages_proposal CHECK (
                message_type <> 'price_proposal' OR proposed_price > 0
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_messages_inquiry_created ON inquiry_messages (inquiry_id, created_at, id);"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS inquiry_messages CASCADE;")
