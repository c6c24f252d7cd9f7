"""003: create item_inquiries table

Revision ID: 003
Revises: 002
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE item_inquiries (
            id                  VARCHAR(64)     PRIMARY KEY,
            item_id             VARCHAR(64)     NOT NULL REFERENCES marketplace_items(id),
            item_title          VARCHAR(100)    NOT NULL,
            item_image          TEXT,
            buyer_id            VARCHAR(128)    NOT NULL,
            buyer_name          VARCHAR(100)    NOT NULL,
            seller_id           VARCHAR(128)    NOT NULL,
            seller_name         VARCHAR(100)    NOT NULL,
            status              VARCHAR(20)     NOT NULL DEFAULT 'active',
            last_message        TEXT            NOT NULL DEFAULT '',
            last_message_at     TIMESTAMPTZ,
            last_sender_id      VARCHAR(128),
            unread_buyer        INT             NOT NULL DEFAULT 0,
            unread_seller       INT             NOT NULL DEFAULT 0,
            message_count       INT             NOT NULL DEFAULT 0,
            buyer_last_read_at  TIMESTAMPTZ,
            seller_last_read_at TIMESTAMPTZ,
            version             INT             NOT NULL DEFAULT 0,
            reported_by         VARCHAR(128),
            report_reason       TEXT,
            reported_at         TIMESTAMPTZ,
            closed_by           VARCHAR(128),
            closed_at           TIMESTAMPTZ,
            created_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at          TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_inquiries_status CHECK (
                status IN ('active', 'completed', 'cancelled', 'reported')
            ),
            CONSTRAINT ck_inquiries_not_self CHECK (buyer_id <> seller_id),
            CONSTRAINT ck_inquiries_counters CHECK (
                unread_buyer >= 0 AND unread_seller >= 0 AND message_count >= 0
            )
        );
    """)
    # At most one open conversation per (item, buyer)
    op.execute("""
        CREATE UNIQUE INDEX uq_inquiries_active_item_buyer
            ON item_inquiries (item_id, buyer_id)
            WHERE status = 'active';
    """)
    op.execute("CREATE INDEX idx_inquiries_buyer ON item_inquiries (buyer_id, last_message_at DESC);")
    op.execute("CREATE INDEX idx_inquiries_item ON item_inquiries (item_id, last_message_at DESC);")
    op.execute("""
        CREATE TRIGGER trg_item_inquiries_updated_at
            BEFORE UPDATE ON item_inquiries
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS item_inquiries CASCADE;")
