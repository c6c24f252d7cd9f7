"""002: create marketplace_items table

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE marketplace_items (
            id              VARCHAR(64)     PRIMARY KEY,
            seller_id       VARCHAR(128)    NOT NULL,
            title           VARCHAR(100)    NOT NULL,
            description     TEXT            NOT NULL,
            category        VARCHAR(20)     NOT NULL,
            status          VARCHAR(20)     NOT NULL DEFAULT 'available',
            pricing         JSONB           NOT NULL,
            specs           JSONB           NOT NULL,
            location        JSONB           NOT NULL,
            images          TEXT[]          NOT NULL DEFAULT '{}',
            tags            TEXT[]          NOT NULL DEFAULT '{}',
            keywords        TEXT[]          NOT NULL DEFAULT '{}',
            price           BIGINT          NOT NULL DEFAULT 0,
            latitude        DOUBLE PRECISION,
            longitude       DOUBLE PRECISION,
            geohash         VARCHAR(12),
            view_count      INT             NOT NULL DEFAULT 0,
            favorite_count  INT             NOT NULL DEFAULT 0,
            inquiry_count   INT             NOT NULL DEFAULT 0,
            featured        BOOLEAN         NOT NULL DEFAULT FALSE,
            reported        BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_items_status CHECK (
                status IN ('available', 'reserved', 'sold', 'hidden')
            ),
            CONSTRAINT ck_items_category CHECK (
                category IN ('shoes', 'clothing', 'accessories', 'other')
            ),
            CONSTRAINT ck_items_price CHECK (price >= 0 AND price <= 10000000),
            CONSTRAINT ck_items_counters CHECK (
                view_count >= 0 AND favorite_count >= 0 AND inquiry_count >= 0
            ),
            CONSTRAINT ck_items_coordinates CHECK (
                (latitude IS NULL AND longitude IS NULL)
                OR (latitude BETWEEN -90 AND 90 AND longitude BETWEEN -180 AND 180)
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_items_status_created ON marketplace_items (status, created_at DESC, id DESC);"
    )
    op.execute("CREATE INDEX idx_items_seller ON marketplace_items (seller_id, created_at DESC);")
    op.execute("CREATE INDEX idx_items_lat_lng ON marketplace_items (latitude, longitude);")
    op.execute("CREATE INDEX idx_items_keywords ON marketplace_items USING GIN (keywords);")
    op.execute("""
        CREATE TRIGGER trg_marketplace_items_updated_at
            BEFORE UPDATE ON marketplace_items
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS marketplace_items CASCADE;")
