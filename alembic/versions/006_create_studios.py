"""006: create studios table

Revision ID: 006
Revises: 005
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE studios (
            id              VARCHAR(64)     PRIMARY KEY,
            created_by      VARCHAR(128)    NOT NULL,
            name            VARCHAR(100)    NOT NULL,
            description     TEXT,
            category        VARCHAR(20)     NOT NULL,
            status          VARCHAR(20)     NOT NULL DEFAULT 'active',
            location        JSONB           NOT NULL,
            contact         JSONB           NOT NULL DEFAULT '{}',
            pricing         JSONB           NOT NULL DEFAULT '{}',
            facilities      JSONB           NOT NULL DEFAULT '{}',
            operating_hours JSONB           NOT NULL DEFAULT '{}',
            images          TEXT[]          NOT NULL DEFAULT '{}',
            tags            TEXT[]          NOT NULL DEFAULT '{}',
            keywords        TEXT[]          NOT NULL DEFAULT '{}',
            latitude        DOUBLE PRECISION NOT NULL,
            longitude       DOUBLE PRECISION NOT NULL,
            geohash         VARCHAR(12),
            view_count      INT             NOT NULL DEFAULT 0,
            favorite_count  INT             NOT NULL DEFAULT 0,
            verified        BOOLEAN         NOT NULL DEFAULT FALSE,
            featured        BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_studios_status CHECK (
                status IN ('active', 'temporarily_closed', 'permanently_closed')
            ),
            CONSTRAINT ck_studios_category CHECK (
                category IN ('studio', 'practice_room', 'club', 'public_space', 'cafe')
            ),
            CONSTRAINT ck_studios_counters CHECK (view_count >= 0 AND favorite_count >= 0),
            CONSTRAINT ck_studios_coordinates CHECK (
                latitude BETWEEN -90 AND 90 AND longitude BETWEEN -180 AND 180
            )
        );
    """)
    op.execute("CREATE INDEX idx_studios_status_updated ON studios (status, updated_at DESC, id DESC);")
    op.execute("CREATE INDEX idx_studios_owner ON studios (created_by);")
    op.execute("CREATE INDEX idx_studios_lat_lng ON studios (latitude, longitude);")
    op.execute("CREATE INDEX idx_studios_keywords ON studios USING GIN (keywords);")
    op.execute("""
        CREATE TRIGGER trg_studios_updated_at
            BEFORE UPDATE ON studios
            FOR EACH ROW EXECUTE FUNCTION fn_update_timestamp();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS studios CASCADE;")
