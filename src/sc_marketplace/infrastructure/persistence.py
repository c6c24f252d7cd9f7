"""ItemRepository — concrete implementation of ItemRepositoryProtocol.

All queries use raw text() SQL (no ORM).
asyncpg NULL parameter pattern: CAST(:param AS TYPE) IS NULL required for None values.
JSONB documents are sent as JSON text and cast server-side.

Transaction ownership: the application service commits or rolls back.
"""

import json
from datetime import datetime
from typing import Any

from sqlalchemy import TextClause, text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_geo.domain.models import BoundingBox
from src.sc_marketplace.domain.models import MarketplaceItem

_COLUMNS = """
    id, seller_id, title, description, category, status,
    pricing, specs, location, images, tags, keywords,
    price, latitude, longitude, geohash,
    view_count, favorite_count, inquiry_count,
    featured, reported, created_at, updated_at
"""

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_INSERT_ITEM_SQL = text(f"""
    INSERT INTO marketplace_items
        (id, seller_id, title, description, category, status,
         pricing, specs, location, images, tags, keywords,
         price, latitude, longitude, geohash)
    VALUES
        (:id, :seller_id, :title, :description, :category, :status,
         CAST(:pricing AS JSONB), CAST(:specs AS JSONB), CAST(:location AS JSONB),
         :images, :tags, :keywords,
         :price, :latitude, :longitude, :geohash)
    RETURNING {_COLUMNS}
""")

_GET_ITEM_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM marketplace_items
    WHERE id = :item_id
""")

_UPDATE_STATUS_SQL = text(f"""
    UPDATE marketplace_items
    SET status = :status
    WHERE id = :item_id
    RETURNING {_COLUMNS}
""")

_INCREMENT_VIEWS_SQL = text("""
    UPDATE marketplace_items
    SET view_count = view_count + 1
    WHERE id = :item_id
""")

_ADJUST_FAVORITES_SQL = text("""
    UPDATE marketplace_items
    SET favorite_count = GREATEST(favorite_count + :delta, 0)
    WHERE id = :item_id
    RETURNING favorite_count
""")

_ADJUST_INQUIRIES_SQL = text("""
    UPDATE marketplace_items
    SET inquiry_count = GREATEST(inquiry_count + :delta, 0)
    WHERE id = :item_id
""")

_IN_BOUNDS_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM marketplace_items
    WHERE status = 'available'
      AND reported = FALSE
      AND latitude BETWEEN :south AND :north
      AND longitude BETWEEN :west AND :east
      AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
      AND (CAST(:min_price AS BIGINT) IS NULL OR price >= CAST(:min_price AS BIGINT))
      AND (CAST(:max_price AS BIGINT) IS NULL OR price <= CAST(:max_price AS BIGINT))
""")

# sort option -> (column, direction, SQL type of the keyset value)
_SORT_KEYS: dict[str, tuple[str, str, str]] = {
    "latest": ("created_at", "DESC", "TIMESTAMPTZ"),
    "oldest": ("created_at", "ASC", "TIMESTAMPTZ"),
    "price_low": ("price", "ASC", "BIGINT"),
    "price_high": ("price", "DESC", "BIGINT"),
    "popular": ("view_count", "DESC", "BIGINT"),
}


def _list_sql(column: str, direction: str, key_type: str) -> TextClause:
    op = "<" if direction == "DESC" else ">"
    return text(f"""
        SELECT {_COLUMNS}
        FROM marketplace_items
        WHERE
            (CAST(:status AS TEXT) IS NULL OR status = CAST(:status AS TEXT))
            AND (CAST(:include_hidden AS BOOLEAN) OR status <> 'hidden')
            AND (CAST(:seller_id AS TEXT) IS NOT NULL OR reported = FALSE)
            AND (CAST(:seller_id AS TEXT) IS NULL OR seller_id = CAST(:seller_id AS TEXT))
            AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
            AND (CAST(:region AS TEXT) IS NULL OR location->>'region' = CAST(:region AS TEXT))
            AND (
                CAST(:query AS TEXT) IS NULL
                OR title ILIKE '%' || CAST(:query AS TEXT) || '%'
                OR description ILIKE '%' || CAST(:query AS TEXT) || '%'
                OR lower(CAST(:query AS TEXT)) = ANY(keywords)
            )
            AND (
                CAST(:cursor_key AS {key_type}) IS NULL
                OR {column} {op} CAST(:cursor_key AS {key_type})
                OR (
                    {column} = CAST(:cursor_key AS {key_type})
                    AND id {op} CAST(:cursor_id AS TEXT)
                )
            )
        ORDER BY {column} {direction}, id {direction}
        LIMIT :limit
    """)


_LIST_ITEMS_SQL: dict[str, TextClause] = {
    sort: _list_sql(*keys) for sort, keys in _SORT_KEYS.items()
}

# Columns update_item may touch, and whether they are JSONB
_UPDATABLE_COLUMNS: dict[str, bool] = {
    "title": False,
    "description": False,
    "category": False,
    "pricing": True,
    "specs": True,
    "location": True,
    "images": False,
    "tags": False,
    "keywords": False,
    "price": False,
    "latitude": False,
    "longitude": False,
    "geohash": False,
    "featured": False,
    "reported": False,
}

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _json(value: Any) -> Any:
    return json.loads(value) if isinstance(value, str) else value


def _row_to_item(row: Any) -> MarketplaceItem:
    return MarketplaceItem(
        id=row.id,
        seller_id=row.seller_id,
        title=row.title,
        description=row.description,
        category=row.category,
        status=row.status,
        pricing=_json(row.pricing) or {},
        specs=_json(row.specs) or {},
        location=_json(row.location) or {},
        images=list(row.images or []),
        tags=list(row.tags or []),
        keywords=list(row.keywords or []),
        price=row.price,
        latitude=row.latitude,
        longitude=row.longitude,
        geohash=row.geohash,
        view_count=row.view_count,
        favorite_count=row.favorite_count,
        inquiry_count=row.inquiry_count,
        featured=row.featured,
        reported=row.reported,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class ItemRepository:
    async def insert_item(self, db: AsyncSession, item: MarketplaceItem) -> MarketplaceItem:
        result = await db.execute(
            _INSERT_ITEM_SQL,
            {
                "id": item.id,
                "seller_id": item.seller_id,
                "title": item.title,
                "description": item.description,
                "category": item.category,
                "status": item.status,
                "pricing": json.dumps(item.pricing, ensure_ascii=False),
                "specs": json.dumps(item.specs, ensure_ascii=False),
                "location": json.dumps(item.location, ensure_ascii=False),
                "images": item.images,
                "tags": item.tags,
                "keywords": item.keywords,
                "price": item.price,
                "latitude": item.latitude,
                "longitude": item.longitude,
                "geohash": item.geohash,
            },
        )
        return _row_to_item(result.fetchone())

    async def get_item(self, db: AsyncSession, item_id: str) -> MarketplaceItem | None:
        result = await db.execute(_GET_ITEM_SQL, {"item_id": item_id})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def update_item(
        self, db: AsyncSession, item_id: str, fields: dict[str, Any]
    ) -> MarketplaceItem | None:
        unknown = set(fields) - set(_UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"not updatable: {sorted(unknown)}")
        if not fields:
            return await self.get_item(db, item_id)

        assignments = []
        params: dict[str, Any] = {"item_id": item_id}
        for column, value in fields.items():
            if _UPDATABLE_COLUMNS[column]:
                assignments.append(f"{column} = CAST(:{column} AS JSONB)")
                params[column] = json.dumps(value, ensure_ascii=False)
            else:
                assignments.append(f"{column} = :{column}")
                params[column] = value

        sql = text(f"""
            UPDATE marketplace_items
            SET {", ".join(assignments)}
            WHERE id = :item_id
            RETURNING {_COLUMNS}
        """)
        result = await db.execute(sql, params)
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def update_status(
        self, db: AsyncSession, item_id: str, status: str
    ) -> MarketplaceItem | None:
        result = await db.execute(_UPDATE_STATUS_SQL, {"item_id": item_id, "status": status})
        row = result.fetchone()
        return _row_to_item(row) if row else None

    async def increment_views(self, db: AsyncSession, item_id: str) -> None:
        await db.execute(_INCREMENT_VIEWS_SQL, {"item_id": item_id})

    async def adjust_favorites(self, db: AsyncSession, item_id: str, delta: int) -> int | None:
        result = await db.execute(_ADJUST_FAVORITES_SQL, {"item_id": item_id, "delta": delta})
        row = result.fetchone()
        return row.favorite_count if row else None

    async def adjust_inquiries(self, db: AsyncSession, item_id: str, delta: int) -> None:
        await db.execute(_ADJUST_INQUIRIES_SQL, {"item_id": item_id, "delta": delta})

    async def list_items(
        self,
        db: AsyncSession,
        *,
        sort: str,
        category: str | None,
        status: str | None,
        region: str | None,
        seller_id: str | None,
        query: str | None,
        cursor_key: datetime | int | None,
        cursor_id: str | None,
        limit: int,
        include_hidden: bool = False,
    ) -> list[MarketplaceItem]:
        result = await db.execute(
            _LIST_ITEMS_SQL[sort],
            {
                "status": status,
                "seller_id": seller_id,
                "include_hidden": include_hidden,
                "category": category,
                "region": region,
                "query": query,
                "cursor_key": cursor_key,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_item(row) for row in result.fetchall()]

    async def list_in_bounds(
        self,
        db: AsyncSession,
        box: BoundingBox,
        category: str | None,
        min_price: int | None,
        max_price: int | None,
    ) -> list[MarketplaceItem]:
        result = await db.execute(
            _IN_BOUNDS_SQL,
            {
                "south": box.southwest.lat,
                "north": box.northeast.lat,
                "west": box.southwest.lng,
                "east": box.northeast.lng,
                "category": category,
                "min_price": min_price,
                "max_price": max_price,
            },
        )
        return [_row_to_item(row) for row in result.fetchall()]
