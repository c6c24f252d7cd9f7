"""StudioRepository — raw text() SQL over ``studios``.

Same conventions as the marketplace repository: ``CAST(:p AS T) IS NULL``
for optional filters, JSONB documents sent as JSON text, and the
application service owns the transaction.
"""

import json
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_geo.domain.models import BoundingBox
from src.sc_studio.domain.models import Studio

_COLUMNS = """
    id, created_by, name, description, category, status,
    location, contact, pricing, facilities, operating_hours,
    images, tags, keywords, latitude, longitude, geohash,
    view_count, favorite_count, verified, featured, created_at, updated_at
"""

_INSERT_STUDIO_SQL = text(f"""
    INSERT INTO studios
        (id, created_by, name, description, category, status,
         location, contact, pricing, facilities, operating_hours,
         images, tags, keywords, latitude, longitude, geohash)
    VALUES
        (:id, :created_by, :name, :description, :category, :status,
         CAST(:location AS JSONB), CAST(:contact AS JSONB), CAST(:pricing AS JSONB),
         CAST(:facilities AS JSONB), CAST(:operating_hours AS JSONB),
         :images, :tags, :keywords, :latitude, :longitude, :geohash)
    RETURNING {_COLUMNS}
""")

_GET_STUDIO_SQL = text(f"SELECT {_COLUMNS} FROM studios WHERE id = :studio_id")

_DELETE_STUDIO_SQL = text("DELETE FROM studios WHERE id = :studio_id")

_INCREMENT_VIEWS_SQL = text("UPDATE studios SET view_count = view_count + 1 WHERE id = :studio_id")

_ADJUST_FAVORITES_SQL = text("""
    UPDATE studios
    SET favorite_count = GREATEST(favorite_count + :delta, 0)
    WHERE id = :studio_id
    RETURNING favorite_count
""")

_LIST_STUDIOS_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM studios
    WHERE status = 'active'
      AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
    ORDER BY updated_at DESC, id DESC
    LIMIT :limit OFFSET :offset
""")

_IN_BOUNDS_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM studios
    WHERE status = 'active'
      AND latitude BETWEEN :south AND :north
      AND longitude BETWEEN :west AND :east
      AND (CAST(:category AS TEXT) IS NULL OR category = CAST(:category AS TEXT))
""")

# case-insensitive substring match, not word match
_SEARCH_SQL = text(f"""
    SELECT {_COLUMNS}
    FROM studios
    WHERE status = 'active'
      AND (
          CAST(:categories AS TEXT[]) IS NULL
          OR category = ANY(CAST(:categories AS TEXT[]))
      )
      AND (
          CAST(:term AS TEXT) IS NULL
          OR strpos(
              lower(concat_ws(' ',
                  name, description, location->>'address', location->>'region',
                  array_to_string(tags, ' '), array_to_string(keywords, ' ')
              )),
              lower(CAST(:term AS TEXT))
          ) > 0
      )
    ORDER BY updated_at DESC, id DESC
    LIMIT :limit
""")

# Columns update_studio may touch, and whether they are JSONB
_UPDATABLE_COLUMNS: dict[str, bool] = {
    "name": False,
    "description": False,
    "category": False,
    "status": False,
    "location": True,
    "contact": True,
    "pricing": True,
    "facilities": True,
    "operating_hours": True,
    "images": False,
    "tags": False,
    "keywords": False,
    "latitude": False,
    "longitude": False,
    "geohash": False,
    "verified": False,
    "featured": False,
}


def _json(value: Any) -> Any:
    return json.loads(value) if isinstance(value, str) else value


def _dumps(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def _row_to_studio(row: Any) -> Studio:
    return Studio(
        id=row.id,
        created_by=row.created_by,
        name=row.name,
        description=row.description,
        category=row.category,
        status=row.status,
        location=_json(row.location) or {},
        contact=_json(row.contact) or {},
        pricing=_json(row.pricing) or {},
        facilities=_json(row.facilities) or {},
        operating_hours=_json(row.operating_hours) or {},
        images=list(row.images or []),
        tags=list(row.tags or []),
        keywords=list(row.keywords or []),
        latitude=row.latitude,
        longitude=row.longitude,
        geohash=row.geohash,
        view_count=row.view_count,
        favorite_count=row.favorite_count,
        verified=row.verified,
        featured=row.featured,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


class StudioRepository:
    async def insert_studio(self, db: AsyncSession, studio: Studio) -> Studio:
        result = await db.execute(
            _INSERT_STUDIO_SQL,
            {
                "id": studio.id,
                "created_by": studio.created_by,
                "name": studio.name,
                "description": studio.description,
                "category": studio.category,
                "status": studio.status,
                "location": _dumps(studio.location),
                "contact": _dumps(studio.contact),
                "pricing": _dumps(studio.pricing),
                "facilities": _dumps(studio.facilities),
                "operating_hours": _dumps(studio.operating_hours),
                "images": studio.images,
                "tags": studio.tags,
                "keywords": studio.keywords,
                "latitude": studio.latitude,
                "longitude": studio.longitude,
                "geohash": studio.geohash,
            },
        )
        return _row_to_studio(result.fetchone())

    async def get_studio(self, db: AsyncSession, studio_id: str) -> Studio | None:
        row = (await db.execute(_GET_STUDIO_SQL, {"studio_id": studio_id})).fetchone()
        return _row_to_studio(row) if row else None

    async def update_studio(
        self, db: AsyncSession, studio_id: str, fields: dict[str, Any]
    ) -> Studio | None:
        unknown = set(fields) - set(_UPDATABLE_COLUMNS)
        if unknown:
            raise ValueError(f"not updatable: {sorted(unknown)}")
        if not fields:
            return await self.get_studio(db, studio_id)

        assignments = []
        params: dict[str, Any] = {"studio_id": studio_id}
        for column, value in fields.items():
            if _UPDATABLE_COLUMNS[column]:
                assignments.append(f"{column} = CAST(:{column} AS JSONB)")
                params[column] = _dumps(value)
            else:
                assignments.append(f"{column} = :{column}")
                params[column] = value

        sql = text(f"""
            UPDATE studios
            SET {", ".join(assignments)}
            WHERE id = :studio_id
            RETURNING {_COLUMNS}
        """)
        row = (await db.execute(sql, params)).fetchone()
        return _row_to_studio(row) if row else None

    async def delete_studio(self, db: AsyncSession, studio_id: str) -> bool:
        result = await db.execute(_DELETE_STUDIO_SQL, {"studio_id": studio_id})
        return result.rowcount > 0

    async def increment_views(self, db: AsyncSession, studio_id: str) -> None:
        await db.execute(_INCREMENT_VIEWS_SQL, {"studio_id": studio_id})

    async def adjust_favorites(self, db: AsyncSession, studio_id: str, delta: int) -> int | None:
        row = (
            await db.execute(_ADJUST_FAVORITES_SQL, {"studio_id": studio_id, "delta": delta})
        ).fetchone()
        return row.favorite_count if row else None

    async def list_studios(
        self, db: AsyncSession, category: str | None, offset: int, limit: int
    ) -> list[Studio]:
        result = await db.execute(
            _LIST_STUDIOS_SQL, {"category": category, "offset": offset, "limit": limit}
        )
        return [_row_to_studio(row) for row in result.fetchall()]

    async def list_in_bounds(
        self, db: AsyncSession, box: BoundingBox, category: str | None
    ) -> list[Studio]:
        result = await db.execute(
            _IN_BOUNDS_SQL,
            {
                "south": box.southwest.lat,
                "north": box.northeast.lat,
                "west": box.southwest.lng,
                "east": box.northeast.lng,
                "category": category,
            },
        )
        return [_row_to_studio(row) for row in result.fetchall()]

    async def search(
        self, db: AsyncSession, term: str | None, categories: list[str] | None, limit: int
    ) -> list[Studio]:
        result = await db.execute(
            _SEARCH_SQL, {"term": term, "categories": categories or None, "limit": limit}
        )
        return [_row_to_studio(row) for row in result.fetchall()]
