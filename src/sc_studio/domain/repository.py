"""Repository Protocol for studios."""

from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_geo.domain.models import BoundingBox
from src.sc_studio.domain.models import Studio


class StudioRepositoryProtocol(Protocol):
    async def insert_studio(self, db: AsyncSession, studio: Studio) -> Studio: ...

    async def get_studio(self, db: AsyncSession, studio_id: str) -> Studio | None: ...

    async def update_studio(
        self, db: AsyncSession, studio_id: str, fields: dict[str, Any]
    ) -> Studio | None: ...

    async def delete_studio(self, db: AsyncSession, studio_id: str) -> bool: ...

    async def increment_views(self, db: AsyncSession, studio_id: str) -> None: ...

    async def adjust_favorites(self, db: AsyncSession, studio_id: str, delta: int) -> int | None: ...

    async def list_studios(
        self, db: AsyncSession, category: str | None, offset: int, limit: int
    ) -> list[Studio]: ...

    async def list_in_bounds(
        self, db: AsyncSession, box: BoundingBox, category: str | None
    ) -> list[Studio]: ...

    async def search(
        self, db: AsyncSession, term: str | None, categories: list[str] | None, limit: int
    ) -> list[Studio]: ...
