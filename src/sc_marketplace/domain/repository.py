"""Repository Protocol — dependency inversion for testability.

Unit tests inject a mock that conforms to this Protocol.
Infrastructure layer provides the real implementation.
"""

from datetime import datetime
from typing import Any, Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_geo.domain.models import BoundingBox
from src.sc_marketplace.domain.models import MarketplaceItem


class ItemRepositoryProtocol(Protocol):
    async def insert_item(self, db: AsyncSession, item: MarketplaceItem) -> MarketplaceItem: ...

    async def get_item(self, db: AsyncSession, item_id: str) -> MarketplaceItem | None: ...

    async def update_item(
        self, db: AsyncSession, item_id: str, fields: dict[str, Any]
    ) -> MarketplaceItem | None: ...

    async def update_status(
        self, db: AsyncSession, item_id: str, status: str
    ) -> MarketplaceItem | None: ...

    async def increment_views(self, db: AsyncSession, item_id: str) -> None: ...

    async def adjust_favorites(self, db: AsyncSession, item_id: str, delta: int) -> int | None: ...

    async def adjust_inquiries(self, db: AsyncSession, item_id: str, delta: int) -> None: ...

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
    ) -> list[MarketplaceItem]: ...

    async def list_in_bounds(
        self,
        db: AsyncSession,
        box: BoundingBox,
        category: str | None,
        min_price: int | None,
        max_price: int | None,
    ) -> list[MarketplaceItem]: ...
