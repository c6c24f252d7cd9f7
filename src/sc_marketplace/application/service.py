"""MarketplaceApplicationService — composition layer for marketplace items.

Every write validates through the shared CreateItemData schema, sanitizes
free text, derives geo columns (geopoint, geohash, nearest region) and then
commits. Items are never deleted: DELETE moves them to ``hidden``.
"""

import logging
from collections.abc import Callable
from datetime import datetime
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_common.cursor import keyset_decode, keyset_encode
from src.sc_common.enums import ItemSortOption, ItemStatus
from src.sc_common.errors import (
    EmptyUpdateError,
    InvalidCoordinatesError,
    InvalidItemStatusError,
    ItemAccessDeniedError,
    ItemNotFoundError,
)
from src.sc_common.id_generator import generate_id
from src.sc_gateway.auth.caller import Caller
from src.sc_geo.domain.geo import (
    calculate_bounding_box,
    calculate_distance,
    generate_geohash,
    is_valid_coordinates,
)
from src.sc_geo.domain.models import Coordinates
from src.sc_geo.domain.regions import find_nearest_region
from src.sc_marketplace.application.schemas import (
    FavoriteResponse,
    GeoPointOut,
    ItemListResponse,
    ItemOut,
    LocationSearchResponse,
    NearbyItemOut,
)
from src.sc_marketplace.domain.keywords import generate_search_keywords
from src.sc_marketplace.domain.models import LocationMatch, MarketplaceItem
from src.sc_marketplace.domain.repository import ItemRepositoryProtocol
from src.sc_marketplace.infrastructure.persistence import ItemRepository
from src.sc_validation.access import can_manage_item, is_admin, is_owner
from src.sc_validation.sanitize import clean_item_data
from src.sc_validation.schemas import CreateItemData, camelize

logger = logging.getLogger("sc.marketplace")

_CONTENT_FIELDS = (
    "title", "description", "category", "pricing", "specs",
    "location", "images", "tags", "keywords",
)
_MERGED_DOCUMENTS = ("pricing", "specs", "location")
_ADMIN_FLAGS = ("featured", "reported")
_TIME_SORTS = {ItemSortOption.LATEST.value, ItemSortOption.OLDEST.value}


def _derived_columns(data: CreateItemData) -> dict[str, Any]:
    """Stored columns computed from a validated, sanitized payload."""
    location = data.location.model_dump(mode="json", by_alias=True, exclude_none=True)
    latitude = longitude = geohash = None

    coords_in = data.location.coordinates
    if coords_in is not None:
        coords = Coordinates(lat=coords_in.lat, lng=coords_in.lng)
        if is_valid_coordinates(coords):
            latitude, longitude = coords.lat, coords.lng
            geohash = generate_geohash(coords)
            detected = find_nearest_region(coords)
            if detected:
                location["region"] = detected

    return {
        "title": data.title,
        "description": data.description,
        "category": data.category.value,
        "pricing": data.pricing.model_dump(mode="json", by_alias=True, exclude_none=True),
        "specs": data.specs.model_dump(mode="json", by_alias=True, exclude_none=True),
        "location": location,
        "images": list(data.images),
        "tags": list(data.tags),
        "keywords": generate_search_keywords(
            data.title,
            data.description,
            data.category.value,
            brand=data.specs.brand,
            region=location.get("region"),
            tags=data.tags,
        ),
        "price": int(round(data.pricing.price)),
        "latitude": latitude,
        "longitude": longitude,
        "geohash": geohash,
    }


def _document(item: MarketplaceItem) -> dict[str, Any]:
    """The stored item as a create payload, for whole-document revalidation."""
    return {
        "title": item.title,
        "description": item.description,
        "category": item.category,
        "pricing": dict(item.pricing),
        "specs": dict(item.specs),
        "location": dict(item.location),
        "images": list(item.images),
        "tags": list(item.tags),
        "keywords": list(item.keywords),
    }


def _sort_key(item: MarketplaceItem, sort: str) -> datetime | int:
    if sort in _TIME_SORTS:
        return item.created_at  # type: ignore[return-value]
    if sort in (ItemSortOption.PRICE_LOW.value, ItemSortOption.PRICE_HIGH.value):
        return item.price
    return item.view_count


class MarketplaceApplicationService:
    def __init__(
        self,
        repo: ItemRepositoryProtocol | None = None,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        self._repo: ItemRepositoryProtocol = repo or ItemRepository()
        self._new_id = id_factory

    async def _load(self, db: AsyncSession, item_id: str) -> MarketplaceItem:
        item = await self._repo.get_item(db, item_id)
        if item is None:
            raise ItemNotFoundError(item_id)
        return item

    async def _managed(self, db: AsyncSession, caller: Caller, item_id: str, message: str) -> MarketplaceItem:
        item = await self._load(db, item_id)
        if not can_manage_item(caller, item):
            raise ItemAccessDeniedError(message)
        return item

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_item(self, db: AsyncSession, caller: Caller, payload: Any) -> ItemOut:
        data = clean_item_data(payload)
        columns = _derived_columns(data)
        item = MarketplaceItem(
            id=self._new_id("itm_"),
            seller_id=caller.uid,  # type: ignore[arg-type]
            status=ItemStatus.AVAILABLE.value,
            **columns,
        )
        try:
            created = await self._repo.insert_item(db, item)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Item %s created by %s", created.id, caller.uid)
        return ItemOut.from_domain(created)

    async def update_item(
        self, db: AsyncSession, caller: Caller, item_id: str, patch: dict[str, Any]
    ) -> ItemOut:
        item = await self._managed(db, caller, item_id, "수정 권한이 없습니다.")
        if not patch:
            raise EmptyUpdateError()

        patch = camelize(patch)
        flags = {k: bool(patch[k]) for k in _ADMIN_FLAGS if k in patch}
        if flags and not is_admin(caller):
            raise ItemAccessDeniedError("관리자만 변경할 수 있는 항목입니다.")

        content = {k: patch[k] for k in _CONTENT_FIELDS if k in patch}
        if not content and not flags:
            raise EmptyUpdateError()

        fields: dict[str, Any] = dict(flags)
        if content:
            merged = _document(item)
            for key, value in content.items():
                if key in _MERGED_DOCUMENTS and isinstance(value, dict) and isinstance(merged[key], dict):
                    merged[key] = {**merged[key], **value}
                else:
                    merged[key] = value
            fields.update(_derived_columns(clean_item_data(merged)))

        try:
            updated = await self._repo.update_item(db, item_id, fields)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise ItemNotFoundError(item_id)
        logger.info("Item %s updated by %s (%s)", item_id, caller.uid, ", ".join(sorted(fields)))
        return ItemOut.from_domain(updated)

    async def change_item_status(
        self, db: AsyncSession, caller: Caller, item_id: str, status: str
    ) -> ItemOut:
        if status not in {s.value for s in ItemStatus}:
            raise InvalidItemStatusError(status)
        await self._managed(db, caller, item_id, "변경 권한이 없습니다.")
        try:
            updated = await self._repo.update_status(db, item_id, status)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise ItemNotFoundError(item_id)
        logger.info("Item %s -> %s by %s", item_id, status, caller.uid)
        return ItemOut.from_domain(updated)

    async def hide_item(self, db: AsyncSession, caller: Caller, item_id: str) -> ItemOut:
        return await self.change_item_status(db, caller, item_id, ItemStatus.HIDDEN.value)

    async def toggle_favorite(
        self, db: AsyncSession, item_id: str, increment: bool
    ) -> FavoriteResponse:
        try:
            favorites = await self._repo.adjust_favorites(db, item_id, 1 if increment else -1)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if favorites is None:
            raise ItemNotFoundError(item_id)
        return FavoriteResponse(item_id=item_id, favorites=favorites)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_item(
        self,
        db: AsyncSession,
        item_id: str,
        caller: Caller | None = None,
        increment_views: bool = False,
    ) -> ItemOut:
        item = await self._load(db, item_id)
        if item.status == ItemStatus.HIDDEN.value and not can_manage_item(caller, item):
            raise ItemNotFoundError(item_id)

        if increment_views:
            # A lost view count must not fail the read
            try:
                await self._repo.increment_views(db, item_id)
                await db.commit()
            except SQLAlchemyError:
                await db.rollback()
                logger.warning("Could not increment views for item %s", item_id, exc_info=True)
        return ItemOut.from_domain(item)

    async def list_items(
        self,
        db: AsyncSession,
        *,
        category: str | None = None,
        status: str | None = None,
        region: str | None = None,
        seller_id: str | None = None,
        query: str | None = None,
        cursor: str | None = None,
        limit: int = 20,
        sort: str = ItemSortOption.LATEST.value,
        caller: Caller | None = None,
    ) -> ItemListResponse:
        if sort not in {s.value for s in ItemSortOption}:
            sort = ItemSortOption.LATEST.value
        # public listing shows only what is for sale; a seller's own list shows everything
        if status is None and seller_id is None:
            status = ItemStatus.AVAILABLE.value
        # hidden items only ever reach their own seller or an admin
        include_hidden = seller_id is not None and (is_owner(caller, seller_id) or is_admin(caller))

        raw_key, cursor_id = keyset_decode(cursor)
        cursor_key: datetime | int | None = None
        if raw_key is not None:
            try:
                cursor_key = datetime.fromisoformat(raw_key) if sort in _TIME_SORTS else int(raw_key)
            except (TypeError, ValueError):
                cursor_key, cursor_id = None, None

        # Fetch limit+1 to detect has_more without COUNT(*)
        items = await self._repo.list_items(
            db,
            sort=sort,
            category=category,
            status=status,
            region=region,
            seller_id=seller_id,
            query=query.strip() if query and query.strip() else None,
            cursor_key=cursor_key,
            cursor_id=cursor_id,
            limit=limit + 1,
            include_hidden=include_hidden,
        )
        has_more = len(items) > limit
        page = items[:limit]
        next_cursor = (
            keyset_encode(_sort_key(page[-1], sort), page[-1].id) if has_more and page else None
        )
        return ItemListResponse(
            items=[ItemOut.from_domain(i) for i in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def search_by_location(
        self,
        db: AsyncSession,
        center: Coordinates,
        radius_km: float,
        category: str | None = None,
        min_price: int | None = None,
        max_price: int | None = None,
        limit: int | None = None,
    ) -> LocationSearchResponse:
        """Items within ``radius_km`` of ``center``, nearest first.

        The bounding box is only a coarse SQL prefilter; the exact haversine
        distance decides membership and order.
        """
        if not is_valid_coordinates(center):
            raise InvalidCoordinatesError()

        box = calculate_bounding_box(center, radius_km)
        candidates = await self._repo.list_in_bounds(db, box, category, min_price, max_price)

        matches: list[LocationMatch] = []
        for item in candidates:
            if item.latitude is None or item.longitude is None:
                continue
            distance = calculate_distance(center, Coordinates(lat=item.latitude, lng=item.longitude))
            if distance <= radius_km:
                matches.append(LocationMatch(item=item, distance_km=distance))

        matches.sort(key=lambda m: m.distance_km)
        if limit is not None:
            matches = matches[:limit]

        return LocationSearchResponse(
            items=[NearbyItemOut.from_match(m) for m in matches],
            center=GeoPointOut(latitude=center.lat, longitude=center.lng),
            radius_km=radius_km,
            total=len(matches),
        )
