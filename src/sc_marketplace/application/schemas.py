"""Pydantic schemas for sc_marketplace requests and responses.

Create/update payloads are NOT declared here: they are validated by
``sc_validation.schemas.CreateItemData`` so that error messages match the
advisory validator exactly.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.sc_common.datetime_utils import iso_or_none
from src.sc_common.enums import ITEM_STATUS_LABELS, PRODUCT_CATEGORY_LABELS, ItemStatus, ProductCategory
from src.sc_geo.domain.geo import format_distance
from src.sc_marketplace.domain.models import LocationMatch, MarketplaceItem

# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class ItemStatusRequest(BaseModel):
    status: str


class FavoriteRequest(BaseModel):
    increment: bool = True


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def _label(labels: dict[Any, str], enum_cls: Any, value: str) -> str | None:
    try:
        return labels.get(enum_cls(value))
    except ValueError:
        return None


class GeoPointOut(BaseModel):
    latitude: float
    longitude: float


class ItemStatsOut(BaseModel):
    views: int
    favorites: int
    inquiries: int


class ItemOut(BaseModel):
    id: str
    seller_id: str
    title: str
    description: str
    category: str
    category_label: str | None
    status: str
    status_label: str | None
    pricing: dict[str, Any]
    specs: dict[str, Any]
    location: dict[str, Any]
    geopoint: GeoPointOut | None
    geohash: str | None
    images: list[str]
    tags: list[str]
    stats: ItemStatsOut
    featured: bool
    reported: bool
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, item: MarketplaceItem) -> "ItemOut":
        geopoint = None
        if item.latitude is not None and item.longitude is not None:
            geopoint = GeoPointOut(latitude=item.latitude, longitude=item.longitude)
        return cls(
            id=item.id,
            seller_id=item.seller_id,
            title=item.title,
            description=item.description,
            category=item.category,
            category_label=_label(PRODUCT_CATEGORY_LABELS, ProductCategory, item.category),
            status=item.status,
            status_label=_label(ITEM_STATUS_LABELS, ItemStatus, item.status),
            pricing=item.pricing,
            specs=item.specs,
            location=item.location,
            geopoint=geopoint,
            geohash=item.geohash,
            images=item.images,
            tags=item.tags,
            stats=ItemStatsOut(
                views=item.view_count,
                favorites=item.favorite_count,
                inquiries=item.inquiry_count,
            ),
            featured=item.featured,
            reported=item.reported,
            created_at=iso_or_none(item.created_at),
            updated_at=iso_or_none(item.updated_at),
        )


class ItemListResponse(BaseModel):
    items: list[ItemOut]
    next_cursor: str | None
    has_more: bool


class NearbyItemOut(ItemOut):
    distance_km: float
    distance_display: str

    @classmethod
    def from_match(cls, match: LocationMatch) -> "NearbyItemOut":
        base = ItemOut.from_domain(match.item).model_dump()
        return cls(
            **base,
            distance_km=round(match.distance_km, 3),
            distance_display=format_distance(match.distance_km),
        )


class LocationSearchResponse(BaseModel):
    items: list[NearbyItemOut]
    center: GeoPointOut
    radius_km: float
    total: int = Field(ge=0)


class FavoriteResponse(BaseModel):
    item_id: str
    favorites: int
