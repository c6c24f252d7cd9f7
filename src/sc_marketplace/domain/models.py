"""Domain models for sc_marketplace — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class MarketplaceItem:
    id: str
    seller_id: str
    title: str
    description: str
    category: str
    status: str
    # JSON documents, stored camelCase exactly as validated
    pricing: dict[str, Any]
    specs: dict[str, Any]
    location: dict[str, Any]
    images: list[str]
    tags: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    price: int = 0
    latitude: float | None = None
    longitude: float | None = None
    geohash: str | None = None
    view_count: int = 0
    favorite_count: int = 0
    inquiry_count: int = 0
    featured: bool = False
    reported: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def region(self) -> str | None:
        return self.location.get("region")


@dataclass(frozen=True)
class LocationMatch:
    """An item found by a radius search, with its exact distance from the center."""

    item: MarketplaceItem
    distance_km: float
