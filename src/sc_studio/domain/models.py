"""Domain models for sc_studio — pure dataclasses, no business logic."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class Studio:
    """A dance studio, practice room or other venue, registered by a user."""

    id: str
    created_by: str
    name: str
    category: str
    status: str
    # JSON documents, stored camelCase exactly as validated
    location: dict[str, Any]
    description: str | None = None
    contact: dict[str, Any] = field(default_factory=dict)
    pricing: dict[str, Any] = field(default_factory=dict)
    facilities: dict[str, Any] = field(default_factory=dict)
    operating_hours: dict[str, Any] = field(default_factory=dict)
    images: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)
    keywords: list[str] = field(default_factory=list)
    latitude: float | None = None
    longitude: float | None = None
    geohash: str | None = None
    view_count: int = 0
    favorite_count: int = 0
    verified: bool = False
    featured: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def region(self) -> str | None:
        return self.location.get("region")


@dataclass(frozen=True)
class StudioMatch:
    studio: Studio
    distance_km: float
