"""Pydantic schemas for sc_studio responses and small request bodies.

Create/update payloads are validated by ``sc_validation.schemas.CreateStudioData``.
"""

from typing import Any

from pydantic import BaseModel, Field

from src.sc_common.datetime_utils import iso_or_none
from src.sc_common.enums import STUDIO_CATEGORY_LABELS, STUDIO_STATUS_LABELS, StudioCategory, StudioStatus
from src.sc_geo.domain.geo import format_distance
from src.sc_studio.domain.models import Studio, StudioMatch


class StudioFavoriteRequest(BaseModel):
    increment: bool = True


def _label(labels: dict[Any, str], enum_cls: Any, value: str) -> str | None:
    try:
        return labels.get(enum_cls(value))
    except ValueError:
        return None


class StudioGeoPointOut(BaseModel):
    latitude: float
    longitude: float


class StudioStatsOut(BaseModel):
    views: int
    favorites: int


class StudioOut(BaseModel):
    id: str
    created_by: str
    name: str
    description: str | None
    category: str
    category_label: str | None
    status: str
    status_label: str | None
    location: dict[str, Any]
    geopoint: StudioGeoPointOut | None
    geohash: str | None
    contact: dict[str, Any]
    pricing: dict[str, Any]
    facilities: dict[str, Any]
    operating_hours: dict[str, Any]
    images: list[str]
    tags: list[str]
    stats: StudioStatsOut
    verified: bool
    featured: bool
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, studio: Studio) -> "StudioOut":
        geopoint = None
        if studio.latitude is not None and studio.longitude is not None:
            geopoint = StudioGeoPointOut(latitude=studio.latitude, longitude=studio.longitude)
        return cls(
            id=studio.id,
            created_by=studio.created_by,
            name=studio.name,
            description=studio.description,
            category=studio.category,
            category_label=_label(STUDIO_CATEGORY_LABELS, StudioCategory, studio.category),
            status=studio.status,
            status_label=_label(STUDIO_STATUS_LABELS, StudioStatus, studio.status),
            location=studio.location,
            geopoint=geopoint,
            geohash=studio.geohash,
            contact=studio.contact,
            pricing=studio.pricing,
            facilities=studio.facilities,
            operating_hours=studio.operating_hours,
            images=studio.images,
            tags=studio.tags,
            stats=StudioStatsOut(views=studio.view_count, favorites=studio.favorite_count),
            verified=studio.verified,
            featured=studio.featured,
            created_at=iso_or_none(studio.created_at),
            updated_at=iso_or_none(studio.updated_at),
        )


class StudioListResponse(BaseModel):
    items: list[StudioOut]
    page: int
    page_size: int
    has_next: bool
    has_prev: bool


class NearbyStudioOut(StudioOut):
    distance_km: float
    distance_display: str

    @classmethod
    def from_match(cls, match: StudioMatch) -> "NearbyStudioOut":
        return cls(
            **StudioOut.from_domain(match.studio).model_dump(),
            distance_km=round(match.distance_km, 3),
            distance_display=format_distance(match.distance_km),
        )


class StudioLocationSearchResponse(BaseModel):
    items: list[NearbyStudioOut]
    center: StudioGeoPointOut
    radius_km: float
    total: int = Field(ge=0)


class StudioSearchResponse(BaseModel):
    items: list[StudioOut]
    total: int = Field(ge=0)
    has_more: bool


class StudioFavoriteResponse(BaseModel):
    studio_id: str
    favorites: int


class StudioDeletedResponse(BaseModel):
    studio_id: str
    deleted: bool = True
