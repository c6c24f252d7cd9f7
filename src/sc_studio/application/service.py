"""StudioApplicationService — studio registry, listing and search.

Writes validate through CreateStudioData, sanitize free text, then derive
the geo columns (geohash, nearest region) and search keywords. Only the
registering user or an admin may change or delete a studio; ``verified``
and ``featured`` are admin-only. Listings and searches show ``active``
studios only.
"""

import logging
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_common.enums import StudioStatus
from src.sc_common.errors import (
    EmptyUpdateError,
    InvalidCoordinatesError,
    InvalidStudioStatusError,
    StudioAccessDeniedError,
    StudioNotFoundError,
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
from src.sc_marketplace.domain.keywords import generate_search_keywords
from src.sc_studio.application.schemas import (
    NearbyStudioOut,
    StudioDeletedResponse,
    StudioFavoriteResponse,
    StudioGeoPointOut,
    StudioListResponse,
    StudioLocationSearchResponse,
    StudioOut,
    StudioSearchResponse,
)
from src.sc_studio.domain.filters import StudioSearchFilters, apply_filters
from src.sc_studio.domain.models import Studio, StudioMatch
from src.sc_studio.domain.repository import StudioRepositoryProtocol
from src.sc_studio.infrastructure.persistence import StudioRepository
from src.sc_validation.access import is_admin, is_studio_owner
from src.sc_validation.sanitize import clean_studio_data
from src.sc_validation.schemas import CreateStudioData, camelize

logger = logging.getLogger("sc.studio")

_CONTENT_FIELDS = (
    "name", "description", "category", "location", "contact", "pricing",
    "facilities", "operatingHours", "images", "tags", "keywords",
)
_MERGED_DOCUMENTS = ("location", "contact", "pricing", "facilities", "operatingHours")
_ADMIN_FLAGS = ("verified", "featured")
# rows read before the in-memory filters of a text search
_SEARCH_SCAN_LIMIT = 500


def _dump(model: Any) -> dict[str, Any]:
    if model is None:
        return {}
    return model.model_dump(mode="json", by_alias=True, exclude_none=True)


def _derived_columns(data: CreateStudioData) -> dict[str, Any]:
    """Stored columns computed from a validated, sanitized payload."""
    location = _dump(data.location)
    coords = Coordinates(lat=data.location.coordinates.lat, lng=data.location.coordinates.lng)
    geohash = None
    if is_valid_coordinates(coords):
        geohash = generate_geohash(coords)
        detected = find_nearest_region(coords)
        if detected:
            location["region"] = detected

    return {
        "name": data.name,
        "description": data.description,
        "category": data.category.value,
        "location": location,
        "contact": _dump(data.contact),
        "pricing": _dump(data.pricing),
        "facilities": _dump(data.facilities),
        "operating_hours": _dump(data.operating_hours),
        "images": list(data.images or []),
        "tags": list(data.tags),
        "keywords": generate_search_keywords(
            data.name,
            data.description or "",
            data.category.value,
            region=location.get("region"),
            tags=data.tags,
        ),
        "latitude": coords.lat,
        "longitude": coords.lng,
        "geohash": geohash,
    }


def _document(studio: Studio) -> dict[str, Any]:
    """The stored studio as a create payload, for whole-document revalidation."""
    document: dict[str, Any] = {
        "name": studio.name,
        "category": studio.category,
        "location": dict(studio.location),
        "contact": dict(studio.contact),
        "pricing": dict(studio.pricing),
        "facilities": dict(studio.facilities),
        "operatingHours": dict(studio.operating_hours),
        "images": list(studio.images),
        "tags": list(studio.tags),
        "keywords": list(studio.keywords),
    }
    if studio.description is not None:
        document["description"] = studio.description
    return document


def _can_manage(caller: Caller, studio: Studio) -> bool:
    return is_studio_owner(caller, studio) or is_admin(caller)


class StudioApplicationService:
    def __init__(
        self,
        repo: StudioRepositoryProtocol | None = None,
        id_factory: Callable[[str], str] = generate_id,
    ) -> None:
        self._repo: StudioRepositoryProtocol = repo or StudioRepository()
        self._new_id = id_factory

    async def _load(self, db: AsyncSession, studio_id: str) -> Studio:
        studio = await self._repo.get_studio(db, studio_id)
        if studio is None:
            raise StudioNotFoundError(studio_id)
        return studio

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    async def create_studio(self, db: AsyncSession, caller: Caller, payload: Any) -> StudioOut:
        data = clean_studio_data(payload)
        studio = Studio(
            id=self._new_id("std_"),
            created_by=caller.uid,  # type: ignore[arg-type]
            status=StudioStatus.ACTIVE.value,
            **_derived_columns(data),
        )
        try:
            created = await self._repo.insert_studio(db, studio)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("Studio %s created by %s", created.id, caller.uid)
        return StudioOut.from_domain(created)

    async def update_studio(
        self, db: AsyncSession, caller: Caller, studio_id: str, patch: dict[str, Any]
    ) -> StudioOut:
        studio = await self._load(db, studio_id)
        if not _can_manage(caller, studio):
            raise StudioAccessDeniedError("수정 권한이 없습니다.")

        patch = camelize(patch)
        flags = {k: bool(patch[k]) for k in _ADMIN_FLAGS if k in patch}
        if flags and not is_admin(caller):
            raise StudioAccessDeniedError("관리자만 변경할 수 있는 항목입니다.")

        fields: dict[str, Any] = dict(flags)
        if "status" in patch:
            if patch["status"] not in {s.value for s in StudioStatus}:
                raise InvalidStudioStatusError(str(patch["status"]))
            fields["status"] = patch["status"]

        content = {k: patch[k] for k in _CONTENT_FIELDS if k in patch}
        if content:
            merged = _document(studio)
            for key, value in content.items():
                if key in _MERGED_DOCUMENTS and isinstance(value, dict) and isinstance(merged.get(key), dict):
                    merged[key] = {**merged[key], **value}
                else:
                    merged[key] = value
            fields.update(_derived_columns(clean_studio_data(merged)))
        if not fields:
            raise EmptyUpdateError()

        try:
            updated = await self._repo.update_studio(db, studio_id, fields)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if updated is None:
            raise StudioNotFoundError(studio_id)
        logger.info("Studio %s updated by %s (%s)", studio_id, caller.uid, ", ".join(sorted(fields)))
        return StudioOut.from_domain(updated)

    async def delete_studio(
        self, db: AsyncSession, caller: Caller, studio_id: str
    ) -> StudioDeletedResponse:
        studio = await self._load(db, studio_id)
        if not _can_manage(caller, studio):
            raise StudioAccessDeniedError("삭제 권한이 없습니다.")
        try:
            deleted = await self._repo.delete_studio(db, studio_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if not deleted:
            raise StudioNotFoundError(studio_id)
        logger.info("Studio %s deleted by %s", studio_id, caller.uid)
        return StudioDeletedResponse(studio_id=studio_id)

    async def increment_views(self, db: AsyncSession, studio_id: str) -> None:
        """Best effort: a lost view count is logged, never raised."""
        try:
            await self._repo.increment_views(db, studio_id)
            await db.commit()
        except SQLAlchemyError:
            await db.rollback()
            logger.warning("Could not increment views for studio %s", studio_id, exc_info=True)

    async def toggle_favorite(
        self, db: AsyncSession, studio_id: str, increment: bool
    ) -> StudioFavoriteResponse:
        try:
            favorites = await self._repo.adjust_favorites(db, studio_id, 1 if increment else -1)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        if favorites is None:
            raise StudioNotFoundError(studio_id)
        return StudioFavoriteResponse(studio_id=studio_id, favorites=favorites)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def get_studio(
        self, db: AsyncSession, studio_id: str, increment_views: bool = False
    ) -> StudioOut:
        studio = await self._load(db, studio_id)
        if increment_views:
            await self.increment_views(db, studio_id)
        return StudioOut.from_domain(studio)

    async def list_studios(
        self,
        db: AsyncSession,
        category: str | None = None,
        page: int = 1,
        page_size: int = 20,
    ) -> StudioListResponse:
        page = max(page, 1)
        # Fetch page_size+1 to detect has_next without COUNT(*)
        studios = await self._repo.list_studios(db, category, (page - 1) * page_size, page_size + 1)
        return StudioListResponse(
            items=[StudioOut.from_domain(s) for s in studios[:page_size]],
            page=page,
            page_size=page_size,
            has_next=len(studios) > page_size,
            has_prev=page > 1,
        )

    async def search_by_location(
        self,
        db: AsyncSession,
        center: Coordinates,
        radius_km: float,
        category: str | None = None,
        limit: int | None = None,
    ) -> StudioLocationSearchResponse:
        """Active studios within ``radius_km`` of ``center``, nearest first."""
        if not is_valid_coordinates(center):
            raise InvalidCoordinatesError()

        box = calculate_bounding_box(center, radius_km)
        candidates = await self._repo.list_in_bounds(db, box, category)

        matches: list[StudioMatch] = []
        for studio in candidates:
            if studio.latitude is None or studio.longitude is None:
                continue
            distance = calculate_distance(center, Coordinates(lat=studio.latitude, lng=studio.longitude))
            if distance <= radius_km:
                matches.append(StudioMatch(studio=studio, distance_km=distance))

        matches.sort(key=lambda m: m.distance_km)
        if limit is not None:
            matches = matches[:limit]

        return StudioLocationSearchResponse(
            items=[NearbyStudioOut.from_match(m) for m in matches],
            center=StudioGeoPointOut(latitude=center.lat, longitude=center.lng),
            radius_km=radius_km,
            total=len(matches),
        )

    async def search_studios(
        self,
        db: AsyncSession,
        term: str | None = None,
        filters: StudioSearchFilters | None = None,
        limit: int = 50,
    ) -> StudioSearchResponse:
        """Text search over active studios, then the facility, area, price and radius filters."""
        filters = filters or StudioSearchFilters()
        if filters.center is not None and not is_valid_coordinates(filters.center):
            raise InvalidCoordinatesError()

        term = term.strip() if term and term.strip() else None
        candidates = await self._repo.search(
            db, term, list(filters.categories) or None, _SEARCH_SCAN_LIMIT
        )
        studios = apply_filters(candidates, filters)
        return StudioSearchResponse(
            items=[StudioOut.from_domain(s) for s in studios[:limit]],
            total=len(studios),
            has_more=len(studios) > limit,
        )
