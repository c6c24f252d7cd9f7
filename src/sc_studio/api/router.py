"""sc_studio REST endpoints.

GET    /studios                       — active studios, newest update first (page)
GET    /studios/search                — text search plus facility/area/price/radius filters
GET    /studios/nearby                — radius search around a point
GET    /studios/{studio_id}           — detail (counts a view)
POST   /studios                       — register (JWT)
PATCH  /studios/{studio_id}           — partial update, owner or admin
DELETE /studios/{studio_id}           — owner or admin
POST   /studios/{studio_id}/favorite
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_common.database import get_db_session
from src.sc_common.enums import StudioCategory, StudioPriceType
from src.sc_common.response import ApiResponse, success_response
from src.sc_gateway.auth.caller import Caller
from src.sc_gateway.auth.dependencies import get_current_caller
from src.sc_gateway.middleware.request_log import get_request_id
from src.sc_geo.domain.models import Coordinates
from src.sc_studio.application.schemas import StudioFavoriteRequest
from src.sc_studio.application.service import StudioApplicationService
from src.sc_studio.domain.filters import StudioSearchFilters

router = APIRouter(prefix="/studios", tags=["studio"])

_service = StudioApplicationService()


def _ok(request: Request, data: Any) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = get_request_id(request)
    return resp


@router.get("")
async def list_studios(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    category: StudioCategory | None = Query(None),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_studios(
        db, category.value if category else None, page=page, page_size=page_size
    )
    return _ok(request, data.model_dump())


@router.get("/search")
async def search_studios(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    q: str | None = Query(None, max_length=100),
    category: list[StudioCategory] = Query(default=[]),
    region: list[str] = Query(default=[]),
    has_parking: bool = Query(False),
    has_sound_system: bool = Query(False),
    has_air_conditioning: bool = Query(False),
    min_area: float | None = Query(None, gt=0),
    max_area: float | None = Query(None, gt=0),
    price_type: StudioPriceType | None = Query(None),
    min_price: float | None = Query(None, ge=0),
    max_price: float | None = Query(None, ge=0),
    lat: float | None = Query(None),
    lng: float | None = Query(None),
    radius_km: float | None = Query(None, gt=0, le=50),
    limit: int = Query(50, ge=1, le=100),
) -> ApiResponse:
    center = Coordinates(lat=lat, lng=lng) if lat is not None and lng is not None else None
    filters = StudioSearchFilters(
        categories=tuple(c.value for c in category),
        regions=tuple(region),
        has_parking=has_parking,
        has_sound_system=has_sound_system,
        has_air_conditioning=has_air_conditioning,
        min_area=min_area,
        max_area=max_area,
        price_type=price_type,
        min_price=min_price,
        max_price=max_price,
        center=center,
        radius_km=radius_km,
    )
    data = await _service.search_studios(db, q, filters, limit=limit)
    return _ok(request, data.model_dump())


@router.get("/nearby")
async def search_nearby(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    lat: float = Query(...),
    lng: float = Query(...),
    radius_km: float = Query(5.0, gt=0, le=50),
    category: StudioCategory | None = Query(None),
    limit: int | None = Query(None, ge=1, le=100),
) -> ApiResponse:
    data = await _service.search_by_location(
        db,
        Coordinates(lat=lat, lng=lng),
        radius_km,
        category=category.value if category else None,
        limit=limit,
    )
    return _ok(request, data.model_dump())


@router.get("/{studio_id}")
async def get_studio(
    studio_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_studio(db, studio_id, increment_views=True)
    return _ok(request, data.model_dump())


@router.post("", status_code=201)
async def create_studio(
    payload: Annotated[Any, Body()],
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_studio(db, caller, payload)
    return _ok(request, data.model_dump())


@router.patch("/{studio_id}")
async def update_studio(
    studio_id: str,
    patch: Annotated[dict[str, Any], Body()],
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_studio(db, caller, studio_id, patch)
    return _ok(request, data.model_dump())


@router.delete("/{studio_id}")
async def delete_studio(
    studio_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_studio(db, caller, studio_id)
    return _ok(request, data.model_dump())


@router.post("/{studio_id}/favorite")
async def toggle_favorite(
    studio_id: str,
    body: StudioFavoriteRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.toggle_favorite(db, studio_id, body.increment)
    return _ok(request, data.model_dump())
