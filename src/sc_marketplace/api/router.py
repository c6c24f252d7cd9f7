"""sc_marketplace REST endpoints.

POST   /marketplace/items                  — create (JWT)
GET    /marketplace/items                  — list with cursor pagination
GET    /marketplace/items/nearby           — radius search around a point
GET    /marketplace/items/{item_id}        — detail (counts a view)
PATCH  /marketplace/items/{item_id}        — partial update, seller or admin
PUT    /marketplace/items/{item_id}/status — available / reserved / sold / hidden
DELETE /marketplace/items/{item_id}        — hide (items are never removed)
POST   /marketplace/items/{item_id}/favorite
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_common.database import get_db_session
from src.sc_common.enums import ItemSortOption
from src.sc_common.response import ApiResponse, success_response
from src.sc_gateway.auth.caller import Caller
from src.sc_gateway.auth.dependencies import get_current_caller, get_optional_caller
from src.sc_gateway.middleware.request_log import get_request_id
from src.sc_geo.domain.models import Coordinates
from src.sc_marketplace.application.schemas import FavoriteRequest, ItemStatusRequest
from src.sc_marketplace.application.service import MarketplaceApplicationService

router = APIRouter(prefix="/marketplace/items", tags=["marketplace"])

_service = MarketplaceApplicationService()


def _ok(request: Request, data: Any) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = get_request_id(request)
    return resp


@router.post("", status_code=201)
async def create_item(
    payload: Annotated[Any, Body()],
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_item(db, caller, payload)
    return _ok(request, data.model_dump())


@router.get("")
async def list_items(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    caller: Annotated[Caller | None, Depends(get_optional_caller)],
    category: str | None = Query(None),
    status: str | None = Query(None),
    region: str | None = Query(None),
    seller_id: str | None = Query(None),
    q: str | None = Query(None, max_length=100, description="Title/description/keyword search"),
    sort: ItemSortOption = Query(ItemSortOption.LATEST),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_items(
        db,
        category=category,
        status=status,
        region=region,
        seller_id=seller_id,
        query=q,
        cursor=cursor,
        limit=limit,
        sort=sort.value,
        caller=caller,
    )
    return _ok(request, data.model_dump())


@router.get("/nearby")
async def search_nearby(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    lat: float = Query(...),
    lng: float = Query(...),
    radius_km: float = Query(5.0, gt=0, le=50),
    category: str | None = Query(None),
    min_price: int | None = Query(None, ge=0),
    max_price: int | None = Query(None, ge=0),
    limit: int | None = Query(None, ge=1, le=100),
) -> ApiResponse:
    data = await _service.search_by_location(
        db,
        Coordinates(lat=lat, lng=lng),
        radius_km,
        category=category,
        min_price=min_price,
        max_price=max_price,
        limit=limit,
    )
    return _ok(request, data.model_dump())


@router.get("/{item_id}")
async def get_item(
    item_id: str,
    caller: Annotated[Caller, Depends(get_optional_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_item(db, item_id, caller=caller, increment_views=True)
    return _ok(request, data.model_dump())


@router.patch("/{item_id}")
async def update_item(
    item_id: str,
    patch: Annotated[dict[str, Any], Body()],
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_item(db, caller, item_id, patch)
    return _ok(request, data.model_dump())


@router.put("/{item_id}/status")
async def change_status(
    item_id: str,
    body: ItemStatusRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.change_item_status(db, caller, item_id, body.status)
    return _ok(request, data.model_dump())


@router.delete("/{item_id}")
async def hide_item(
    item_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.hide_item(db, caller, item_id)
    return _ok(request, data.model_dump())


@router.post("/{item_id}/favorite")
async def toggle_favorite(
    item_id: str,
    body: FavoriteRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.toggle_favorite(db, item_id, body.increment)
    return _ok(request, data.model_dump())
