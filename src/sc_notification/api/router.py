"""sc_notification REST endpoints. Every route acts on the caller's own inbox.

GET    /notifications                        — newest first (cursor), optional unread_only
GET    /notifications/counts                 — total and unread
POST   /notifications/read-all
POST   /notifications/{notification_id}/read
DELETE /notifications/{notification_id}      — soft delete
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_common.database import get_db_session
from src.sc_common.response import ApiResponse, success_response
from src.sc_gateway.auth.caller import Caller
from src.sc_gateway.auth.dependencies import get_current_caller
from src.sc_gateway.middleware.request_log import get_request_id
from src.sc_notification.application.service import NotificationApplicationService

router = APIRouter(prefix="/notifications", tags=["notification"])

_service = NotificationApplicationService()


def _ok(request: Request, data: Any) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = get_request_id(request)
    return resp


@router.get("")
async def list_notifications(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    unread_only: bool = Query(False),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_notifications(db, caller, unread_only, cursor, limit)
    return _ok(request, data.model_dump())


@router.get("/counts")
async def get_counts(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_counts(db, caller)
    return _ok(request, data.model_dump())


@router.post("/read-all")
async def mark_all_read(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.mark_all_read(db, caller)
    return _ok(request, data.model_dump())


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.mark_read(db, caller, notification_id)
    return _ok(request, data.model_dump())


@router.delete("/{notification_id}")
async def delete_notification(
    notification_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_notification(db, caller, notification_id)
    return _ok(request, data.model_dump())
