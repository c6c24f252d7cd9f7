"""sc_inquiry REST endpoints — all require JWT authentication.

POST /inquiries                              — open an inquiry on an item
GET  /inquiries/me                           — my inquiries as a buyer
GET  /inquiries/items/{item_id}              — inquiries on my item (seller)
GET  /inquiries/{inquiry_id}                 — detail
GET  /inquiries/{inquiry_id}/messages        — conversation, oldest first
POST /inquiries/{inquiry_id}/messages        — send a message
POST /inquiries/{inquiry_id}/read            — clear my unread counter
PUT  /inquiries/{inquiry_id}/status          — completed / cancelled / reported
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_common.database import get_db_session
from src.sc_common.enums import InquirySortOption, InquiryStatus
from src.sc_common.response import ApiResponse, success_response
from src.sc_gateway.auth.caller import Caller
from src.sc_gateway.auth.dependencies import get_current_caller
from src.sc_gateway.middleware.request_log import get_request_id
from src.sc_inquiry.application.schemas import (
    CreateInquiryRequest,
    SendMessageRequest,
    UpdateInquiryStatusRequest,
)
from src.sc_inquiry.application.service import InquiryApplicationService

router = APIRouter(prefix="/inquiries", tags=["inquiries"])

_service = InquiryApplicationService()


def _ok(request: Request, data: Any) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = get_request_id(request)
    return resp


@router.post("", status_code=201)
async def create_inquiry(
    body: CreateInquiryRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_inquiry(
        db, caller, body.item_id, body.message, body.message_type, body.proposed_price
    )
    return _ok(request, data.model_dump())


@router.get("/me")
async def list_my_inquiries(
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    status: InquiryStatus | None = Query(None),
    sort: InquirySortOption = Query(InquirySortOption.LATEST),
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_my_inquiries(
        db, caller, status.value if status else None, sort.value, page, page_size
    )
    return _ok(request, data.model_dump())


@router.get("/items/{item_id}")
async def list_item_inquiries(
    item_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    page: int = Query(1, ge=1),
    page_size: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_item_inquiries(db, caller, item_id, page, page_size)
    return _ok(request, data.model_dump())


@router.get("/{inquiry_id}")
async def get_inquiry(
    inquiry_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_inquiry(db, caller, inquiry_id)
    return _ok(request, data.model_dump())


@router.get("/{inquiry_id}/messages")
async def list_messages(
    inquiry_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    page: int = Query(1, ge=1),
    page_size: int = Query(50, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_messages(db, caller, inquiry_id, page, page_size)
    return _ok(request, data.model_dump())


@router.post("/{inquiry_id}/messages", status_code=201)
async def send_message(
    inquiry_id: str,
    body: SendMessageRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.send_message(
        db,
        caller,
        inquiry_id,
        body.content,
        body.message_type,
        body.image_url,
        body.proposed_price,
    )
    return _ok(request, data.model_dump())


@router.post("/{inquiry_id}/read")
async def mark_read(
    inquiry_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.mark_read(db, caller, inquiry_id)
    return _ok(request, data.model_dump())


@router.put("/{inquiry_id}/status")
async def update_status(
    inquiry_id: str,
    body: UpdateInquiryStatusRequest,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_status(db, caller, inquiry_id, body.status, body.reason)
    return _ok(request, data.model_dump())
