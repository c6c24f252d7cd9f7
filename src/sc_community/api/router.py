"""sc_community REST endpoints.

GET    /posts                                   — list active posts (cursor)
GET    /posts/counts                            — active posts per category
POST   /posts                                   — create (JWT)
GET    /posts/{post_id}                         — detail (counts a view)
PATCH  /posts/{post_id}                         — author or admin
DELETE /posts/{post_id}                         — author or admin, soft delete
GET    /posts/{post_id}/comments                — threads, oldest first
POST   /posts/{post_id}/comments                — comment or reply (JWT)
PATCH  /posts/{post_id}/comments/{comment_id}   — edit, author or admin
DELETE /posts/{post_id}/comments/{comment_id}   — author or admin
POST   /posts/{post_id}/comments/{comment_id}/like
DELETE /posts/{post_id}/comments/{comment_id}/like
"""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.sc_common.database import get_db_session
from src.sc_common.enums import PostCategory
from src.sc_common.response import ApiResponse, success_response
from src.sc_community.application.service import CommunityApplicationService
from src.sc_gateway.auth.caller import Caller
from src.sc_gateway.auth.dependencies import get_current_caller
from src.sc_gateway.middleware.request_log import get_request_id

router = APIRouter(prefix="/posts", tags=["community"])

_service = CommunityApplicationService()


def _ok(request: Request, data: Any) -> ApiResponse:
    resp = success_response(data)
    resp.request_id = get_request_id(request)
    return resp


@router.get("")
async def list_posts(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    category: PostCategory | None = Query(None),
    author_id: str | None = Query(None),
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100),
) -> ApiResponse:
    data = await _service.list_posts(
        db, category.value if category else None, author_id, cursor, limit
    )
    return _ok(request, data.model_dump())


@router.get("/counts")
async def post_counts(
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.post_counts(db)
    return _ok(request, data.model_dump())


@router.post("", status_code=201)
async def create_post(
    payload: Annotated[Any, Body()],
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_post(db, caller, payload)
    return _ok(request, data.model_dump())


@router.get("/{post_id}")
async def get_post(
    post_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_post(db, post_id, increment_views=True)
    return _ok(request, data.model_dump())


@router.patch("/{post_id}")
async def update_post(
    post_id: str,
    payload: Annotated[Any, Body()],
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_post(db, caller, post_id, payload)
    return _ok(request, data.model_dump())


@router.delete("/{post_id}")
async def delete_post(
    post_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_post(db, caller, post_id)
    return _ok(request, data.model_dump())


@router.get("/{post_id}/comments")
async def list_comments(
    post_id: str,
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_comments(db, post_id)
    return _ok(request, data.model_dump())


@router.post("/{post_id}/comments", status_code=201)
async def create_comment(
    post_id: str,
    payload: Annotated[Any, Body()],
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.create_comment(db, caller, post_id, payload)
    return _ok(request, data.model_dump())


@router.delete("/{post_id}/comments/{comment_id}")
async def delete_comment(
    post_id: str,
    comment_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.delete_comment(db, caller, post_id, comment_id)
    return _ok(request, data.model_dump())


@router.patch("/{post_id}/comments/{comment_id}")
async def update_comment(
    post_id: str,
    comment_id: str,
    payload: Annotated[Any, Body()],
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_comment(db, caller, post_id, comment_id, payload)
    return _ok(request, data.model_dump())


@router.post("/{post_id}/comments/{comment_id}/like")
async def like_comment(
    post_id: str,
    comment_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.like_comment(db, caller, post_id, comment_id)
    return _ok(request, data.model_dump())


@router.delete("/{post_id}/comments/{comment_id}/like")
async def unlike_comment(
    post_id: str,
    comment_id: str,
    caller: Annotated[Caller, Depends(get_current_caller)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.unlike_comment(db, caller, post_id, comment_id)
    return _ok(request, data.model_dump())
