"""Dry-run validation endpoints.

POST /validation/items    — report every rule a marketplace item payload breaks
POST /validation/studios  — same for a studio payload

Both always answer 200; ``data.valid`` says whether a real write would pass.
"""

from dataclasses import asdict
from typing import Annotated, Any

from fastapi import APIRouter, Body, Request

from src.sc_common.response import ApiResponse, success_response
from src.sc_gateway.middleware.request_log import get_request_id
from src.sc_validation.validators import is_valid_item_data, is_valid_studio_data

router = APIRouter(prefix="/validation", tags=["validation"])


@router.post("/items")
async def validate_item(
    request: Request,
    payload: Annotated[Any, Body()],
) -> ApiResponse:
    resp = success_response(asdict(is_valid_item_data(payload)))
    resp.request_id = get_request_id(request)
    return resp


@router.post("/studios")
async def validate_studio(
    request: Request,
    payload: Annotated[Any, Body()],
) -> ApiResponse:
    resp = success_response(asdict(is_valid_studio_data(payload)))
    resp.request_id = get_request_id(request)
    return resp
