"""Unified API response wrapper.

All API endpoints return this format:
{
    "success": true,     // false on any AppError
    "code": 0,           // 0=success, non-0=error code
    "message": "success",// localized error message on failure
    "data": { ... },     // null on error unless the error carries details
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from typing import Any

from pydantic import BaseModel, Field

from src.sc_common.datetime_utils import utc_now


class ApiResponse(BaseModel):
    success: bool = True
    code: int = 0
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: utc_now().isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(data: Any = None) -> ApiResponse:
    return ApiResponse(data=data)


def error_response(code: int, message: str, data: Any = None) -> ApiResponse:
    return ApiResponse(success=False, code=code, message=message, data=data)
