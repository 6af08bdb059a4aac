"""Unified API response wrapper.

All API endpoints return this format:
{
    "success": true,       // false when the HTTP status is >= 400
    "message": "Order created successfully",
    "data": { ... },       // null when there is nothing to return
    "timestamp": "...",
    "request_id": "..."
}
"""

import uuid
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, Field
from starlette.responses import JSONResponse


class ApiResponse(BaseModel):
    success: bool = True
    message: str = "success"
    data: Any = None
    timestamp: str = Field(default_factory=lambda: datetime.now(timezone.utc).isoformat())
    request_id: str = Field(default_factory=lambda: f"req_{uuid.uuid4().hex[:12]}")


def success_response(message: str, data: Any = None) -> ApiResponse:
    return ApiResponse(success=True, message=message, data=data)


def error_response(message: str, data: Any = None) -> ApiResponse:
    return ApiResponse(success=False, message=message, data=data)


def json_envelope(
    status_code: int,
    message: str,
    data: Any = None,
    request_id: str | None = None,
) -> JSONResponse:
    """Render the envelope as a JSONResponse; ``success`` follows the status code."""
    resp = success_response(message, data) if status_code < 400 else error_response(message, data)
    if request_id:
        resp.request_id = request_id
    return JSONResponse(status_code=status_code, content=resp.model_dump(mode="json"))
