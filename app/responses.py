"""Response envelopes shared by every router."""

from __future__ import annotations

from typing import Any

from fastapi.responses import JSONResponse

from problems.errors import ErrorKind


def success(data: Any, message: str | None = None, meta: dict[str, Any] | None = None) -> dict[str, Any]:
    body: dict[str, Any] = {"success": True, "data": data}
    if message:
        body["message"] = message
    if meta:
        body["meta"] = meta
    return body


def error(kind: ErrorKind, message: str, status_code: int | None = None) -> JSONResponse:
    status_code = status_code or kind.status_code
    return JSONResponse(
        status_code=status_code,
        content={
            "success": False,
            "error": {"code": kind.value, "message": message, "statusCode": status_code},
        },
    )
