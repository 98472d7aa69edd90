"""
ERP HTTP API - Error Mapping
============================
Stable transport error bodies.
"""

from __future__ import annotations

from typing import Any, Optional

from core.http_api.contracts import HttpApiErrorBody, HttpApiResult

INVALID_REQUEST = "INVALID_REQUEST"
UNAUTHORIZED = "UNAUTHORIZED"
FORBIDDEN = "FORBIDDEN"
EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
INTERNAL_ERROR = "INTERNAL_ERROR"


def error_response(
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> dict[str, Any]:
    return {
        "ok": False,
        "error": HttpApiErrorBody(
            code=code,
            message=message,
            details=details or {},
        ).to_dict(),
    }


def error_result(
    status: int,
    *,
    code: str,
    message: str,
    details: Optional[dict[str, Any]] = None,
) -> HttpApiResult:
    return HttpApiResult(
        status=status,
        body=error_response(code=code, message=message, details=details),
    )


def success_result(data: dict[str, Any]) -> HttpApiResult:
    body = {"ok": True}
    body.update(data)
    return HttpApiResult(status=200, body=body)
