"""
ERP Django Adapter Views
========================
Pass-through HTTP views over core/http_api handlers.
"""

from __future__ import annotations

import json
from typing import Any

from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt

from adapters.django_api.wiring import build_dependencies
from core.http_api.contracts import HttpApiResult
from core.http_api.errors import INVALID_REQUEST, METHOD_NOT_ALLOWED, error_response
from core.http_api.handlers import (
    authenticate_http_request,
    list_module_event_logs,
    list_module_events,
    post_process_module_event,
)

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": (
        "authorization, x-client-info, apikey, content-type, x-internal-secret"
    ),
}


def _headers_from_request(request: HttpRequest) -> dict[str, str]:
    return {str(key): str(value) for key, value in request.headers.items()}


def _with_cors(response: HttpResponse) -> HttpResponse:
    for key, value in CORS_HEADERS.items():
        response[key] = value
    return response


def _json_result(result: HttpApiResult) -> JsonResponse:
    return _with_cors(JsonResponse(result.body, status=result.status))


def _json_error(code: str, message: str, status: int = 400) -> JsonResponse:
    return _with_cors(
        JsonResponse(
            error_response(code=code, message=message, details={}),
            status=status,
        )
    )


def _parse_json_body(request: HttpRequest) -> dict[str, Any]:
    if not request.body:
        return {}
    try:
        parsed = json.loads(request.body.decode("utf-8"))
    except Exception as exc:
        raise ValueError("Request body must be valid JSON.") from exc
    if not isinstance(parsed, dict):
        raise ValueError("Request body must be a JSON object.")
    return parsed


def _method_not_allowed() -> JsonResponse:
    return _json_error(
        METHOD_NOT_ALLOWED,
        "Method not allowed for this endpoint.",
        status=405,
    )


def _preflight() -> HttpResponse:
    return _with_cors(HttpResponse(status=200))


@csrf_exempt
def process_module_event_view(request: HttpRequest) -> HttpResponse:
    if request.method == "OPTIONS":
        return _preflight()
    if request.method != "POST":
        return _method_not_allowed()

    dependencies = build_dependencies()
    headers = _headers_from_request(request)
    try:
        body = _parse_json_body(request)
    except ValueError as exc:
        # Credentials are checked before a malformed body is reported.
        principal = authenticate_http_request(headers, dependencies)
        if isinstance(principal, HttpApiResult):
            return _json_result(principal)
        return _json_error(INVALID_REQUEST, str(exc), status=400)

    return _json_result(
        post_process_module_event(body, dependencies, headers=headers)
    )


@csrf_exempt
def module_events_list_view(request: HttpRequest) -> HttpResponse:
    if request.method == "OPTIONS":
        return _preflight()
    if request.method != "GET":
        return _method_not_allowed()
    return _json_result(
        list_module_events(
            request.GET.dict(),
            build_dependencies(),
            headers=_headers_from_request(request),
        )
    )


@csrf_exempt
def module_event_logs_view(request: HttpRequest, event_id: str) -> HttpResponse:
    if request.method == "OPTIONS":
        return _preflight()
    if request.method != "GET":
        return _method_not_allowed()
    return _json_result(
        list_module_event_logs(
            event_id,
            request.GET.dict(),
            build_dependencies(),
            headers=_headers_from_request(request),
        )
    )
