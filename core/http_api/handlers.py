"""
ERP HTTP API - Framework-Agnostic Handlers
==========================================
Pure handler functions over contracts and injected dependencies.

Every handler authenticates first and returns an HttpApiResult.
Handler failures inside a dispatch are data (200 with per-subscription
outcomes); only failures outside the handler boundary become 500.
"""

from __future__ import annotations

import logging
from typing import Any

from core.events.errors import EventNotFoundError
from core.http_api.auth.provider import AuthPrincipal
from core.http_api.auth.resolver import AuthFailure, authenticate_request
from core.http_api.contracts import (
    EventListRequest,
    EventLogsRequest,
    HttpApiResult,
    ProcessEventRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import (
    EVENT_NOT_FOUND,
    FORBIDDEN,
    INTERNAL_ERROR,
    INVALID_REQUEST,
    UNAUTHORIZED,
    error_result,
    success_result,
)
from core.module_events import repository

logger = logging.getLogger("erp.http_api")


def authenticate_http_request(
    headers: dict[str, Any] | None,
    dependencies: HttpApiDependencies,
) -> AuthPrincipal | HttpApiResult:
    outcome = authenticate_request(
        headers,
        dependencies.identity_provider,
        internal_secret=dependencies.settings.internal_service_secret,
    )
    if isinstance(outcome, AuthFailure):
        return error_result(401, code=UNAUTHORIZED, message=outcome.message)
    return outcome


def _forbidden(tenant_id) -> HttpApiResult:
    return error_result(
        403,
        code=FORBIDDEN,
        message="Principal has no access to this tenant.",
        details={"tenant_id": str(tenant_id)},
    )


def _event_not_found(event_id) -> HttpApiResult:
    return error_result(
        404,
        code=EVENT_NOT_FOUND,
        message="Event not found",
        details={"event_id": str(event_id)},
    )


# ══════════════════════════════════════════════════════════════
# PROCESS
# ══════════════════════════════════════════════════════════════

def post_process_module_event(
    body: dict[str, Any] | None,
    dependencies: HttpApiDependencies,
    headers: dict[str, Any] | None = None,
) -> HttpApiResult:
    principal = authenticate_http_request(headers, dependencies)
    if isinstance(principal, HttpApiResult):
        return principal

    try:
        request = ProcessEventRequest.from_body(body or {})
    except ValueError as exc:
        return error_result(400, code=INVALID_REQUEST, message=str(exc))

    # Another tenant's event answers exactly like a missing one.
    event = repository.load_event(request.event_id)
    if event is None or not principal.can_access_tenant(event.tenant_id):
        return _event_not_found(request.event_id)

    try:
        report = dependencies.dispatcher.dispatch(request.event_id)
    except EventNotFoundError:
        return _event_not_found(request.event_id)
    except Exception as exc:
        logger.exception(
            f"Module event processing error (event_id: {request.event_id})"
        )
        return error_result(
            500,
            code=INTERNAL_ERROR,
            message=str(exc) or type(exc).__name__,
            details={"event_id": str(request.event_id)},
        )

    logger.info(
        f"Processed event {request.event_id} for {principal.actor_id}: "
        f"{report.status}"
    )
    return success_result(report.to_dict())


# ══════════════════════════════════════════════════════════════
# MONITORING READS
# ══════════════════════════════════════════════════════════════

def list_module_events(
    query: dict[str, Any] | None,
    dependencies: HttpApiDependencies,
    headers: dict[str, Any] | None = None,
) -> HttpApiResult:
    principal = authenticate_http_request(headers, dependencies)
    if isinstance(principal, HttpApiResult):
        return principal

    try:
        request = EventListRequest.from_query(query or {})
    except ValueError as exc:
        return error_result(400, code=INVALID_REQUEST, message=str(exc))

    if not principal.can_access_tenant(request.tenant_id):
        return _forbidden(request.tenant_id)

    events = repository.list_events(
        request.tenant_id,
        status=request.status,
        source_module=request.source_module,
        search=request.search,
        limit=request.limit,
    )
    return success_result(
        {
            "tenant_id": str(request.tenant_id),
            "count": len(events),
            "counts": repository.status_counts(request.tenant_id),
            "items": [repository.serialize_event(event) for event in events],
        }
    )


def list_module_event_logs(
    event_id: Any,
    query: dict[str, Any] | None,
    dependencies: HttpApiDependencies,
    headers: dict[str, Any] | None = None,
) -> HttpApiResult:
    principal = authenticate_http_request(headers, dependencies)
    if isinstance(principal, HttpApiResult):
        return principal

    try:
        request = EventLogsRequest.from_query(event_id, query or {})
    except ValueError as exc:
        return error_result(400, code=INVALID_REQUEST, message=str(exc))

    if not principal.can_access_tenant(request.tenant_id):
        return _forbidden(request.tenant_id)

    event = repository.load_event(request.event_id)
    if event is None or event.tenant_id != request.tenant_id:
        return _event_not_found(request.event_id)

    entries = repository.list_delivery_logs(request.tenant_id, request.event_id)
    return success_result(
        {
            "event": repository.serialize_event(event),
            "count": len(entries),
            "items": repository.serialize_delivery_logs(entries),
        }
    )
