"""
ERP HTTP API - Public API
=========================
"""

from core.http_api.contracts import (
    EventListRequest,
    EventLogsRequest,
    HttpApiErrorBody,
    HttpApiResult,
    ProcessEventRequest,
)
from core.http_api.dependencies import HttpApiDependencies
from core.http_api.errors import error_response, error_result, success_result
from core.http_api.handlers import (
    authenticate_http_request,
    list_module_event_logs,
    list_module_events,
    post_process_module_event,
)

__all__ = [
    "EventListRequest",
    "EventLogsRequest",
    "HttpApiErrorBody",
    "HttpApiResult",
    "ProcessEventRequest",
    "HttpApiDependencies",
    "error_response",
    "error_result",
    "success_result",
    "authenticate_http_request",
    "list_module_event_logs",
    "list_module_events",
    "post_process_module_event",
]
