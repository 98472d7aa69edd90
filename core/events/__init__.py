"""
ERP Module Bus — Public API
=============================
A business transaction commits first; its side effects in other
modules are delivered afterwards, at least once, by the dispatcher.

Only the ORM-free pieces are exported here. Import the dispatcher
and sweep from their modules (they need Django apps loaded).
"""

from core.events.errors import (
    CollaboratorError,
    DuplicateHandlerError,
    EventBusError,
    EventNotFoundError,
    HandlerError,
    InvalidTopicPattern,
    PayloadFieldMissing,
)
from core.events.matcher import candidate_patterns, matches, wildcard_for
from core.events.results import HandlerContext, HandlerResult, ResultKind
from core.events.router import HandlerRouter

__all__ = [
    "matches",
    "wildcard_for",
    "candidate_patterns",
    "HandlerContext",
    "HandlerResult",
    "ResultKind",
    "HandlerRouter",
    "EventBusError",
    "EventNotFoundError",
    "HandlerError",
    "PayloadFieldMissing",
    "CollaboratorError",
    "DuplicateHandlerError",
    "InvalidTopicPattern",
]
