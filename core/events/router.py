"""
ERP Module Bus — Handler Router
=================================
Dispatch table from (handler_module, event_type) to a handler callable.

Rules:
- Built once at startup, inspectable afterwards
- One handler per (module, event_type); duplicates are refused
- A lookup miss is NOT an error: it resolves to a NOOP result
- Placeholder pairs are registered explicitly and return a
  PLACEHOLDER result, never a side effect
- Thread-safe

Handler contract:
    handler(context: HandlerContext) -> HandlerResult
    raise HandlerError (or any exception) on failure.

Retry is whole-event: a handler that succeeded on a previous pass
WILL be invoked again when a sibling fails. Every handler must be
idempotent: key side effects on a stable reference derived from
the event, never re-apply blind deltas.
"""

import logging
from threading import Lock
from typing import Callable

from core.events.errors import DuplicateHandlerError, EventBusError
from core.events.results import HandlerContext, HandlerResult

logger = logging.getLogger("erp.events")

Handler = Callable[[HandlerContext], HandlerResult]


class HandlerRouter:
    """
    In-memory (module, event_type) → handler table.
    """

    def __init__(self):
        self._handlers: dict[tuple[str, str], Handler] = {}
        self._placeholders: set[tuple[str, str]] = set()
        self._lock = Lock()

    def register(self, handler_module: str, event_type: str, handler: Handler) -> None:
        """
        Register the handler for one (module, event_type) pair.

        Raises:
            EventBusError:         handler not callable / blank keys
            DuplicateHandlerError: pair already registered
        """
        if not handler_module or not event_type:
            raise EventBusError("handler_module and event_type are required.")
        if not callable(handler):
            raise EventBusError(
                f"Handler must be callable, got {type(handler)}."
            )

        key = (handler_module, event_type)
        with self._lock:
            if key in self._handlers:
                raise DuplicateHandlerError(handler_module, event_type)
            self._handlers[key] = handler

        handler_name = getattr(handler, "__qualname__", str(handler))
        logger.debug(f"Handler registered: {handler_module}/{event_type} → {handler_name}")

    def register_placeholder(
        self,
        handler_module: str,
        event_type: str,
        *,
        action: str,
        message: str,
    ) -> None:
        """Acknowledge a pair that has no real effect yet."""

        def _placeholder(context: HandlerContext) -> HandlerResult:
            return HandlerResult.placeholder(action, message, context.entity_id)

        _placeholder.__qualname__ = f"placeholder[{handler_module}/{event_type}]"
        self.register(handler_module, event_type, _placeholder)
        with self._lock:
            self._placeholders.add((handler_module, event_type))

    def resolve(self, handler_module: str, event_type: str) -> Handler | None:
        with self._lock:
            return self._handlers.get((handler_module, event_type))

    def route(self, handler_module: str, context: HandlerContext) -> HandlerResult:
        """
        Invoke the handler for (handler_module, context.event_type).

        Exceptions raised by the handler propagate to the caller
        (the dispatcher isolates them per subscription).
        """
        handler = self.resolve(handler_module, context.event_type)
        if handler is None:
            return HandlerResult.noop(context.event_type, handler_module)

        result = handler(context)
        if not isinstance(result, HandlerResult):
            raise EventBusError(
                f"Handler for {handler_module}/{context.event_type} "
                f"returned {type(result).__name__}, expected HandlerResult."
            )
        return result

    def is_placeholder(self, handler_module: str, event_type: str) -> bool:
        with self._lock:
            return (handler_module, event_type) in self._placeholders

    def routes(self) -> frozenset[tuple[str, str]]:
        """All registered (module, event_type) pairs."""
        with self._lock:
            return frozenset(self._handlers.keys())

    def routes_for_module(self, handler_module: str) -> frozenset[str]:
        with self._lock:
            return frozenset(
                event_type
                for module, event_type in self._handlers
                if module == handler_module
            )
