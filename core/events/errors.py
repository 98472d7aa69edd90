"""
ERP Module Bus — Errors
=========================
Error types for the module event bus.

Handler-level errors are recovered by the dispatcher and become data
(delivery log rows + retry bookkeeping). Everything else propagates.
"""


class EventBusError(Exception):
    """Base error for module event bus operations."""
    pass


class EventNotFoundError(EventBusError):
    """Event id does not resolve to a stored module event."""

    def __init__(self, event_id):
        self.event_id = str(event_id)
        super().__init__(f"Module event '{self.event_id}' not found.")


class InvalidTopicPattern(EventBusError):
    """Subscription pattern is neither an exact topic nor '<namespace>.*'."""

    def __init__(self, pattern: str):
        self.pattern = pattern
        super().__init__(
            f"Topic pattern '{pattern}' must be an exact dotted topic "
            f"or '<namespace>.*'."
        )


class DuplicateHandlerError(EventBusError):
    """Same (handler_module, event_type) registered twice."""

    def __init__(self, handler_module: str, event_type: str):
        self.handler_module = handler_module
        self.event_type = event_type
        super().__init__(
            f"Handler already registered for '{event_type}' "
            f"in module '{handler_module}'."
        )


class HandlerError(EventBusError):
    """
    A single handler invocation failed.

    Caught at the per-subscription boundary, never aborts siblings.
    """
    pass


class PayloadFieldMissing(HandlerError):
    """Typed payload is missing a field its event type requires."""

    def __init__(self, event_type: str, field_name: str):
        self.event_type = event_type
        self.field_name = field_name
        super().__init__(
            f"Payload for '{event_type}' is missing required field "
            f"'{field_name}'."
        )


class CollaboratorError(EventBusError):
    """A domain collaborator (stock ledger, notifications) reported failure."""
    pass
