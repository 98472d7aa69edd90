"""
ERP Module Bus — Handler Contracts
====================================
Input and output shapes shared by the router and every concrete handler.

Result kinds are explicit so a reader of the delivery log can tell
a real side effect from an acknowledged-but-unimplemented pair:

    APPLIED        handler performed its side effect
    SKIPPED        handler ran, nothing applicable (not an error)
    PLACEHOLDER    (module, type) pair is known but has no effect yet
    NOOP           router has no entry for (module, type)
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping

from core.events.errors import HandlerError


class ResultKind(Enum):
    APPLIED = "applied"
    SKIPPED = "skipped"
    PLACEHOLDER = "placeholder"
    NOOP = "noop"


@dataclass(frozen=True)
class HandlerContext:
    """
    Everything a handler may read.

    tenant_id is an opaque partition key; handlers pass it to every
    collaborator call and never look outside it.
    """

    event_id: uuid.UUID
    tenant_id: uuid.UUID
    event_type: str
    entity_id: str
    payload: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not isinstance(self.event_id, uuid.UUID):
            raise ValueError("event_id must be UUID.")
        if not isinstance(self.tenant_id, uuid.UUID):
            raise ValueError("tenant_id must be UUID.")
        if not self.event_type or not isinstance(self.event_type, str):
            raise ValueError("event_type must be a non-empty string.")
        if self.payload is None:
            object.__setattr__(self, "payload", {})

    @classmethod
    def from_event(cls, event) -> "HandlerContext":
        """
        Raises:
            HandlerError: stored payload is not a JSON object
        """
        payload = event.payload if event.payload is not None else {}
        if not isinstance(payload, Mapping):
            raise HandlerError(
                f"Payload for '{event.event_type}' must be a JSON object, "
                f"got {type(payload).__name__}."
            )
        return cls(
            event_id=event.id,
            tenant_id=event.tenant_id,
            event_type=event.event_type,
            entity_id=str(event.entity_id),
            payload=dict(payload),
        )


@dataclass(frozen=True)
class HandlerResult:
    kind: ResultKind
    action: str
    message: str | None = None
    data: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def applied(cls, action: str, message: str | None = None, **data) -> "HandlerResult":
        return cls(kind=ResultKind.APPLIED, action=action, message=message, data=data)

    @classmethod
    def skipped(cls, message: str) -> "HandlerResult":
        return cls(kind=ResultKind.SKIPPED, action="skip", message=message)

    @classmethod
    def placeholder(cls, action: str, message: str, entity_id: str) -> "HandlerResult":
        return cls(
            kind=ResultKind.PLACEHOLDER,
            action=action,
            message=message,
            data={"entity_id": entity_id},
        )

    @classmethod
    def noop(cls, event_type: str, handler_module: str) -> "HandlerResult":
        return cls(
            kind=ResultKind.NOOP,
            action="noop",
            message=f"No handler implemented for {event_type} -> {handler_module}",
        )

    @property
    def has_effect(self) -> bool:
        return self.kind is ResultKind.APPLIED

    def to_dict(self) -> dict[str, Any]:
        """Serialize for the delivery log response column."""
        value: dict[str, Any] = dict(self.data)
        value["action"] = self.action
        value["kind"] = self.kind.value
        if self.message is not None:
            value["message"] = self.message
        return value
