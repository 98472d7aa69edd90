"""
ERP Module Bus — Typed Payloads
=================================
The stored payload is opaque JSON. Each engine declares one frozen
dataclass per event type it handles; parse_payload() turns the raw
mapping into that type before the handler body runs.

A field without a default is required. Missing, null or empty-string
values for a required field raise PayloadFieldMissing (a HandlerError),
so a malformed event fails its delivery instead of half-running.
"""

from __future__ import annotations

from dataclasses import MISSING, dataclass, fields
from typing import Any, Mapping, Type, TypeVar

from core.events.errors import EventBusError, PayloadFieldMissing
from core.events.results import HandlerContext

P = TypeVar("P", bound="EventPayload")


@dataclass(frozen=True)
class EventPayload:
    """Base class for typed event payloads."""

    @classmethod
    def from_mapping(cls: Type[P], event_type: str, raw: Mapping[str, Any]) -> P:
        values: dict[str, Any] = {}
        for f in fields(cls):
            value = raw.get(f.name) if raw else None
            if value is None or value == "":
                if f.default is MISSING and f.default_factory is MISSING:
                    raise PayloadFieldMissing(event_type, f.name)
                continue
            values[f.name] = value
        return cls(**values)


def parse_payload(
    context: HandlerContext,
    payload_types: Mapping[str, Type[P]],
) -> P:
    """Parse context.payload into the type registered for its event type."""
    payload_type = payload_types.get(context.event_type)
    if payload_type is None:
        raise EventBusError(
            f"No payload type registered for '{context.event_type}'."
        )
    return payload_type.from_mapping(context.event_type, context.payload)
