from __future__ import annotations

import uuid
from dataclasses import dataclass
from types import SimpleNamespace
from typing import Optional

import pytest

from core.events.errors import EventBusError, HandlerError, PayloadFieldMissing
from core.events.payloads import EventPayload, parse_payload
from core.events.results import HandlerContext

TENANT_ID = uuid.uuid5(uuid.NAMESPACE_URL, "erp-payload-tenant")


@dataclass(frozen=True)
class ShipmentPayload(EventPayload):
    carrier: str
    tracking_number: Optional[str] = None


PAYLOAD_TYPES = {"shipment.dispatched": ShipmentPayload}


def _context(payload: dict, event_type: str = "shipment.dispatched") -> HandlerContext:
    return HandlerContext(
        event_id=uuid.uuid4(),
        tenant_id=TENANT_ID,
        event_type=event_type,
        entity_id="SHP-1",
        payload=payload,
    )


def test_parse_payload_fills_known_fields_and_ignores_extras() -> None:
    parsed = parse_payload(
        _context({"carrier": "DHL", "tracking_number": "T-9", "extra": 1}),
        PAYLOAD_TYPES,
    )

    assert parsed == ShipmentPayload(carrier="DHL", tracking_number="T-9")


def test_optional_field_defaults_when_absent() -> None:
    parsed = parse_payload(_context({"carrier": "DHL"}), PAYLOAD_TYPES)

    assert parsed.tracking_number is None


@pytest.mark.parametrize("raw", [{}, {"carrier": None}, {"carrier": ""}])
def test_missing_required_field_raises_handler_error(raw: dict) -> None:
    with pytest.raises(PayloadFieldMissing) as exc_info:
        parse_payload(_context(raw), PAYLOAD_TYPES)

    assert isinstance(exc_info.value, HandlerError)
    assert exc_info.value.field_name == "carrier"
    assert "shipment.dispatched" in str(exc_info.value)


def test_unregistered_event_type_is_a_bus_error() -> None:
    with pytest.raises(EventBusError, match="No payload type registered"):
        parse_payload(_context({}, event_type="shipment.lost"), PAYLOAD_TYPES)


def _stored_event(payload):
    return SimpleNamespace(
        id=uuid.uuid4(),
        tenant_id=TENANT_ID,
        event_type="shipment.dispatched",
        entity_id="SHP-1",
        payload=payload,
    )


@pytest.mark.parametrize("raw", [[1, 2, 3], "carrier=DHL", 7])
def test_context_rejects_non_object_payload(raw) -> None:
    with pytest.raises(HandlerError, match="must be a JSON object"):
        HandlerContext.from_event(_stored_event(raw))


def test_context_treats_null_payload_as_empty() -> None:
    context = HandlerContext.from_event(_stored_event(None))

    assert context.payload == {}
