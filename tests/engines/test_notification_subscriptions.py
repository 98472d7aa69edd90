from __future__ import annotations

import json
import uuid

import httpx
import pytest

from core.events.config import BusSettings
from core.events.errors import CollaboratorError, HandlerError
from core.events.results import HandlerContext, ResultKind
from core.events.router import HandlerRouter
from engines.notifications.client import (
    ALL_TENANT_MEMBERS,
    HttpNotificationClient,
    NotificationRequest,
)
from engines.notifications.events import (
    APPROVAL_COMPLETED,
    INVENTORY_LOW_STOCK,
    INVOICE_OVERDUE,
    LOAN_PAYMENT_DUE,
)
from engines.notifications.subscriptions import (
    NOTIFICATIONS_MODULE,
    NotificationSubscriptionHandler,
    register_notification_handlers,
)

TENANT_ID = uuid.uuid5(uuid.NAMESPACE_URL, "erp-notifications-tenant")


def _context(event_type: str, entity_id: str = "E-1", payload=None) -> HandlerContext:
    return HandlerContext(
        event_id=uuid.uuid4(),
        tenant_id=TENANT_ID,
        event_type=event_type,
        entity_id=entity_id,
        payload=payload or {},
    )


class RecordingSender:
    def __init__(self, *, error: str | None = None):
        self.requests: list[NotificationRequest] = []
        self.error = error

    def send(self, request: NotificationRequest) -> dict:
        self.requests.append(request)
        if self.error is not None:
            raise CollaboratorError(self.error)
        return {"id": "notif-1"}


def _client(handler) -> HttpNotificationClient:
    return HttpNotificationClient(
        "https://notify.example.test/functions/v1/",
        "service-key",
        client=httpx.Client(transport=httpx.MockTransport(handler)),
    )


# ── request building ─────────────────────────────────────────

def test_invoice_overdue_builds_warning_for_all_members() -> None:
    handler = NotificationSubscriptionHandler(RecordingSender())

    request = handler.build_request(
        _context(INVOICE_OVERDUE, "INV-1", {"invoice_number": "F-001", "days_overdue": 12})
    )

    assert request.target_user_ids == ALL_TENANT_MEMBERS
    assert request.type == "warning"
    assert request.category == "invoice"
    assert request.title == "Invoice F-001 is overdue"
    assert request.message == "Invoice is overdue by 12 days"
    assert request.entity_id == "INV-1"


def test_approval_completed_targets_requester_when_known() -> None:
    handler = NotificationSubscriptionHandler(RecordingSender())

    targeted = handler.build_request(
        _context(
            APPROVAL_COMPLETED,
            payload={"requested_by": "user-7", "decision": "approved", "entity_type": "invoice"},
        )
    )
    broadcast = handler.build_request(_context(APPROVAL_COMPLETED))

    assert targeted.target_user_ids == ("user-7",)
    assert targeted.title == "Approval approved"
    assert targeted.message == "Your invoice has been approved"
    assert broadcast.target_user_ids == ALL_TENANT_MEMBERS
    assert broadcast.title == "Approval completed"


def test_low_stock_falls_back_to_generic_product_name() -> None:
    request = NotificationSubscriptionHandler(RecordingSender()).build_request(
        _context(INVENTORY_LOW_STOCK, "P1")
    )

    assert request.title == "Low stock: Product"
    assert request.message == "A product is below minimum stock level"
    assert request.entity_type == "product"


# ── handler ──────────────────────────────────────────────────

def test_handle_forwards_request_and_records_response() -> None:
    sender = RecordingSender()

    result = NotificationSubscriptionHandler(sender).handle(
        _context(INVENTORY_LOW_STOCK, "P1", {"product_name": "Flour"})
    )

    assert len(sender.requests) == 1
    assert sender.requests[0].tenant_id == TENANT_ID
    assert result.kind is ResultKind.APPLIED
    assert result.to_dict() == {
        "action": "notification_sent",
        "kind": "applied",
        "response": {"id": "notif-1"},
    }


def test_send_failure_becomes_handler_error() -> None:
    handler = NotificationSubscriptionHandler(RecordingSender(error="service down"))

    with pytest.raises(HandlerError, match="Notification failed: service down"):
        handler.handle(_context(INVOICE_OVERDUE))


def test_registration_includes_loan_payment_placeholder() -> None:
    router = HandlerRouter()
    register_notification_handlers(router, NotificationSubscriptionHandler(RecordingSender()))

    assert INVOICE_OVERDUE in router.routes_for_module(NOTIFICATIONS_MODULE)
    assert router.is_placeholder(NOTIFICATIONS_MODULE, LOAN_PAYMENT_DUE) is True
    result = router.route(NOTIFICATIONS_MODULE, _context(LOAN_PAYMENT_DUE, "LOAN-1"))
    assert result.kind is ResultKind.PLACEHOLDER


# ── http client ──────────────────────────────────────────────

def _request() -> NotificationRequest:
    return NotificationRequest(
        tenant_id=TENANT_ID,
        target_user_ids=ALL_TENANT_MEMBERS,
        type="info",
        category="approval",
        title="Approval requested",
        message="Approval requested for invoice F-001",
        entity_type="approval",
        entity_id="A-1",
    )


def test_client_posts_json_with_bearer_key() -> None:
    seen: list[httpx.Request] = []

    def _handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"success": True, "count": 3})

    response = _client(_handler).send(_request())

    assert response == {"success": True, "count": 3}
    assert str(seen[0].url) == "https://notify.example.test/functions/v1/create-notification"
    assert seen[0].headers["Authorization"] == "Bearer service-key"
    body = json.loads(seen[0].content)
    assert body["tenant_id"] == str(TENANT_ID)
    assert body["target_user_ids"] == ALL_TENANT_MEMBERS
    assert body["title"] == "Approval requested"


def test_client_raises_on_error_status() -> None:
    client = _client(lambda request: httpx.Response(503, text="unavailable"))

    with pytest.raises(CollaboratorError, match="503"):
        client.send(_request())


def test_client_raises_on_transport_error() -> None:
    def _handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(CollaboratorError, match="connection refused"):
        _client(_handler).send(_request())


def test_client_from_settings_requires_url() -> None:
    with pytest.raises(ValueError):
        HttpNotificationClient.from_settings(BusSettings())


def test_notification_request_validates_targets() -> None:
    with pytest.raises(ValueError):
        NotificationRequest(
            tenant_id=TENANT_ID,
            target_user_ids="everyone",
            type="info",
            category="hr",
            title="t",
            message="m",
        )
    with pytest.raises(ValueError):
        NotificationRequest(
            tenant_id=TENANT_ID,
            target_user_ids=(),
            type="info",
            category="hr",
            title="t",
            message="m",
        )
