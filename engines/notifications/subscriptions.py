"""
ERP Notifications — Event Subscriptions
=========================================
Turns business events into notification requests.

Each handler builds one NotificationRequest and forwards it to the
notification collaborator; the collaborator's response becomes the
handler result. A failed send raises HandlerError.

A retried event re-sends an identical request. The notification service
is required to de-duplicate on (tenant, entity_type, entity_id, title).
"""

from __future__ import annotations

from typing import Callable, Dict, Tuple

from core.events.errors import CollaboratorError, HandlerError
from core.events.payloads import parse_payload
from core.events.results import HandlerContext, HandlerResult
from core.events.router import HandlerRouter
from engines.notifications.client import (
    ALL_TENANT_MEMBERS,
    NotificationRequest,
    NotificationSender,
)
from engines.notifications.events import (
    APPROVAL_COMPLETED,
    APPROVAL_REQUESTED,
    INVENTORY_LOW_STOCK,
    INVOICE_OVERDUE,
    LEAVE_REQUEST_SUBMITTED,
    LOAN_PAYMENT_DUE,
    NOTIFICATION_PAYLOAD_TYPES,
    RETURN_CASE_APPROVED,
)

NOTIFICATIONS_MODULE = "notifications"

NOTIFICATION_PLACEHOLDERS: Dict[str, Tuple[str, str]] = {
    LOAN_PAYMENT_DUE: ("notify_loan_payment", "Loan payment notification placeholder"),
}


def _build_invoice_overdue(context: HandlerContext, payload) -> NotificationRequest:
    return NotificationRequest(
        tenant_id=context.tenant_id,
        target_user_ids=ALL_TENANT_MEMBERS,
        type="warning",
        category="invoice",
        title=f"Invoice {payload.invoice_number or context.entity_id} is overdue",
        message=f"Invoice is overdue by {payload.days_overdue or '?'} days",
        entity_type="invoice",
        entity_id=context.entity_id,
    )


def _build_approval_requested(context: HandlerContext, payload) -> NotificationRequest:
    return NotificationRequest(
        tenant_id=context.tenant_id,
        target_user_ids=ALL_TENANT_MEMBERS,
        type="action",
        category="approval",
        title="Approval requested",
        message=(
            f"Approval requested for {payload.entity_type or 'entity'} "
            f"{payload.entity_name or context.entity_id}"
        ),
        entity_type="approval",
        entity_id=context.entity_id,
    )


def _build_approval_completed(context: HandlerContext, payload) -> NotificationRequest:
    targets = (
        (str(payload.requested_by),)
        if payload.requested_by
        else ALL_TENANT_MEMBERS
    )
    return NotificationRequest(
        tenant_id=context.tenant_id,
        target_user_ids=targets,
        type="info",
        category="approval",
        title=f"Approval {payload.decision or 'completed'}",
        message=(
            f"Your {payload.entity_type or 'entity'} has been "
            f"{payload.decision or 'processed'}"
        ),
        entity_type="approval",
        entity_id=context.entity_id,
    )


def _build_low_stock(context: HandlerContext, payload) -> NotificationRequest:
    return NotificationRequest(
        tenant_id=context.tenant_id,
        target_user_ids=ALL_TENANT_MEMBERS,
        type="warning",
        category="inventory",
        title=f"Low stock: {payload.product_name or 'Product'}",
        message=f"{payload.product_name or 'A product'} is below minimum stock level",
        entity_type="product",
        entity_id=context.entity_id,
    )


def _build_return_case_approved(context: HandlerContext, payload) -> NotificationRequest:
    return NotificationRequest(
        tenant_id=context.tenant_id,
        target_user_ids=ALL_TENANT_MEMBERS,
        type="info",
        category="invoice",
        title="Return case approved",
        message=f"Return case {payload.case_number or context.entity_id} has been approved",
        entity_type="return_case",
        entity_id=context.entity_id,
    )


def _build_leave_request_submitted(context: HandlerContext, payload) -> NotificationRequest:
    return NotificationRequest(
        tenant_id=context.tenant_id,
        target_user_ids=ALL_TENANT_MEMBERS,
        type="action",
        category="hr",
        title="Leave request submitted",
        message=f"New leave request from {payload.employee_name or 'an employee'}",
        entity_type="leave_request",
        entity_id=context.entity_id,
    )


NOTIFICATION_BUILDERS: Dict[str, Callable[..., NotificationRequest]] = {
    INVOICE_OVERDUE: _build_invoice_overdue,
    APPROVAL_REQUESTED: _build_approval_requested,
    APPROVAL_COMPLETED: _build_approval_completed,
    INVENTORY_LOW_STOCK: _build_low_stock,
    RETURN_CASE_APPROVED: _build_return_case_approved,
    LEAVE_REQUEST_SUBMITTED: _build_leave_request_submitted,
}


class NotificationSubscriptionHandler:
    def __init__(self, sender: NotificationSender):
        self._sender = sender

    def build_request(self, context: HandlerContext) -> NotificationRequest:
        payload = parse_payload(context, NOTIFICATION_PAYLOAD_TYPES)
        return NOTIFICATION_BUILDERS[context.event_type](context, payload)

    def handle(self, context: HandlerContext) -> HandlerResult:
        request = self.build_request(context)
        try:
            response = self._sender.send(request)
        except CollaboratorError as exc:
            raise HandlerError(f"Notification failed: {exc}") from exc
        return HandlerResult.applied("notification_sent", response=response)


def register_notification_handlers(
    router: HandlerRouter,
    handler: NotificationSubscriptionHandler,
) -> None:
    for event_type in sorted(NOTIFICATION_BUILDERS):
        router.register(NOTIFICATIONS_MODULE, event_type, handler.handle)
    for event_type, (action, message) in sorted(NOTIFICATION_PLACEHOLDERS.items()):
        router.register_placeholder(
            NOTIFICATIONS_MODULE, event_type, action=action, message=message
        )
