"""
ERP Notifications — Consumed Event Types and Payloads
=======================================================
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.events.payloads import EventPayload

INVOICE_OVERDUE = "invoice.overdue"
APPROVAL_REQUESTED = "approval.requested"
APPROVAL_COMPLETED = "approval.completed"
INVENTORY_LOW_STOCK = "inventory.low_stock"
RETURN_CASE_APPROVED = "return_case.approved"
LEAVE_REQUEST_SUBMITTED = "leave_request.submitted"
LOAN_PAYMENT_DUE = "loan_payment.due"


@dataclass(frozen=True)
class InvoiceOverduePayload(EventPayload):
    invoice_number: Optional[str] = None
    days_overdue: Optional[int] = None


@dataclass(frozen=True)
class ApprovalRequestedPayload(EventPayload):
    entity_type: Optional[str] = None
    entity_name: Optional[str] = None


@dataclass(frozen=True)
class ApprovalCompletedPayload(EventPayload):
    requested_by: Optional[str] = None
    decision: Optional[str] = None
    entity_type: Optional[str] = None


@dataclass(frozen=True)
class LowStockPayload(EventPayload):
    product_name: Optional[str] = None


@dataclass(frozen=True)
class ReturnCaseApprovedPayload(EventPayload):
    case_number: Optional[str] = None


@dataclass(frozen=True)
class LeaveRequestSubmittedPayload(EventPayload):
    employee_name: Optional[str] = None


NOTIFICATION_PAYLOAD_TYPES = {
    INVOICE_OVERDUE: InvoiceOverduePayload,
    APPROVAL_REQUESTED: ApprovalRequestedPayload,
    APPROVAL_COMPLETED: ApprovalCompletedPayload,
    INVENTORY_LOW_STOCK: LowStockPayload,
    RETURN_CASE_APPROVED: ReturnCaseApprovedPayload,
    LEAVE_REQUEST_SUBMITTED: LeaveRequestSubmittedPayload,
}
