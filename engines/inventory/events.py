"""
ERP Inventory Engine — Consumed Event Types and Payloads
==========================================================
Engine: Inventory

Topics published by other modules that inventory reacts to, and the
typed view of each payload inventory reads.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from core.events.payloads import EventPayload


# ══════════════════════════════════════════════════════════════
# EVENT TYPE CONSTANTS
# ══════════════════════════════════════════════════════════════

INVOICE_POSTED = "invoice.posted"
SALES_ORDER_CONFIRMED = "sales_order.confirmed"
SALES_ORDER_CANCELLED = "sales_order.cancelled"
RETURN_CASE_APPROVED = "return_case.approved"
SUPPLIER_RETURN_SHIPPED = "supplier_return.shipped"
PRODUCTION_COMPLETED = "production.completed"
POS_TRANSACTION_COMPLETED = "pos.transaction_completed"

RETURN_TYPE_CUSTOMER = "customer"


# ══════════════════════════════════════════════════════════════
# PAYLOADS
# ══════════════════════════════════════════════════════════════

@dataclass(frozen=True)
class InvoicePostedPayload(EventPayload):
    warehouse_id: Optional[str] = None
    invoice_number: Optional[str] = None


@dataclass(frozen=True)
class SalesOrderPayload(EventPayload):
    order_number: Optional[str] = None


@dataclass(frozen=True)
class ReturnCaseApprovedPayload(EventPayload):
    return_type: Optional[str] = None
    case_number: Optional[str] = None


@dataclass(frozen=True)
class SupplierReturnShippedPayload(EventPayload):
    warehouse_id: Optional[str] = None
    return_case_id: Optional[str] = None
    shipment_number: Optional[str] = None


INVENTORY_PAYLOAD_TYPES = {
    INVOICE_POSTED: InvoicePostedPayload,
    SALES_ORDER_CONFIRMED: SalesOrderPayload,
    SALES_ORDER_CANCELLED: SalesOrderPayload,
    RETURN_CASE_APPROVED: ReturnCaseApprovedPayload,
    SUPPLIER_RETURN_SHIPPED: SupplierReturnShippedPayload,
}
