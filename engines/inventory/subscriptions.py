"""
ERP Inventory Engine — Event Subscriptions
============================================
Inventory reacts to events from other modules.

Handled:
- invoice.posted            → issue stock for each product line
- sales_order.confirmed     → reserve stock for the order
- sales_order.cancelled     → release the order's reservation
- return_case.approved      → re-add accepted customer-return quantities
- supplier_return.shipped   → issue returned quantities to the supplier

Acknowledged, no effect yet:
- production.completed
- pos.transaction_completed

Lines are adjusted one at a time. The first failing line aborts this
handler only; the dispatcher still runs the other subscriptions.
Every movement carries an idempotency key built from the event id,
so a whole-event retry does not apply the same line twice.
"""

from __future__ import annotations

from typing import Dict, Iterable, Tuple

from core.events.errors import CollaboratorError, HandlerError
from core.events.payloads import parse_payload
from core.events.results import HandlerContext, HandlerResult
from core.events.router import HandlerRouter
from engines.inventory.events import (
    INVENTORY_PAYLOAD_TYPES,
    INVOICE_POSTED,
    POS_TRANSACTION_COMPLETED,
    PRODUCTION_COMPLETED,
    RETURN_CASE_APPROVED,
    RETURN_TYPE_CUSTOMER,
    SALES_ORDER_CANCELLED,
    SALES_ORDER_CONFIRMED,
    SUPPLIER_RETURN_SHIPPED,
)
from engines.inventory.ports import (
    MOVEMENT_IN,
    MOVEMENT_OUT,
    InventoryLookups,
    ProductLine,
    StockLedger,
    StockMovement,
)

INVENTORY_MODULE = "inventory"

INVENTORY_SUBSCRIPTIONS: Dict[str, str] = {
    INVOICE_POSTED: "handle_invoice_posted",
    SALES_ORDER_CONFIRMED: "handle_sales_order_confirmed",
    SALES_ORDER_CANCELLED: "handle_sales_order_cancelled",
    RETURN_CASE_APPROVED: "handle_return_case_approved",
    SUPPLIER_RETURN_SHIPPED: "handle_supplier_return_shipped",
}

INVENTORY_PLACEHOLDERS: Dict[str, Tuple[str, str]] = {
    PRODUCTION_COMPLETED: ("add_finished_goods", "Production output placeholder"),
    POS_TRANSACTION_COMPLETED: ("deduct_pos_stock", "POS stock deduction placeholder"),
}


class InventorySubscriptionHandler:
    """
    Translates foreign events into stock ledger calls.
    """

    def __init__(self, stock_ledger: StockLedger, lookups: InventoryLookups):
        self._stock_ledger = stock_ledger
        self._lookups = lookups

    # ── invoice.posted ───────────────────────────────────────

    def handle_invoice_posted(self, context: HandlerContext) -> HandlerResult:
        payload = parse_payload(context, INVENTORY_PAYLOAD_TYPES)
        if payload.warehouse_id is None:
            return HandlerResult.skipped(
                "No warehouse specified, skipping inventory deduction"
            )

        lines = self._lookups.invoice_product_lines(context.tenant_id, context.entity_id)
        if not lines:
            return HandlerResult.skipped("No product lines on invoice")

        reference = str(payload.invoice_number or context.entity_id)
        adjusted = self._apply_lines(
            context,
            action="deduct_stock",
            lines=lines,
            warehouse_id=str(payload.warehouse_id),
            movement_type=MOVEMENT_OUT,
            reference=reference,
            notes=f"Event bus: invoice {reference}",
        )
        return HandlerResult.applied("deduct_stock", adjusted_products=adjusted)

    # ── sales_order.* ────────────────────────────────────────

    def handle_sales_order_confirmed(self, context: HandlerContext) -> HandlerResult:
        try:
            self._stock_ledger.reserve_for_order(context.tenant_id, context.entity_id)
        except CollaboratorError as exc:
            raise HandlerError(f"Stock reservation failed: {exc}") from exc
        return HandlerResult.applied(
            "reserve_stock",
            message="Stock reserved for sales order",
            entity_id=context.entity_id,
        )

    def handle_sales_order_cancelled(self, context: HandlerContext) -> HandlerResult:
        try:
            self._stock_ledger.release_for_order(context.tenant_id, context.entity_id)
        except CollaboratorError as exc:
            raise HandlerError(f"Stock release failed: {exc}") from exc
        return HandlerResult.applied(
            "release_stock",
            message="Stock released for cancelled order",
            entity_id=context.entity_id,
        )

    # ── return_case.approved ─────────────────────────────────

    def handle_return_case_approved(self, context: HandlerContext) -> HandlerResult:
        payload = parse_payload(context, INVENTORY_PAYLOAD_TYPES)
        if payload.return_type != RETURN_TYPE_CUSTOMER:
            return HandlerResult.skipped("Only customer returns add stock back")

        lines = self._lookups.accepted_return_lines(context.tenant_id, context.entity_id)
        if not lines:
            return HandlerResult.skipped("No accepted product lines")

        warehouse_id = self._lookups.first_active_warehouse(context.tenant_id)
        if warehouse_id is None:
            return HandlerResult.skipped("No active warehouse found")

        reference = str(payload.case_number or context.entity_id)
        adjusted = self._apply_lines(
            context,
            action="add_return_stock",
            lines=lines,
            warehouse_id=warehouse_id,
            movement_type=MOVEMENT_IN,
            reference=reference,
            notes=f"Event bus: customer return {reference}",
        )
        return HandlerResult.applied("add_return_stock", adjusted_products=adjusted)

    # ── supplier_return.shipped ──────────────────────────────

    def handle_supplier_return_shipped(self, context: HandlerContext) -> HandlerResult:
        payload = parse_payload(context, INVENTORY_PAYLOAD_TYPES)
        if payload.warehouse_id is None or payload.return_case_id is None:
            return HandlerResult.skipped("No warehouse or return case specified")

        lines = self._lookups.returned_lines(context.tenant_id, str(payload.return_case_id))
        if not lines:
            return HandlerResult.skipped("No product lines on return case")

        reference = str(payload.shipment_number or context.entity_id)
        adjusted = self._apply_lines(
            context,
            action="deduct_supplier_return_stock",
            lines=lines,
            warehouse_id=str(payload.warehouse_id),
            movement_type=MOVEMENT_OUT,
            reference=reference,
            notes=f"Event bus: supplier return shipment {reference}",
        )
        return HandlerResult.applied("deduct_supplier_return_stock", adjusted_products=adjusted)

    # ── shared ───────────────────────────────────────────────

    def _apply_lines(
        self,
        context: HandlerContext,
        *,
        action: str,
        lines: Iterable[ProductLine],
        warehouse_id: str,
        movement_type: str,
        reference: str,
        notes: str,
    ) -> list[str]:
        adjusted: list[str] = []
        for line_no, line in enumerate(lines):
            quantity = -line.quantity if movement_type == MOVEMENT_OUT else line.quantity
            movement = StockMovement(
                tenant_id=context.tenant_id,
                product_id=line.product_id,
                warehouse_id=warehouse_id,
                quantity=quantity,
                movement_type=movement_type,
                reference=reference,
                idempotency_key=f"{context.event_id}:{action}:{line_no}:{line.product_id}",
                notes=notes,
            )
            try:
                self._stock_ledger.adjust_stock(movement)
            except CollaboratorError as exc:
                raise HandlerError(
                    f"Stock adjustment failed for product {line.product_id}: {exc}"
                ) from exc
            adjusted.append(line.product_id)
        return adjusted


def register_inventory_handlers(
    router: HandlerRouter,
    handler: InventorySubscriptionHandler,
) -> None:
    for event_type, method_name in sorted(INVENTORY_SUBSCRIPTIONS.items()):
        router.register(INVENTORY_MODULE, event_type, getattr(handler, method_name))
    for event_type, (action, message) in sorted(INVENTORY_PLACEHOLDERS.items()):
        router.register_placeholder(
            INVENTORY_MODULE, event_type, action=action, message=message
        )
