"""
ERP Inventory Engine — Collaborator Ports
===========================================
The stock operations and line lookups inventory handlers depend on.

The real implementations live in the inventory module proper; the
event bus only knows these contracts. Every call carries tenant_id,
and implementations must never read or write outside it.

Idempotency contract:
    adjust_stock() receives a StockMovement with an idempotency_key
    that is stable across retries of the same event. Implementations
    must apply a given key at most once.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from decimal import Decimal
from threading import Lock
from typing import Dict, List, Optional, Protocol, Tuple, Union

from core.events.errors import CollaboratorError

Quantity = Union[int, Decimal]

MOVEMENT_IN = "in"
MOVEMENT_OUT = "out"


@dataclass(frozen=True)
class StockMovement:
    tenant_id: uuid.UUID
    product_id: str
    warehouse_id: str
    quantity: Quantity  # signed: negative leaves the warehouse
    movement_type: str
    reference: str
    idempotency_key: str
    notes: str = ""

    def __post_init__(self):
        if not isinstance(self.tenant_id, uuid.UUID):
            raise ValueError("tenant_id must be UUID.")
        if self.movement_type not in (MOVEMENT_IN, MOVEMENT_OUT):
            raise ValueError("movement_type must be 'in' or 'out'.")
        if not self.idempotency_key:
            raise ValueError("idempotency_key must be a non-empty string.")


@dataclass(frozen=True)
class ProductLine:
    product_id: str
    quantity: Quantity


# ══════════════════════════════════════════════════════════════
# PROTOCOLS
# ══════════════════════════════════════════════════════════════

class StockLedger(Protocol):
    def adjust_stock(self, movement: StockMovement) -> None:
        """Raise CollaboratorError on failure."""
        ...

    def reserve_for_order(self, tenant_id: uuid.UUID, sales_order_id: str) -> None:
        ...

    def release_for_order(self, tenant_id: uuid.UUID, sales_order_id: str) -> None:
        ...


class InventoryLookups(Protocol):
    def invoice_product_lines(
        self, tenant_id: uuid.UUID, invoice_id: str
    ) -> List[ProductLine]:
        ...

    def accepted_return_lines(
        self, tenant_id: uuid.UUID, return_case_id: str
    ) -> List[ProductLine]:
        ...

    def returned_lines(
        self, tenant_id: uuid.UUID, return_case_id: str
    ) -> List[ProductLine]:
        ...

    def first_active_warehouse(self, tenant_id: uuid.UUID) -> Optional[str]:
        ...


# ══════════════════════════════════════════════════════════════
# IN-MEMORY IMPLEMENTATIONS (dev wiring / tests)
# ══════════════════════════════════════════════════════════════

class InMemoryStockLedger:
    """
    Tenant-partitioned stock levels with key-based de-duplication.

    Reserving or releasing an order not added with add_order() raises,
    unless accept_unknown_orders is set (smoke wiring has no order book).
    """

    def __init__(self, *, accept_unknown_orders: bool = False):
        self._accept_unknown_orders = accept_unknown_orders
        self._levels: Dict[Tuple[uuid.UUID, str, str], Quantity] = {}
        self._applied: Dict[Tuple[uuid.UUID, str], StockMovement] = {}
        self._reserved: set[Tuple[uuid.UUID, str]] = set()
        self._known_orders: set[Tuple[uuid.UUID, str]] = set()
        self._lock = Lock()

    def add_order(self, tenant_id: uuid.UUID, sales_order_id: str) -> None:
        with self._lock:
            self._known_orders.add((tenant_id, sales_order_id))

    def adjust_stock(self, movement: StockMovement) -> None:
        key = (movement.tenant_id, movement.idempotency_key)
        with self._lock:
            if key in self._applied:
                return
            level_key = (movement.tenant_id, movement.warehouse_id, movement.product_id)
            self._levels[level_key] = self._levels.get(level_key, 0) + movement.quantity
            self._applied[key] = movement

    def reserve_for_order(self, tenant_id: uuid.UUID, sales_order_id: str) -> None:
        with self._lock:
            self._require_order(tenant_id, sales_order_id)
            self._reserved.add((tenant_id, sales_order_id))

    def release_for_order(self, tenant_id: uuid.UUID, sales_order_id: str) -> None:
        with self._lock:
            self._require_order(tenant_id, sales_order_id)
            self._reserved.discard((tenant_id, sales_order_id))

    def _require_order(self, tenant_id: uuid.UUID, sales_order_id: str) -> None:
        if self._accept_unknown_orders:
            return
        if (tenant_id, sales_order_id) not in self._known_orders:
            raise CollaboratorError(f"Sales order {sales_order_id} not found")

    def level(self, tenant_id: uuid.UUID, warehouse_id: str, product_id: str) -> Quantity:
        with self._lock:
            return self._levels.get((tenant_id, warehouse_id, product_id), 0)

    def is_reserved(self, tenant_id: uuid.UUID, sales_order_id: str) -> bool:
        with self._lock:
            return (tenant_id, sales_order_id) in self._reserved

    def movements(self, tenant_id: uuid.UUID) -> Tuple[StockMovement, ...]:
        with self._lock:
            return tuple(
                movement
                for (movement_tenant, _), movement in self._applied.items()
                if movement_tenant == tenant_id
            )


class InMemoryInventoryLookups:
    def __init__(self):
        self._invoice_lines: Dict[Tuple[uuid.UUID, str], List[ProductLine]] = {}
        self._accepted_return_lines: Dict[Tuple[uuid.UUID, str], List[ProductLine]] = {}
        self._returned_lines: Dict[Tuple[uuid.UUID, str], List[ProductLine]] = {}
        self._warehouses: Dict[uuid.UUID, List[str]] = {}

    def add_invoice_lines(self, tenant_id, invoice_id: str, lines) -> None:
        self._invoice_lines[(tenant_id, invoice_id)] = list(lines)

    def add_return_lines(self, tenant_id, return_case_id: str, *, accepted=(), returned=()) -> None:
        self._accepted_return_lines[(tenant_id, return_case_id)] = list(accepted)
        self._returned_lines[(tenant_id, return_case_id)] = list(returned)

    def add_active_warehouse(self, tenant_id, warehouse_id: str) -> None:
        self._warehouses.setdefault(tenant_id, []).append(warehouse_id)

    def invoice_product_lines(self, tenant_id, invoice_id):
        return list(self._invoice_lines.get((tenant_id, invoice_id), []))

    def accepted_return_lines(self, tenant_id, return_case_id):
        return list(self._accepted_return_lines.get((tenant_id, return_case_id), []))

    def returned_lines(self, tenant_id, return_case_id):
        return list(self._returned_lines.get((tenant_id, return_case_id), []))

    def first_active_warehouse(self, tenant_id):
        warehouses = self._warehouses.get(tenant_id)
        return warehouses[0] if warehouses else None
