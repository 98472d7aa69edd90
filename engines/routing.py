"""
ERP Engines — Handler Router Assembly
=======================================
Builds the (handler_module, event_type) dispatch table at startup.

Adding a handler means: implement it in the engine's subscriptions
module, register it there, and insert a subscription row.
"""

from __future__ import annotations

from core.events.router import HandlerRouter
from engines.accounting.subscriptions import register_accounting_handlers
from engines.inventory.ports import InventoryLookups, StockLedger
from engines.inventory.subscriptions import (
    InventorySubscriptionHandler,
    register_inventory_handlers,
)
from engines.notifications.client import NotificationSender
from engines.notifications.subscriptions import (
    NotificationSubscriptionHandler,
    register_notification_handlers,
)
from engines.workflow.subscriptions import register_workflow_handlers


def build_handler_router(
    *,
    stock_ledger: StockLedger,
    inventory_lookups: InventoryLookups,
    notification_sender: NotificationSender,
) -> HandlerRouter:
    router = HandlerRouter()
    register_inventory_handlers(
        router,
        InventorySubscriptionHandler(stock_ledger, inventory_lookups),
    )
    register_accounting_handlers(router)
    register_workflow_handlers(router)
    register_notification_handlers(
        router,
        NotificationSubscriptionHandler(notification_sender),
    )
    return router
