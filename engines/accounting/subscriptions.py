"""
ERP Accounting Engine — Event Subscriptions
=============================================
Accounting listens for events that will post journal entries.

None of these has a real effect yet: each pair is registered as a
placeholder so its delivery log row says so explicitly.
"""

from __future__ import annotations

from typing import Dict, Tuple

from core.events.router import HandlerRouter

ACCOUNTING_MODULE = "accounting"

ACCOUNTING_PLACEHOLDERS: Dict[str, Tuple[str, str]] = {
    "pos.transaction_completed": ("create_pos_journal", "POS journal entry placeholder"),
    "credit_note.issued": (
        "create_storno_journal",
        "Credit note storno journal placeholder",
    ),
    "fixed_asset.depreciated": (
        "post_depreciation_entry",
        "Fixed asset depreciation journal placeholder",
    ),
    "deferral.recognized": (
        "post_deferral_recognition",
        "Deferral recognition journal placeholder",
    ),
}


def register_accounting_handlers(router: HandlerRouter) -> None:
    for event_type, (action, message) in sorted(ACCOUNTING_PLACEHOLDERS.items()):
        router.register_placeholder(
            ACCOUNTING_MODULE, event_type, action=action, message=message
        )
