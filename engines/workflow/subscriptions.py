"""
ERP Workflow Engine — Event Subscriptions
===========================================
"""

from __future__ import annotations

from typing import Dict, Tuple

from core.events.router import HandlerRouter

WORKFLOW_MODULE = "workflow"

WORKFLOW_PLACEHOLDERS: Dict[str, Tuple[str, str]] = {
    "approval.completed": (
        "update_entity_approval_status",
        "Approval status update placeholder",
    ),
}


def register_workflow_handlers(router: HandlerRouter) -> None:
    for event_type, (action, message) in sorted(WORKFLOW_PLACEHOLDERS.items()):
        router.register_placeholder(
            WORKFLOW_MODULE, event_type, action=action, message=message
        )
