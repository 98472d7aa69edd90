"""
ERP Module Events — Repository
================================
Every ORM read and write the module event bus performs.

The dispatcher never touches the ORM directly; it goes through
these helpers so the state machine stays readable and testable.

Claim rule:
    A single conditional UPDATE moves the event to processing only
    where status is still claimable. Two concurrent dispatchers for
    the same event cannot both win it.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Iterable, Optional

from django.db.models import Count, Q
from django.utils import timezone

from core.events.config import BusSettings
from core.events.matcher import candidate_patterns, validate_pattern
from core.module_events.models import (
    CLAIMABLE_STATUSES,
    DeliveryStatus,
    ModuleEvent,
    ModuleEventLog,
    ModuleEventStatus,
    ModuleEventSubscription,
)


# ══════════════════════════════════════════════════════════════
# CLAIM
# ══════════════════════════════════════════════════════════════

class ClaimOutcome(Enum):
    CLAIMED = "CLAIMED"
    NOT_FOUND = "NOT_FOUND"
    ALREADY_COMPLETED = "ALREADY_COMPLETED"
    IN_PROGRESS = "IN_PROGRESS"


@dataclass(frozen=True)
class ClaimResult:
    outcome: ClaimOutcome
    event: Optional[ModuleEvent] = None
    previous_status: Optional[str] = None

    @property
    def claimed(self) -> bool:
        return self.outcome is ClaimOutcome.CLAIMED


def load_event(event_id: uuid.UUID) -> ModuleEvent | None:
    return ModuleEvent.objects.filter(pk=event_id).first()


def claim_event(
    event_id: uuid.UUID,
    *,
    now: datetime | None = None,
) -> ClaimResult:
    """
    Take the processing claim for one event.

    Returns the event as re-read after a won claim, so retry_count
    reflects any pass that finished between read and claim.
    """
    event = load_event(event_id)
    if event is None:
        return ClaimResult(ClaimOutcome.NOT_FOUND)
    if event.is_completed:
        return ClaimResult(
            ClaimOutcome.ALREADY_COMPLETED,
            event=event,
            previous_status=event.status,
        )

    claimed_rows = ModuleEvent.objects.filter(
        pk=event_id,
        status__in=CLAIMABLE_STATUSES,
    ).update(
        status=ModuleEventStatus.PROCESSING,
        claimed_at=now or timezone.now(),
    )

    if claimed_rows == 0:
        current = load_event(event_id)
        if current is None:
            return ClaimResult(ClaimOutcome.NOT_FOUND)
        if current.is_completed:
            return ClaimResult(
                ClaimOutcome.ALREADY_COMPLETED,
                event=current,
                previous_status=current.status,
            )
        return ClaimResult(
            ClaimOutcome.IN_PROGRESS,
            event=current,
            previous_status=current.status,
        )

    previous_status = event.status
    event.refresh_from_db()
    return ClaimResult(
        ClaimOutcome.CLAIMED,
        event=event,
        previous_status=previous_status,
    )


# ══════════════════════════════════════════════════════════════
# FINALIZE
# ══════════════════════════════════════════════════════════════

def finalize_event(
    event: ModuleEvent,
    *,
    status: str,
    retry_count: int,
    error_message: str | None,
    processed_at: datetime | None,
) -> ModuleEvent:
    """Write the outcome of one dispatch pass and release the claim."""
    ModuleEvent.objects.filter(pk=event.pk).update(
        status=status,
        retry_count=retry_count,
        error_message=error_message,
        processed_at=processed_at,
        claimed_at=None,
    )
    event.status = status
    event.retry_count = retry_count
    event.error_message = error_message
    event.processed_at = processed_at
    event.claimed_at = None
    return event


def release_stale_claims(*, older_than: datetime) -> list[uuid.UUID]:
    """
    Return abandoned processing claims to pending.

    A claim is abandoned when the dispatcher died between claim and
    finalize (e.g. the delivery log write itself failed).
    """
    stale_ids = list(
        ModuleEvent.objects.filter(
            status=ModuleEventStatus.PROCESSING,
        )
        .filter(Q(claimed_at__lt=older_than) | Q(claimed_at__isnull=True))
        .values_list("id", flat=True)
    )
    if stale_ids:
        ModuleEvent.objects.filter(
            pk__in=stale_ids,
            status=ModuleEventStatus.PROCESSING,
        ).update(status=ModuleEventStatus.PENDING, claimed_at=None)
    return stale_ids


def pending_event_ids(*, limit: int) -> list[uuid.UUID]:
    """Oldest pending events first."""
    return list(
        ModuleEvent.objects.filter(status=ModuleEventStatus.PENDING)
        .order_by("created_at", "id")
        .values_list("id", flat=True)[:limit]
    )


# ══════════════════════════════════════════════════════════════
# SUBSCRIPTIONS
# ══════════════════════════════════════════════════════════════

def active_subscriptions_for(event_type: str) -> list[ModuleEventSubscription]:
    """
    Active subscriptions selecting this topic: exact ∪ first-segment wildcard.

    Order is created_at, id. Callers must not depend on it.
    """
    return list(
        ModuleEventSubscription.objects.filter(
            is_active=True,
            event_type_pattern__in=candidate_patterns(event_type),
        ).order_by("created_at", "id")
    )


def register_subscription(
    event_type_pattern: str,
    handler_module: str,
    *,
    handler_function: str = "",
    is_active: bool = True,
) -> ModuleEventSubscription:
    """Configuration helper. Validates the pattern form."""
    pattern = validate_pattern(event_type_pattern)
    if not handler_module or not isinstance(handler_module, str):
        raise ValueError("handler_module must be a non-empty string.")
    return ModuleEventSubscription.objects.create(
        event_type_pattern=pattern,
        handler_module=handler_module.strip(),
        handler_function=handler_function,
        is_active=is_active,
    )


# ══════════════════════════════════════════════════════════════
# DELIVERY LOG
# ══════════════════════════════════════════════════════════════

def record_delivery(
    *,
    event: ModuleEvent,
    subscription: ModuleEventSubscription,
    status: str,
    response: Any = None,
    error_message: str | None = None,
) -> ModuleEventLog:
    """Append one attempt row. Never updates, never deletes."""
    if status not in DeliveryStatus.values:
        raise ValueError(f"Unknown delivery status '{status}'.")
    return ModuleEventLog.objects.create(
        event=event,
        subscription=subscription,
        status=status,
        response=response,
        error_message=error_message,
    )


# ══════════════════════════════════════════════════════════════
# PRODUCERS
# ══════════════════════════════════════════════════════════════

def emit_module_event(
    *,
    tenant_id: uuid.UUID,
    source_module: str,
    event_type: str,
    entity_type: str,
    entity_id: str,
    payload: dict | None = None,
    max_retries: int | None = None,
) -> ModuleEvent:
    """
    Insert a pending event. Producers call the dispatcher afterwards
    (directly, via the HTTP endpoint, or by leaving it for the sweep).

    max_retries defaults to MODULE_EVENTS_DEFAULT_MAX_RETRIES.
    """
    if max_retries is None:
        max_retries = BusSettings.from_django_settings().default_max_retries
    if not isinstance(tenant_id, uuid.UUID):
        raise ValueError("tenant_id must be UUID.")
    if not event_type or "." not in event_type:
        raise ValueError("event_type must be a dot-namespaced string.")
    if max_retries < 1:
        raise ValueError("max_retries must be >= 1.")
    return ModuleEvent.objects.create(
        tenant_id=tenant_id,
        source_module=source_module,
        event_type=event_type,
        entity_type=entity_type,
        entity_id=str(entity_id),
        payload=dict(payload or {}),
        max_retries=max_retries,
    )


# ══════════════════════════════════════════════════════════════
# MONITORING READS (tenant-scoped)
# ══════════════════════════════════════════════════════════════

def list_events(
    tenant_id: uuid.UUID,
    *,
    status: str | None = None,
    source_module: str | None = None,
    search: str | None = None,
    limit: int = 100,
) -> list[ModuleEvent]:
    query = ModuleEvent.objects.filter(tenant_id=tenant_id)
    if status:
        query = query.filter(status=status)
    if source_module:
        query = query.filter(source_module=source_module)
    if search:
        query = query.filter(
            Q(event_type__icontains=search) | Q(entity_id__icontains=search)
        )
    return list(query.order_by("-created_at", "-id")[:limit])


def list_delivery_logs(
    tenant_id: uuid.UUID,
    event_id: uuid.UUID,
) -> list[ModuleEventLog]:
    return list(
        ModuleEventLog.objects.filter(
            event_id=event_id,
            event__tenant_id=tenant_id,
        )
        .select_related("subscription")
        .order_by("-executed_at", "-id")
    )


def status_counts(tenant_id: uuid.UUID) -> dict[str, int]:
    counts = {status: 0 for status in ModuleEventStatus.values}
    rows = (
        ModuleEvent.objects.filter(tenant_id=tenant_id)
        .values("status")
        .annotate(total=Count("id"))
    )
    for row in rows:
        counts[row["status"]] = row["total"]
    return counts


def serialize_event(event: ModuleEvent) -> dict[str, Any]:
    return {
        "id": str(event.id),
        "tenant_id": str(event.tenant_id),
        "source_module": event.source_module,
        "event_type": event.event_type,
        "entity_type": event.entity_type,
        "entity_id": event.entity_id,
        "payload": event.payload,
        "status": event.status,
        "retry_count": event.retry_count,
        "max_retries": event.max_retries,
        "processed_at": _iso_or_none(event.processed_at),
        "error_message": event.error_message,
        "created_at": _iso_or_none(event.created_at),
    }


def serialize_delivery_logs(entries: Iterable[ModuleEventLog]) -> list[dict[str, Any]]:
    return [
        {
            "id": str(entry.id),
            "event_id": str(entry.event_id),
            "subscription_id": str(entry.subscription_id),
            "handler_module": entry.subscription.handler_module,
            "status": entry.status,
            "response": entry.response,
            "error_message": entry.error_message,
            "executed_at": _iso_or_none(entry.executed_at),
        }
        for entry in entries
    ]


def _iso_or_none(value: datetime | None) -> str | None:
    if value is None:
        return None
    return value.isoformat()


def stale_threshold(seconds: int, *, now: datetime | None = None) -> datetime:
    return (now or timezone.now()) - timedelta(seconds=seconds)
