"""
ERP Module Bus — Pending Sweep
================================
Cron-driven redelivery of events left in pending.

One sweep:
1. Release processing claims older than the stale threshold
2. Dispatch up to batch_size pending events, oldest first
3. Count outcomes; one event's failure never stops the sweep

Only pending events are picked up. A failed event has exhausted its
retries and is replayed by hand, never automatically.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from core.events.config import BusSettings
from core.events.dispatcher import (
    MESSAGE_ALREADY_PROCESSED,
    MESSAGE_IN_PROGRESS,
    EventDispatcher,
)
from core.module_events import repository
from core.module_events.models import ModuleEventStatus

logger = logging.getLogger("erp.events.sweep")


@dataclass
class SweepSummary:
    released: int = 0
    attempted: int = 0
    completed: int = 0
    retried: int = 0
    failed: int = 0
    skipped: int = 0
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "released": self.released,
            "attempted": self.attempted,
            "completed": self.completed,
            "retried": self.retried,
            "failed": self.failed,
            "skipped": self.skipped,
            "errors": list(self.errors),
        }


def sweep_pending(
    dispatcher: EventDispatcher,
    settings: BusSettings,
    *,
    now=None,
) -> SweepSummary:
    summary = SweepSummary()

    released = repository.release_stale_claims(
        older_than=repository.stale_threshold(settings.stale_claim_seconds, now=now)
    )
    summary.released = len(released)
    for event_id in released:
        logger.warning(f"Released stale processing claim for event {event_id}")

    for event_id in repository.pending_event_ids(limit=settings.sweep_batch_size):
        summary.attempted += 1
        try:
            report = dispatcher.dispatch(event_id)
        except Exception as exc:
            logger.error(f"Sweep dispatch failed for event {event_id}: {exc}", exc_info=True)
            summary.errors.append(f"{event_id}: {exc}")
            continue

        if report.message in (MESSAGE_ALREADY_PROCESSED, MESSAGE_IN_PROGRESS):
            summary.skipped += 1
        elif report.status == ModuleEventStatus.COMPLETED:
            summary.completed += 1
        elif report.status == ModuleEventStatus.PENDING:
            summary.retried += 1
        elif report.status == ModuleEventStatus.FAILED:
            summary.failed += 1

    logger.info(
        f"Sweep finished: {summary.attempted} attempted, {summary.completed} completed, "
        f"{summary.retried} retried, {summary.failed} failed, "
        f"{summary.skipped} skipped, {len(summary.errors)} errors"
    )
    return summary
