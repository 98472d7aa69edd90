"""
ERP Module Bus — Retry Policy
===============================
Decides the status an event lands in after one dispatch pass.

    all handlers succeeded            → completed
    failure, retry_count+1 < max      → pending   (retry_count + 1)
    failure, retry_count+1 >= max     → failed    (retry_count + 1)

Retry is whole-event: the next pass re-runs every matching handler.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from core.module_events.models import ModuleEventStatus


@dataclass(frozen=True)
class PassOutcome:
    status: str
    retry_count: int
    error_message: str | None
    processed_at: datetime | None

    @property
    def will_retry(self) -> bool:
        return self.status == ModuleEventStatus.PENDING


def decide_pass_outcome(
    *,
    retry_count: int,
    max_retries: int,
    failed_handlers: int,
    now: datetime,
) -> PassOutcome:
    if failed_handlers < 0:
        raise ValueError("failed_handlers must be >= 0.")

    if failed_handlers == 0:
        return PassOutcome(
            status=ModuleEventStatus.COMPLETED,
            retry_count=retry_count,
            error_message=None,
            processed_at=now,
        )

    next_retry_count = retry_count + 1
    status = (
        ModuleEventStatus.FAILED
        if next_retry_count >= max_retries
        else ModuleEventStatus.PENDING
    )
    return PassOutcome(
        status=status,
        retry_count=next_retry_count,
        error_message=f"{failed_handlers} handler(s) failed",
        processed_at=None,
    )
