from __future__ import annotations

from datetime import datetime, timezone

import pytest

from core.events.retry import decide_pass_outcome
from core.module_events.models import ModuleEventStatus

NOW = datetime(2026, 3, 1, 9, 30, tzinfo=timezone.utc)


def test_no_failures_completes_and_keeps_retry_count() -> None:
    outcome = decide_pass_outcome(retry_count=1, max_retries=3, failed_handlers=0, now=NOW)

    assert outcome.status == ModuleEventStatus.COMPLETED
    assert outcome.retry_count == 1
    assert outcome.error_message is None
    assert outcome.processed_at == NOW
    assert outcome.will_retry is False


@pytest.mark.parametrize(
    ("retry_count", "expected_status", "expected_retry_count"),
    [
        (0, ModuleEventStatus.PENDING, 1),
        (1, ModuleEventStatus.PENDING, 2),
        (2, ModuleEventStatus.FAILED, 3),
    ],
)
def test_failures_accumulate_until_max_retries(
    retry_count: int,
    expected_status: str,
    expected_retry_count: int,
) -> None:
    outcome = decide_pass_outcome(
        retry_count=retry_count,
        max_retries=3,
        failed_handlers=1,
        now=NOW,
    )

    assert outcome.status == expected_status
    assert outcome.retry_count == expected_retry_count
    assert outcome.error_message == "1 handler(s) failed"
    assert outcome.processed_at is None


def test_error_message_counts_failed_handlers() -> None:
    outcome = decide_pass_outcome(retry_count=0, max_retries=3, failed_handlers=2, now=NOW)

    assert outcome.error_message == "2 handler(s) failed"
    assert outcome.will_retry is True


def test_single_attempt_budget_fails_immediately() -> None:
    outcome = decide_pass_outcome(retry_count=0, max_retries=1, failed_handlers=1, now=NOW)

    assert outcome.status == ModuleEventStatus.FAILED
    assert outcome.retry_count == 1


def test_negative_failure_count_is_rejected() -> None:
    with pytest.raises(ValueError):
        decide_pass_outcome(retry_count=0, max_retries=3, failed_handlers=-1, now=NOW)
