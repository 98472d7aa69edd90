"""
ERP Module Bus — Dispatcher
=============================
Delivers one stored module event to every matching subscription.

Dispatch behavior:
1. Claim the event (conditional update; completed events are inert)
2. Resolve active subscriptions: exact topic ∪ first-segment wildcard
3. No match → completed immediately (empty fan-out is success)
4. Invoke each handler sequentially, catching failures per handler
5. Append one delivery log row per attempt
6. Finalize: completed | pending (retry) | failed

Handler failure must NOT:
- Stop the remaining subscriptions
- Roll back a sibling's effect

Failures escaping the per-handler boundary (e.g. a delivery log write)
propagate. The event then stays in processing until the sweep
releases the stale claim.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from typing import Any, Callable, Optional

from django.utils import timezone

from core.events.errors import EventNotFoundError
from core.events.results import HandlerContext
from core.events.retry import decide_pass_outcome
from core.events.router import HandlerRouter
from core.module_events import repository
from core.module_events.models import DeliveryStatus, ModuleEventStatus
from core.module_events.repository import ClaimOutcome

logger = logging.getLogger("erp.events")

MESSAGE_ALREADY_PROCESSED = "Event already processed"
MESSAGE_IN_PROGRESS = "Event already being processed"
MESSAGE_NO_SUBSCRIPTIONS = "No subscriptions matched"


@dataclass(frozen=True)
class SubscriptionOutcome:
    subscription_id: str
    handler_module: str
    status: str
    error: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        value = {
            "subscription_id": self.subscription_id,
            "handler_module": self.handler_module,
            "status": self.status,
        }
        if self.error is not None:
            value["error"] = self.error
        return value


@dataclass(frozen=True)
class DispatchReport:
    """
    What one dispatch call did.

    handlers_invoked is False for the idempotency short-circuits
    (already processed / in progress).
    """

    event_id: str
    status: str
    results: tuple[SubscriptionOutcome, ...] = field(default_factory=tuple)
    message: Optional[str] = None
    event_type: Optional[str] = None
    retry_count: Optional[int] = None
    handlers_invoked: bool = False

    def to_dict(self) -> dict[str, Any]:
        value: dict[str, Any] = {
            "event_id": self.event_id,
            "status": str(self.status),
            "results": [r.to_dict() for r in self.results],
        }
        if self.message is not None:
            value["message"] = self.message
        if self.event_type is not None:
            value["event_type"] = self.event_type
        if self.retry_count is not None:
            value["retry_count"] = self.retry_count
        return value


def coerce_event_id(event_id: Any) -> uuid.UUID:
    if isinstance(event_id, uuid.UUID):
        return event_id
    try:
        return uuid.UUID(str(event_id).strip())
    except (TypeError, ValueError, AttributeError) as exc:
        raise ValueError("event_id must be a valid UUID.") from exc


class EventDispatcher:
    """
    Orchestrates claim → fan-out → finalize for one event id per call.

    Args:
        router: HandlerRouter built at startup.
        clock:  Callable returning an aware datetime. Injected in tests.
    """

    def __init__(
        self,
        router: HandlerRouter,
        clock: Callable | None = None,
    ):
        self._router = router
        self._clock = clock or timezone.now

    @property
    def router(self) -> HandlerRouter:
        return self._router

    def dispatch(self, event_id: Any) -> DispatchReport:
        """
        Dispatch one stored event.

        Raises:
            ValueError:         event_id is not a UUID
            EventNotFoundError: event does not exist
        """
        event_id = coerce_event_id(event_id)

        claim = repository.claim_event(event_id, now=self._clock())
        if claim.outcome is ClaimOutcome.NOT_FOUND:
            raise EventNotFoundError(event_id)

        if claim.outcome is ClaimOutcome.ALREADY_COMPLETED:
            logger.debug(f"Event {event_id} already completed, skipping.")
            return DispatchReport(
                event_id=str(event_id),
                status=ModuleEventStatus.COMPLETED,
                message=MESSAGE_ALREADY_PROCESSED,
                event_type=claim.event.event_type,
            )

        if claim.outcome is ClaimOutcome.IN_PROGRESS:
            logger.info(f"Event {event_id} is claimed by another dispatch, skipping.")
            return DispatchReport(
                event_id=str(event_id),
                status=claim.event.status,
                message=MESSAGE_IN_PROGRESS,
                event_type=claim.event.event_type,
            )

        event = claim.event
        subscriptions = repository.active_subscriptions_for(event.event_type)

        if not subscriptions:
            repository.finalize_event(
                event,
                status=ModuleEventStatus.COMPLETED,
                retry_count=event.retry_count,
                error_message=None,
                processed_at=self._clock(),
            )
            logger.debug(
                f"No subscriptions for '{event.event_type}' (event_id: {event_id})"
            )
            return DispatchReport(
                event_id=str(event_id),
                status=ModuleEventStatus.COMPLETED,
                message=MESSAGE_NO_SUBSCRIPTIONS,
                event_type=event.event_type,
                retry_count=event.retry_count,
            )

        outcomes = tuple(
            self._deliver(event, subscription)
            for subscription in subscriptions
        )
        failed = sum(1 for o in outcomes if o.status == DeliveryStatus.FAILED)

        decision = decide_pass_outcome(
            retry_count=event.retry_count,
            max_retries=event.max_retries,
            failed_handlers=failed,
            now=self._clock(),
        )
        repository.finalize_event(
            event,
            status=decision.status,
            retry_count=decision.retry_count,
            error_message=decision.error_message,
            processed_at=decision.processed_at,
        )

        log = logger.warning if failed else logger.info
        log(
            f"Dispatch complete: {event.event_type} (event_id: {event_id}): "
            f"{len(outcomes) - failed} succeeded, {failed} failed → "
            f"{decision.status} (retry {decision.retry_count}/{event.max_retries})"
        )

        return DispatchReport(
            event_id=str(event_id),
            status=decision.status,
            results=outcomes,
            event_type=event.event_type,
            retry_count=decision.retry_count,
            handlers_invoked=True,
        )

    def _deliver(self, event, subscription) -> SubscriptionOutcome:
        """
        Run one subscription's handler in isolation and append its log row.

        The context is built per delivery: an unreadable payload fails
        the delivery, not the dispatch. A failing log write propagates.
        """
        subscription_id = str(subscription.id)
        try:
            context = HandlerContext.from_event(event)
            result = self._router.route(subscription.handler_module, context)
        except Exception as exc:
            error = str(exc) or type(exc).__name__
            logger.error(
                f"Handler failed: {subscription.handler_module} for "
                f"{event.event_type} (event_id: {event.id}): {error}",
                exc_info=True,
            )
            repository.record_delivery(
                event=event,
                subscription=subscription,
                status=DeliveryStatus.FAILED,
                error_message=error,
            )
            return SubscriptionOutcome(
                subscription_id=subscription_id,
                handler_module=subscription.handler_module,
                status=str(DeliveryStatus.FAILED),
                error=error,
            )

        repository.record_delivery(
            event=event,
            subscription=subscription,
            status=DeliveryStatus.SUCCESS,
            response=result.to_dict(),
        )
        logger.debug(
            f"Delivered {event.event_type} → {subscription.handler_module} "
            f"({result.kind.value}: {result.action})"
        )
        return SubscriptionOutcome(
            subscription_id=subscription_id,
            handler_module=subscription.handler_module,
            status=str(DeliveryStatus.SUCCESS),
        )
