from __future__ import annotations

import json
import uuid
from datetime import datetime, timedelta, timezone
from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from adapters.django_api.wiring import install_dependencies
from core.events.config import BusSettings
from core.events.dispatcher import EventDispatcher
from core.events.errors import HandlerError
from core.events.results import HandlerContext, HandlerResult
from core.events.router import HandlerRouter
from core.events.sweep import sweep_pending
from core.http_api.auth.provider import InMemoryIdentityProvider
from core.http_api.dependencies import HttpApiDependencies
from core.module_events import repository
from core.module_events.models import ModuleEvent, ModuleEventStatus

pytestmark = pytest.mark.django_db(transaction=True)


TENANT_ID = uuid.uuid5(uuid.NAMESPACE_URL, "erp-sweep-tenant")
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _handler(context: HandlerContext) -> HandlerResult:
    if context.payload.get("fail"):
        raise HandlerError("downstream unavailable")
    return HandlerResult.applied("recorded")


def _router() -> HandlerRouter:
    router = HandlerRouter()
    router.register("crm", "invoice.posted", _handler)
    return router


def _emit(entity_id: str, *, fail: bool = False, max_retries: int = 3):
    return repository.emit_module_event(
        tenant_id=TENANT_ID,
        source_module="invoicing",
        event_type="invoice.posted",
        entity_type="invoice",
        entity_id=entity_id,
        payload={"fail": fail},
        max_retries=max_retries,
    )


@pytest.fixture
def subscribed():
    return repository.register_subscription("invoice.posted", "crm")


def test_sweep_dispatches_pending_events_and_counts_outcomes(subscribed) -> None:
    ok = _emit("INV-OK")
    retry = _emit("INV-RETRY", fail=True)
    exhausted = _emit("INV-LAST", fail=True, max_retries=1)

    summary = sweep_pending(EventDispatcher(_router()), BusSettings())

    assert summary.attempted == 3
    assert summary.completed == 1
    assert summary.retried == 1
    assert summary.failed == 1
    assert summary.errors == []
    assert ModuleEvent.objects.get(pk=ok.pk).status == ModuleEventStatus.COMPLETED
    assert ModuleEvent.objects.get(pk=retry.pk).status == ModuleEventStatus.PENDING
    assert ModuleEvent.objects.get(pk=exhausted.pk).status == ModuleEventStatus.FAILED


def test_sweep_never_picks_up_failed_events(subscribed) -> None:
    event = _emit("INV-1")
    ModuleEvent.objects.filter(pk=event.pk).update(status=ModuleEventStatus.FAILED)

    summary = sweep_pending(EventDispatcher(_router()), BusSettings())

    assert summary.attempted == 0
    assert ModuleEvent.objects.get(pk=event.pk).status == ModuleEventStatus.FAILED


def test_sweep_respects_batch_size(subscribed) -> None:
    for index in range(3):
        _emit(f"INV-{index}")

    summary = sweep_pending(EventDispatcher(_router()), BusSettings(sweep_batch_size=2))

    assert summary.attempted == 2
    assert ModuleEvent.objects.filter(status=ModuleEventStatus.PENDING).count() == 1


def test_sweep_releases_stale_claims_before_dispatching(subscribed) -> None:
    event = _emit("INV-STUCK")
    repository.claim_event(event.id, now=NOW - timedelta(hours=2))

    summary = sweep_pending(
        EventDispatcher(_router()),
        BusSettings(stale_claim_seconds=900),
        now=NOW,
    )

    assert summary.released == 1
    assert summary.completed == 1
    assert ModuleEvent.objects.get(pk=event.pk).status == ModuleEventStatus.COMPLETED


def test_one_system_error_does_not_stop_the_sweep(subscribed, monkeypatch) -> None:
    first = _emit("INV-1")
    second = _emit("INV-2")
    dispatcher = EventDispatcher(_router())
    original_dispatch = dispatcher.dispatch

    def _dispatch(event_id):
        if event_id == first.id:
            raise RuntimeError("database hiccup")
        return original_dispatch(event_id)

    monkeypatch.setattr(dispatcher, "dispatch", _dispatch)

    summary = sweep_pending(dispatcher, BusSettings())

    assert summary.attempted == 2
    assert summary.completed == 1
    assert len(summary.errors) == 1
    assert "database hiccup" in summary.errors[0]
    assert ModuleEvent.objects.get(pk=second.pk).status == ModuleEventStatus.COMPLETED


# ══════════════════════════════════════════════════════════════
# MANAGEMENT COMMAND
# ══════════════════════════════════════════════════════════════

@pytest.fixture
def installed_dependencies():
    install_dependencies(
        HttpApiDependencies(
            dispatcher=EventDispatcher(_router()),
            identity_provider=InMemoryIdentityProvider(),
            settings=BusSettings(),
        )
    )
    yield
    install_dependencies(None)


def test_process_module_events_command_runs_a_sweep(subscribed, installed_dependencies) -> None:
    _emit("INV-1")
    _emit("INV-2", fail=True)
    out = StringIO()

    call_command("process_module_events", stdout=out)

    summary = json.loads(out.getvalue())
    assert summary["attempted"] == 2
    assert summary["completed"] == 1
    assert summary["retried"] == 1


def test_process_module_events_command_replays_one_event(
    subscribed,
    installed_dependencies,
) -> None:
    event = _emit("INV-1")
    ModuleEvent.objects.filter(pk=event.pk).update(status=ModuleEventStatus.FAILED)
    out = StringIO()

    call_command("process_module_events", "--event-id", str(event.id), stdout=out)

    report = json.loads(out.getvalue())
    assert report["event_id"] == str(event.id)
    assert report["status"] == "completed"


def test_process_module_events_command_rejects_unknown_event(installed_dependencies) -> None:
    with pytest.raises(CommandError):
        call_command("process_module_events", "--event-id", str(uuid.uuid4()))
