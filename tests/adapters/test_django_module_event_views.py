from __future__ import annotations

import json
import uuid

import pytest
from django.test import Client

from adapters.django_api.wiring import build_dependencies, install_dependencies
from core.events.config import BusSettings
from core.events.dispatcher import EventDispatcher
from core.events.results import HandlerContext, HandlerResult
from core.events.router import HandlerRouter
from core.http_api.auth import InMemoryIdentityProvider
from core.http_api.dependencies import HttpApiDependencies
from core.module_events import repository

pytestmark = pytest.mark.django_db(transaction=True)


TENANT_ID = uuid.uuid5(uuid.NAMESPACE_URL, "erp-django-views-tenant")
INTERNAL_SECRET = "django-views-secret"
PROCESS_URL = "/v1/module-events/process"


def _record(context: HandlerContext) -> HandlerResult:
    return HandlerResult.applied("recorded")


@pytest.fixture
def dependencies():
    router = HandlerRouter()
    router.register("crm", "invoice.posted", _record)
    deps = HttpApiDependencies(
        dispatcher=EventDispatcher(router),
        identity_provider=InMemoryIdentityProvider(),
        settings=BusSettings(internal_service_secret=INTERNAL_SECRET),
    )
    install_dependencies(deps)
    yield deps
    install_dependencies(None)


def _emit():
    return repository.emit_module_event(
        tenant_id=TENANT_ID,
        source_module="invoicing",
        event_type="invoice.posted",
        entity_type="invoice",
        entity_id="INV-1",
    )


def _post(client: Client, body, **headers):
    data = body if isinstance(body, str) else json.dumps(body)
    return client.post(PROCESS_URL, data=data, content_type="application/json", **headers)


def test_process_view_dispatches_event(dependencies) -> None:
    repository.register_subscription("invoice.posted", "crm")
    event = _emit()

    response = _post(
        Client(),
        {"event_id": str(event.id)},
        HTTP_X_INTERNAL_SECRET=INTERNAL_SECRET,
    )

    assert response.status_code == 200
    payload = response.json()
    assert payload["ok"] is True
    assert payload["status"] == "completed"
    assert payload["results"][0]["handler_module"] == "crm"
    assert response["Access-Control-Allow-Origin"] == "*"


def test_process_view_requires_credentials(dependencies) -> None:
    event = _emit()

    response = _post(Client(), {"event_id": str(event.id)})

    assert response.status_code == 401
    assert response.json()["error"]["code"] == "UNAUTHORIZED"


def test_process_view_checks_credentials_before_body(dependencies) -> None:
    response = _post(Client(), "{not json")

    assert response.status_code == 401


def test_process_view_rejects_invalid_json(dependencies) -> None:
    response = _post(Client(), "{not json", HTTP_X_INTERNAL_SECRET=INTERNAL_SECRET)

    assert response.status_code == 400
    assert response.json()["error"]["message"] == "Request body must be valid JSON."


def test_process_view_returns_404_for_unknown_event(dependencies) -> None:
    response = _post(
        Client(),
        {"event_id": str(uuid.uuid4())},
        HTTP_X_INTERNAL_SECRET=INTERNAL_SECRET,
    )

    assert response.status_code == 404


def test_process_view_answers_cors_preflight(dependencies) -> None:
    response = Client().options(PROCESS_URL)

    assert response.status_code == 200
    assert "x-internal-secret" in response["Access-Control-Allow-Headers"]


def test_process_view_rejects_get(dependencies) -> None:
    response = Client().get(PROCESS_URL)

    assert response.status_code == 405
    assert response.json()["error"]["code"] == "METHOD_NOT_ALLOWED"


def test_list_and_logs_views(dependencies) -> None:
    repository.register_subscription("invoice.posted", "crm")
    event = _emit()
    client = Client()
    _post(client, {"event_id": str(event.id)}, HTTP_X_INTERNAL_SECRET=INTERNAL_SECRET)

    listing = client.get(
        "/v1/module-events",
        {"tenant_id": str(TENANT_ID), "status": "completed"},
        HTTP_X_INTERNAL_SECRET=INTERNAL_SECRET,
    )
    logs = client.get(
        f"/v1/module-events/{event.id}/logs",
        {"tenant_id": str(TENANT_ID)},
        HTTP_X_INTERNAL_SECRET=INTERNAL_SECRET,
    )

    assert listing.status_code == 200
    assert [item["id"] for item in listing.json()["items"]] == [str(event.id)]
    assert logs.status_code == 200
    assert logs.json()["items"][0]["status"] == "success"


def test_lazy_wiring_builds_from_django_settings(settings) -> None:
    settings.INTERNAL_SERVICE_SECRET = "from-settings"
    settings.NOTIFICATION_SERVICE_URL = ""
    install_dependencies(None)
    try:
        deps = build_dependencies()
        assert deps.settings.internal_service_secret == "from-settings"
        assert ("inventory", "invoice.posted") in deps.dispatcher.router.routes()
        assert build_dependencies() is deps
    finally:
        install_dependencies(None)


def test_lazy_wiring_completes_sales_order_events(settings) -> None:
    settings.NOTIFICATION_SERVICE_URL = ""
    install_dependencies(None)
    try:
        deps = build_dependencies()
        repository.register_subscription("sales_order.*", "inventory")
        confirmed = repository.emit_module_event(
            tenant_id=TENANT_ID,
            source_module="sales",
            event_type="sales_order.confirmed",
            entity_type="sales_order",
            entity_id="SO-1",
        )

        report = deps.dispatcher.dispatch(confirmed.id)

        assert report.status == "completed"
        assert report.results[0].status == "success"
    finally:
        install_dependencies(None)
