"""
ERP Django Adapter Wiring
=========================
Constructs HttpApiDependencies for local/staging live runs.

This module is adapter-only glue:
- bus settings snapshot from django.conf.settings
- DB-backed bearer token identity
- in-memory stock collaborators for smoke usage
- httpx notification client when a service URL is configured
"""

from __future__ import annotations

import logging
import threading

from core.auth.provider import DbIdentityProvider
from core.events.config import BusSettings
from core.events.dispatcher import EventDispatcher
from core.events.errors import CollaboratorError
from core.http_api.dependencies import HttpApiDependencies
from engines.inventory.ports import InMemoryInventoryLookups, InMemoryStockLedger
from engines.notifications.client import HttpNotificationClient, NotificationRequest
from engines.routing import build_handler_router

logger = logging.getLogger("erp.http_api")

_DEPENDENCIES_LOCK = threading.Lock()
_DEPENDENCIES: HttpApiDependencies | None = None


class _UnconfiguredNotificationSender:
    """
    Used when NOTIFICATION_SERVICE_URL is empty.
    Every send fails, so notification deliveries are retried once configured.
    """

    def send(self, request: NotificationRequest) -> dict:
        raise CollaboratorError("Notification service URL is not configured.")


def _build_notification_sender(settings: BusSettings):
    if not settings.notification_service_url:
        logger.warning(
            "NOTIFICATION_SERVICE_URL is empty; notification deliveries will fail."
        )
        return _UnconfiguredNotificationSender()
    return HttpNotificationClient.from_settings(settings)


def _create_dependencies() -> HttpApiDependencies:
    settings = BusSettings.from_django_settings()
    router = build_handler_router(
        stock_ledger=InMemoryStockLedger(accept_unknown_orders=True),
        inventory_lookups=InMemoryInventoryLookups(),
        notification_sender=_build_notification_sender(settings),
    )
    return HttpApiDependencies(
        dispatcher=EventDispatcher(router),
        identity_provider=DbIdentityProvider(),
        settings=settings,
    )


def build_dependencies() -> HttpApiDependencies:
    """
    Lazy singleton wiring for adapter runtime.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        if _DEPENDENCIES is None:
            _DEPENDENCIES = _create_dependencies()
        return _DEPENDENCIES


def install_dependencies(dependencies: HttpApiDependencies | None) -> None:
    """
    Replace the singleton (tests, embedding). None resets to lazy wiring.
    """
    global _DEPENDENCIES
    with _DEPENDENCIES_LOCK:
        _DEPENDENCIES = dependencies
