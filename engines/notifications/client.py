"""
ERP Notifications — Collaborator Client
=========================================
Forwards a notification request to the notification service over HTTP.

Delivery itself (in-app, email, preferences) is the service's concern.
The bus only needs: request in, JSON response out, failure raised.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Optional, Protocol, Tuple, Union

import httpx

from core.events.config import BusSettings
from core.events.errors import CollaboratorError

logger = logging.getLogger("erp.notifications")

ALL_TENANT_MEMBERS = "all_tenant_members"


@dataclass(frozen=True)
class NotificationRequest:
    tenant_id: uuid.UUID
    target_user_ids: Union[str, Tuple[str, ...]]
    type: str
    category: str
    title: str
    message: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None

    def __post_init__(self):
        if not isinstance(self.tenant_id, uuid.UUID):
            raise ValueError("tenant_id must be UUID.")
        if isinstance(self.target_user_ids, str):
            if self.target_user_ids != ALL_TENANT_MEMBERS:
                raise ValueError(
                    f"target_user_ids must be '{ALL_TENANT_MEMBERS}' or a tuple of ids."
                )
        elif not isinstance(self.target_user_ids, tuple) or not self.target_user_ids:
            raise ValueError("target_user_ids must be a non-empty tuple.")
        if not self.title:
            raise ValueError("title must be a non-empty string.")

    def to_dict(self) -> dict[str, Any]:
        targets = (
            self.target_user_ids
            if isinstance(self.target_user_ids, str)
            else list(self.target_user_ids)
        )
        return {
            "tenant_id": str(self.tenant_id),
            "target_user_ids": targets,
            "type": self.type,
            "category": self.category,
            "title": self.title,
            "message": self.message,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
        }


class NotificationSender(Protocol):
    def send(self, request: NotificationRequest) -> dict[str, Any]:
        ...


class HttpNotificationClient:
    """
    POST {base_url}/create-notification with a bearer service key.

    Transport errors and non-2xx responses raise CollaboratorError,
    so the delivery is logged as failed and the event is retried.
    """

    def __init__(
        self,
        base_url: str,
        service_key: str,
        *,
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ):
        if not base_url:
            raise ValueError("base_url is required.")
        self._url = base_url.rstrip("/") + "/create-notification"
        self._service_key = service_key
        self._client = client or httpx.Client(timeout=timeout)

    @classmethod
    def from_settings(cls, settings: BusSettings) -> "HttpNotificationClient":
        return cls(
            settings.notification_service_url,
            settings.notification_service_key,
            timeout=settings.notification_timeout_seconds,
        )

    def send(self, request: NotificationRequest) -> dict[str, Any]:
        try:
            resp = self._client.post(
                self._url,
                json=request.to_dict(),
                headers={"Authorization": f"Bearer {self._service_key}"},
            )
        except httpx.HTTPError as exc:
            logger.warning(f"Notification request failed: {exc}")
            raise CollaboratorError(f"Notification request failed: {exc}") from exc

        if resp.is_error:
            raise CollaboratorError(
                f"Notification service returned {resp.status_code}: {resp.text[:200]}"
            )

        try:
            data = resp.json() if resp.content else {}
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {"response": data}
        return data
