"""
ERP HTTP API - Contracts
========================
Framework-agnostic request/response DTOs for module event endpoints.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from typing import Any, Optional

from core.module_events.models import ModuleEventStatus


def _parse_uuid(value: Any, field_name: str) -> uuid.UUID:
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value).strip())
    except Exception as exc:
        raise ValueError(f"{field_name} must be a valid UUID.") from exc


@dataclass(frozen=True)
class ProcessEventRequest:
    event_id: uuid.UUID

    @classmethod
    def from_body(cls, body: dict[str, Any]) -> "ProcessEventRequest":
        raw = body.get("event_id")
        if raw is None or raw == "":
            raise ValueError("event_id is required")
        return cls(event_id=_parse_uuid(raw, "event_id"))


@dataclass(frozen=True)
class EventListRequest:
    tenant_id: uuid.UUID
    status: Optional[str] = None
    source_module: Optional[str] = None
    search: Optional[str] = None
    limit: int = 100

    def __post_init__(self):
        if not isinstance(self.tenant_id, uuid.UUID):
            raise ValueError("tenant_id must be UUID.")
        if self.status is not None and self.status not in ModuleEventStatus.values:
            raise ValueError(
                f"status must be one of {', '.join(ModuleEventStatus.values)}."
            )
        if not 1 <= self.limit <= 500:
            raise ValueError("limit must be between 1 and 500.")

    @classmethod
    def from_query(cls, query: dict[str, Any]) -> "EventListRequest":
        tenant_raw = query.get("tenant_id")
        if not tenant_raw:
            raise ValueError("tenant_id is required.")
        try:
            limit = int(query.get("limit") or 100)
        except (TypeError, ValueError) as exc:
            raise ValueError("limit must be an integer.") from exc
        return cls(
            tenant_id=_parse_uuid(tenant_raw, "tenant_id"),
            status=query.get("status") or None,
            source_module=query.get("source_module") or None,
            search=query.get("search") or None,
            limit=limit,
        )


@dataclass(frozen=True)
class EventLogsRequest:
    tenant_id: uuid.UUID
    event_id: uuid.UUID

    @classmethod
    def from_query(cls, event_id: Any, query: dict[str, Any]) -> "EventLogsRequest":
        tenant_raw = query.get("tenant_id")
        if not tenant_raw:
            raise ValueError("tenant_id is required.")
        return cls(
            tenant_id=_parse_uuid(tenant_raw, "tenant_id"),
            event_id=_parse_uuid(event_id, "event_id"),
        )


@dataclass(frozen=True)
class HttpApiErrorBody:
    code: str
    message: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": dict(self.details),
        }


@dataclass(frozen=True)
class HttpApiResult:
    """Status code plus JSON body, handed to the framework adapter."""

    status: int
    body: dict[str, Any]
