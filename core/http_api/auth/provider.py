"""
ERP HTTP API Auth - Provider and Principal Models
=================================================
Deterministic bearer-token principal resolution.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Mapping, Protocol

ACTOR_HUMAN = "HUMAN"
ACTOR_SYSTEM = "SYSTEM"


def _canonical_uuid_string(value: str, *, field_name: str) -> str:
    try:
        return str(uuid.UUID(str(value).strip()))
    except Exception as exc:
        raise ValueError(f"{field_name} must be a valid UUID string.") from exc


def _normalize_uuid_tuple(values, *, field_name: str) -> tuple[str, ...]:
    normalized = {
        _canonical_uuid_string(value, field_name=field_name) for value in values
    }
    return tuple(sorted(normalized))


@dataclass(frozen=True)
class AuthPrincipal:
    """
    Authenticated caller.

    SYSTEM principals (internal secret) may act on any tenant.
    HUMAN principals only on allowed_tenant_ids.
    """

    actor_id: str
    actor_type: str
    allowed_tenant_ids: tuple[str, ...] = ()

    def __post_init__(self):
        if not self.actor_id or not isinstance(self.actor_id, str):
            raise ValueError("actor_id must be a non-empty string.")
        if self.actor_type not in (ACTOR_HUMAN, ACTOR_SYSTEM):
            raise ValueError("actor_type must be HUMAN or SYSTEM.")
        if not isinstance(self.allowed_tenant_ids, tuple):
            raise ValueError("allowed_tenant_ids must be a tuple.")
        object.__setattr__(
            self,
            "allowed_tenant_ids",
            _normalize_uuid_tuple(self.allowed_tenant_ids, field_name="allowed_tenant_ids"),
        )

    @property
    def is_system(self) -> bool:
        return self.actor_type == ACTOR_SYSTEM

    def can_access_tenant(self, tenant_id: uuid.UUID) -> bool:
        if self.is_system:
            return True
        return str(tenant_id) in self.allowed_tenant_ids


SYSTEM_PRINCIPAL = AuthPrincipal(actor_id="system:internal", actor_type=ACTOR_SYSTEM)


class IdentityProvider(Protocol):
    def resolve_bearer_token(self, token: str) -> AuthPrincipal | None:
        ...


class InMemoryIdentityProvider:
    """
    Deterministic in-memory identity provider for tests/bootstrap.
    """

    def __init__(self, token_to_principal: Mapping[str, AuthPrincipal] | None = None):
        normalized: dict[str, AuthPrincipal] = {}
        for token, principal in sorted(
            dict(token_to_principal or {}).items(),
            key=lambda item: item[0],
        ):
            if not isinstance(token, str) or not token.strip():
                raise ValueError("Token must be a non-empty string.")
            if not isinstance(principal, AuthPrincipal):
                raise ValueError("Principal must be AuthPrincipal.")
            normalized[token] = principal
        self._token_to_principal = normalized

    def resolve_bearer_token(self, token: str) -> AuthPrincipal | None:
        if not isinstance(token, str):
            return None
        return self._token_to_principal.get(token)
