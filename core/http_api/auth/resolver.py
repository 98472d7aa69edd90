"""
ERP HTTP API Auth - Request Authentication
==========================================
Two accepted credentials, checked in order:

1. X-Internal-Secret equal to the configured shared secret
   (system-to-system calls, e.g. the cron sweep or another service)
2. Authorization: Bearer <token> resolvable to an active user

Anything else is unauthenticated. An empty configured secret
disables path 1.
"""

from __future__ import annotations

import hmac
import logging
from dataclasses import dataclass
from typing import Any

from core.http_api.auth.provider import SYSTEM_PRINCIPAL, AuthPrincipal

logger = logging.getLogger("erp.auth")

HEADER_AUTHORIZATION = "authorization"
HEADER_INTERNAL_SECRET = "x-internal-secret"
BEARER_PREFIX = "bearer "


@dataclass(frozen=True)
class AuthFailure:
    code: str
    message: str


def _normalize_headers(headers: dict[str, Any] | None) -> dict[str, str]:
    normalized: dict[str, str] = {}
    for key, value in (headers or {}).items():
        normalized_key = str(key).strip().lower()
        normalized_value = str(value).strip()
        normalized[normalized_key] = normalized_value
    return normalized


def _bearer_token(authorization: str | None) -> str | None:
    if not authorization:
        return None
    if not authorization.lower().startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def authenticate_request(
    headers: dict[str, Any] | None,
    identity_provider,
    *,
    internal_secret: str,
) -> AuthPrincipal | AuthFailure:
    normalized_headers = _normalize_headers(headers)

    presented_secret = normalized_headers.get(HEADER_INTERNAL_SECRET)
    if presented_secret and internal_secret:
        if hmac.compare_digest(presented_secret.encode("utf-8"), internal_secret.encode("utf-8")):
            return SYSTEM_PRINCIPAL
        logger.warning("Rejected request with invalid internal secret.")

    token = _bearer_token(normalized_headers.get(HEADER_AUTHORIZATION))
    if token is not None:
        principal = identity_provider.resolve_bearer_token(token)
        if principal is not None:
            return principal
        return AuthFailure("UNAUTHORIZED", "Invalid or expired bearer token.")

    return AuthFailure("UNAUTHORIZED", "Unauthorized")
