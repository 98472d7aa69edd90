"""
ERP Auth - Operator Token Service
=================================
Issue and revoke operator bearer tokens.
"""

from __future__ import annotations

import hashlib
import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from django.db import IntegrityError
from django.utils import timezone

from core.auth.models import (
    TOKEN_PREFIX_LENGTH,
    AccessTokenCredential,
    AccessTokenStatus,
)


def _canonical_uuid_string(value: Any, *, field_name: str) -> str:
    try:
        return str(uuid.UUID(str(value).strip()))
    except Exception as exc:
        raise ValueError(f"{field_name} must contain valid UUID values.") from exc


def _ensure_string(value: Any, *, field_name: str) -> str:
    if not isinstance(value, str):
        raise ValueError(f"{field_name} must be a non-empty string.")
    stripped = value.strip()
    if not stripped:
        raise ValueError(f"{field_name} must be a non-empty string.")
    return stripped


def hash_token(token: str) -> str:
    value = _ensure_string(token, field_name="token")
    return hashlib.sha256(value.encode("utf-8")).hexdigest()


def normalize_allowed_tenant_ids(values: Iterable[Any]) -> tuple[str, ...]:
    if isinstance(values, (str, bytes)):
        raise ValueError("allowed_tenant_ids must be a list/tuple of UUIDs.")
    normalized = {
        _canonical_uuid_string(value, field_name="allowed_tenant_ids")
        for value in values
    }
    if not normalized:
        raise ValueError("allowed_tenant_ids must contain at least one UUID.")
    return tuple(sorted(normalized))


class AccessTokenService:
    @staticmethod
    def create_credential(
        *,
        token: str,
        operator_id: str,
        allowed_tenant_ids: Iterable[Any],
        description: str | None = None,
        expires_at: datetime | None = None,
    ) -> AccessTokenCredential:
        token = _ensure_string(token, field_name="token")
        if expires_at is not None and expires_at <= timezone.now():
            raise ValueError("expires_at must be in the future.")
        try:
            return AccessTokenCredential.objects.create(
                token_hash=hash_token(token),
                token_prefix=token[:TOKEN_PREFIX_LENGTH],
                operator_id=_ensure_string(operator_id, field_name="operator_id"),
                description="" if description is None else str(description).strip(),
                allowed_tenant_ids=list(normalize_allowed_tenant_ids(allowed_tenant_ids)),
                status=AccessTokenStatus.ACTIVE,
                expires_at=expires_at,
            )
        except IntegrityError as exc:
            raise ValueError("Token hash already exists.") from exc

    @staticmethod
    def revoke_credential(*, credential_id: uuid.UUID | str) -> AccessTokenCredential | None:
        credential = AccessTokenCredential.objects.filter(
            id=uuid.UUID(str(credential_id))
        ).first()
        if credential is None:
            return None
        if credential.status == AccessTokenStatus.REVOKED:
            return credential

        credential.status = AccessTokenStatus.REVOKED
        credential.revoked_at = timezone.now()
        credential.save(update_fields=["status", "revoked_at"])
        return credential
