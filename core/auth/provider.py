"""
ERP Auth - DB-backed Identity Provider
======================================
Resolves operator bearer tokens from persistent storage.

A token resolves only while ACTIVE and unexpired. Each successful
resolution stamps last_used_at.
"""

from __future__ import annotations

from django.db.models import Q
from django.utils import timezone

from core.auth.models import AccessTokenStatus
from core.auth.service import hash_token
from core.http_api.auth.provider import ACTOR_HUMAN, AuthPrincipal, IdentityProvider


class DbIdentityProvider(IdentityProvider):
    def resolve_bearer_token(self, token: str) -> AuthPrincipal | None:
        if not isinstance(token, str) or not token.strip():
            return None

        from core.auth.models import AccessTokenCredential

        now = timezone.now()
        credential = AccessTokenCredential.objects.filter(
            Q(expires_at__isnull=True) | Q(expires_at__gt=now),
            token_hash=hash_token(token),
            status=AccessTokenStatus.ACTIVE,
        ).first()
        if credential is None:
            return None

        AccessTokenCredential.objects.filter(pk=credential.pk).update(last_used_at=now)
        return AuthPrincipal(
            actor_id=credential.operator_id,
            actor_type=ACTOR_HUMAN,
            allowed_tenant_ids=tuple(credential.allowed_tenant_ids),
        )
