"""
ERP Auth - Operator Access Tokens
=================================
Bearer tokens for operators who replay and monitor module events.

Only the sha256 hash is stored. token_prefix keeps the first characters
of the raw token so an operator can tell their tokens apart in listings.
A token resolves while ACTIVE and before expires_at (if set).
"""

from __future__ import annotations

import uuid

from django.db import models

TOKEN_PREFIX_LENGTH = 8


class AccessTokenStatus(models.TextChoices):
    ACTIVE = "ACTIVE", "Active"
    REVOKED = "REVOKED", "Revoked"


class AccessTokenCredential(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    token_hash = models.CharField(max_length=64, unique=True)
    token_prefix = models.CharField(max_length=TOKEN_PREFIX_LENGTH)
    operator_id = models.CharField(max_length=255, db_index=True)
    description = models.TextField(blank=True, default="")

    # Tenants whose module events this operator may dispatch and read.
    allowed_tenant_ids = models.JSONField(default=list)

    status = models.CharField(
        max_length=20,
        choices=AccessTokenStatus.choices,
        default=AccessTokenStatus.ACTIVE,
    )
    expires_at = models.DateTimeField(null=True, blank=True)
    last_used_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    revoked_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        db_table = "erp_operator_tokens"
        ordering = ["operator_id", "created_at"]

    def __str__(self) -> str:
        return f"{self.operator_id} {self.token_prefix}... ({self.status})"
