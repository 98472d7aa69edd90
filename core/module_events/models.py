"""
ERP Module Events — Models
============================
Three tables back the module event bus.

RULES:
- ModuleEvent status moves pending → processing → {completed | pending | failed}
- A completed event is permanently inert
- Only the dispatcher mutates ModuleEvent status
- ModuleEventLog is append-only: no updates, no deletes
- tenant_id is an opaque partition key on every tenant-owned row
"""

import uuid

from django.db import models


# ══════════════════════════════════════════════════════════════
# ENUMS
# ══════════════════════════════════════════════════════════════

class ModuleEventStatus(models.TextChoices):
    PENDING = "pending", "Pending"
    PROCESSING = "processing", "Processing"
    COMPLETED = "completed", "Completed"
    FAILED = "failed", "Failed"


class DeliveryStatus(models.TextChoices):
    SUCCESS = "success", "Success"
    FAILED = "failed", "Failed"


# Statuses from which a dispatch may claim the event.
# failed is claimable for manual replay; the sweep only selects pending.
CLAIMABLE_STATUSES = (ModuleEventStatus.PENDING, ModuleEventStatus.FAILED)


# ══════════════════════════════════════════════════════════════
# EVENT RECORD
# ══════════════════════════════════════════════════════════════

class ModuleEvent(models.Model):
    """
    One occurrence in some business module, with its routing key
    and processing status.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    tenant_id = models.UUIDField(
        help_text="Tenant partition key. Always required.",
    )

    source_module = models.CharField(
        max_length=100,
        help_text="Module that emitted the event (e.g. invoicing).",
    )

    event_type = models.CharField(
        max_length=255,
        help_text="Dot-namespaced topic, e.g. invoice.posted.",
    )

    entity_type = models.CharField(max_length=100, blank=True, default="")

    entity_id = models.CharField(
        max_length=255,
        help_text="Identifier of the entity the event is about.",
    )

    payload = models.JSONField(default=dict, blank=True)

    status = models.CharField(
        max_length=20,
        choices=ModuleEventStatus.choices,
        default=ModuleEventStatus.PENDING,
    )

    retry_count = models.PositiveIntegerField(default=0)
    max_retries = models.PositiveIntegerField(default=3)

    processed_at = models.DateTimeField(null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)

    claimed_at = models.DateTimeField(
        null=True,
        blank=True,
        help_text="When the current processing claim was taken.",
    )

    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "module_events"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["tenant_id", "created_at"],
                name="idx_modevt_tenant_created",
            ),
            models.Index(
                fields=["status", "created_at"],
                name="idx_modevt_status_created",
            ),
            models.Index(fields=["event_type"], name="idx_modevt_type"),
        ]

    @property
    def is_completed(self) -> bool:
        return self.status == ModuleEventStatus.COMPLETED

    def __str__(self):
        return f"[{self.event_type}] {self.id} ({self.status})"


# ══════════════════════════════════════════════════════════════
# SUBSCRIPTION REGISTRY
# ══════════════════════════════════════════════════════════════

class ModuleEventSubscription(models.Model):
    """
    A handler module's standing interest in a topic pattern.

    Maintained by system configuration. Read-only for the dispatcher.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    event_type_pattern = models.CharField(
        max_length=255,
        db_column="event_type",
        help_text="Exact topic or '<namespace>.*'.",
    )

    handler_module = models.CharField(max_length=100)

    handler_function = models.CharField(
        max_length=255,
        blank=True,
        default="",
        help_text="Descriptive label only. Routing uses handler_module.",
    )

    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "module_event_subscriptions"
        ordering = ["created_at", "id"]
        indexes = [
            models.Index(
                fields=["is_active", "event_type_pattern"],
                name="idx_modsub_active_pattern",
            ),
        ]

    def __str__(self):
        return f"{self.event_type_pattern} → {self.handler_module}"


# ══════════════════════════════════════════════════════════════
# DELIVERY LOG
# ══════════════════════════════════════════════════════════════

class ModuleEventLog(models.Model):
    """
    One attempt to run one subscription's handler for one event.

    Multiple rows per (event, subscription) accumulate across retries.
    """

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)

    event = models.ForeignKey(
        ModuleEvent,
        on_delete=models.PROTECT,
        related_name="delivery_logs",
    )

    subscription = models.ForeignKey(
        ModuleEventSubscription,
        on_delete=models.PROTECT,
        related_name="delivery_logs",
    )

    status = models.CharField(max_length=20, choices=DeliveryStatus.choices)
    response = models.JSONField(null=True, blank=True)
    error_message = models.TextField(null=True, blank=True)
    executed_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = "module_event_logs"
        ordering = ["executed_at", "id"]
        indexes = [
            models.Index(
                fields=["event", "executed_at"],
                name="idx_modlog_event_executed",
            ),
        ]

    def save(self, *args, **kwargs):
        """GUARD: INSERT only."""
        if not self._state.adding:
            raise PermissionError(
                "Delivery log entries are append-only and cannot be updated."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise PermissionError("Delivery log entries are never deleted.")

    def __str__(self):
        return f"{self.event_id} × {self.subscription_id} ({self.status})"
