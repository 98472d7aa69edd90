import uuid

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):
    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="ModuleEvent",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                ("tenant_id", models.UUIDField(help_text="Tenant partition key. Always required.")),
                (
                    "source_module",
                    models.CharField(
                        help_text="Module that emitted the event (e.g. invoicing).",
                        max_length=100,
                    ),
                ),
                (
                    "event_type",
                    models.CharField(
                        help_text="Dot-namespaced topic, e.g. invoice.posted.",
                        max_length=255,
                    ),
                ),
                ("entity_type", models.CharField(blank=True, default="", max_length=100)),
                (
                    "entity_id",
                    models.CharField(
                        help_text="Identifier of the entity the event is about.",
                        max_length=255,
                    ),
                ),
                ("payload", models.JSONField(blank=True, default=dict)),
                (
                    "status",
                    models.CharField(
                        choices=[
                            ("pending", "Pending"),
                            ("processing", "Processing"),
                            ("completed", "Completed"),
                            ("failed", "Failed"),
                        ],
                        default="pending",
                        max_length=20,
                    ),
                ),
                ("retry_count", models.PositiveIntegerField(default=0)),
                ("max_retries", models.PositiveIntegerField(default=3)),
                ("processed_at", models.DateTimeField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True, null=True)),
                (
                    "claimed_at",
                    models.DateTimeField(
                        blank=True,
                        help_text="When the current processing claim was taken.",
                        null=True,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "module_events",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="ModuleEventSubscription",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "event_type_pattern",
                    models.CharField(
                        db_column="event_type",
                        help_text="Exact topic or '<namespace>.*'.",
                        max_length=255,
                    ),
                ),
                ("handler_module", models.CharField(max_length=100)),
                (
                    "handler_function",
                    models.CharField(
                        blank=True,
                        default="",
                        help_text="Descriptive label only. Routing uses handler_module.",
                        max_length=255,
                    ),
                ),
                ("is_active", models.BooleanField(default=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
            ],
            options={
                "db_table": "module_event_subscriptions",
                "ordering": ["created_at", "id"],
            },
        ),
        migrations.CreateModel(
            name="ModuleEventLog",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid.uuid4,
                        editable=False,
                        primary_key=True,
                        serialize=False,
                    ),
                ),
                (
                    "status",
                    models.CharField(
                        choices=[("success", "Success"), ("failed", "Failed")],
                        max_length=20,
                    ),
                ),
                ("response", models.JSONField(blank=True, null=True)),
                ("error_message", models.TextField(blank=True, null=True)),
                ("executed_at", models.DateTimeField(auto_now_add=True)),
                (
                    "event",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="delivery_logs",
                        to="module_events.moduleevent",
                    ),
                ),
                (
                    "subscription",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="delivery_logs",
                        to="module_events.moduleeventsubscription",
                    ),
                ),
            ],
            options={
                "db_table": "module_event_logs",
                "ordering": ["executed_at", "id"],
            },
        ),
        migrations.AddIndex(
            model_name="moduleevent",
            index=models.Index(
                fields=["tenant_id", "created_at"],
                name="idx_modevt_tenant_created",
            ),
        ),
        migrations.AddIndex(
            model_name="moduleevent",
            index=models.Index(
                fields=["status", "created_at"],
                name="idx_modevt_status_created",
            ),
        ),
        migrations.AddIndex(
            model_name="moduleevent",
            index=models.Index(fields=["event_type"], name="idx_modevt_type"),
        ),
        migrations.AddIndex(
            model_name="moduleeventsubscription",
            index=models.Index(
                fields=["is_active", "event_type_pattern"],
                name="idx_modsub_active_pattern",
            ),
        ),
        migrations.AddIndex(
            model_name="moduleeventlog",
            index=models.Index(
                fields=["event", "executed_at"],
                name="idx_modlog_event_executed",
            ),
        ),
    ]
