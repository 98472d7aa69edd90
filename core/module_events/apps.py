"""
ERP Core — Module Events App Configuration
============================================
Durable storage for the module event bus:

- module_events               one row per occurrence
- module_event_subscriptions  topic pattern → handler module
- module_event_logs           append-only delivery attempts

This app does NOT:
- Decide which handler runs (core.events.router)
- Orchestrate delivery (core.events.dispatcher)
"""

from django.apps import AppConfig


class ModuleEventsConfig(AppConfig):
    default_auto_field = "django.db.models.BigAutoField"
    name = "core.module_events"
    label = "module_events"
    verbose_name = "ERP Module Events"
