"""
Cron entrypoint: sweep pending module events, or replay one by id.

Usage:
    python manage.py process_module_events
    python manage.py process_module_events --batch-size 100
    python manage.py process_module_events --event-id <uuid>
"""

from __future__ import annotations

import dataclasses
import json

from django.core.management.base import BaseCommand, CommandError

from adapters.django_api.wiring import build_dependencies
from core.events.errors import EventNotFoundError
from core.events.sweep import sweep_pending


class Command(BaseCommand):
    help = "Dispatch pending module events (or replay a single event by id)."

    def add_arguments(self, parser):
        parser.add_argument("--event-id", dest="event_id", default=None)
        parser.add_argument("--batch-size", dest="batch_size", type=int, default=None)

    def handle(self, *args, **options):
        dependencies = build_dependencies()
        dispatcher = dependencies.dispatcher

        if options["event_id"]:
            try:
                report = dispatcher.dispatch(options["event_id"])
            except (EventNotFoundError, ValueError) as exc:
                raise CommandError(str(exc)) from exc
            self.stdout.write(json.dumps(report.to_dict(), sort_keys=True))
            return

        settings = dependencies.settings
        if options["batch_size"] is not None:
            try:
                settings = dataclasses.replace(
                    settings, sweep_batch_size=options["batch_size"]
                )
            except ValueError as exc:
                raise CommandError(str(exc)) from exc

        summary = sweep_pending(dispatcher, settings)
        self.stdout.write(json.dumps(summary.to_dict(), sort_keys=True))
