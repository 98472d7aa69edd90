"""
ERP Module Bus — Runtime Settings
===================================
Snapshot of the Django settings the bus reads.

Core code receives a BusSettings instance; only from_django_settings()
touches django.conf.
"""

from __future__ import annotations

from dataclasses import dataclass

DEFAULT_MAX_RETRIES = 3
DEFAULT_SWEEP_BATCH_SIZE = 50
DEFAULT_STALE_CLAIM_SECONDS = 900
DEFAULT_NOTIFICATION_TIMEOUT_SECONDS = 10.0


@dataclass(frozen=True)
class BusSettings:
    internal_service_secret: str = ""
    notification_service_url: str = ""
    notification_service_key: str = ""
    notification_timeout_seconds: float = DEFAULT_NOTIFICATION_TIMEOUT_SECONDS
    default_max_retries: int = DEFAULT_MAX_RETRIES
    sweep_batch_size: int = DEFAULT_SWEEP_BATCH_SIZE
    stale_claim_seconds: int = DEFAULT_STALE_CLAIM_SECONDS

    def __post_init__(self):
        if self.default_max_retries < 1:
            raise ValueError("default_max_retries must be >= 1.")
        if self.sweep_batch_size < 1:
            raise ValueError("sweep_batch_size must be >= 1.")
        if self.stale_claim_seconds < 1:
            raise ValueError("stale_claim_seconds must be >= 1.")
        if self.notification_timeout_seconds <= 0:
            raise ValueError("notification_timeout_seconds must be positive.")

    @classmethod
    def from_django_settings(cls) -> "BusSettings":
        from django.conf import settings

        return cls(
            internal_service_secret=getattr(settings, "INTERNAL_SERVICE_SECRET", ""),
            notification_service_url=getattr(settings, "NOTIFICATION_SERVICE_URL", ""),
            notification_service_key=getattr(settings, "NOTIFICATION_SERVICE_KEY", ""),
            notification_timeout_seconds=float(
                getattr(
                    settings,
                    "NOTIFICATION_TIMEOUT_SECONDS",
                    DEFAULT_NOTIFICATION_TIMEOUT_SECONDS,
                )
            ),
            default_max_retries=int(
                getattr(settings, "MODULE_EVENTS_DEFAULT_MAX_RETRIES", DEFAULT_MAX_RETRIES)
            ),
            sweep_batch_size=int(
                getattr(settings, "MODULE_EVENTS_SWEEP_BATCH_SIZE", DEFAULT_SWEEP_BATCH_SIZE)
            ),
            stale_claim_seconds=int(
                getattr(
                    settings,
                    "MODULE_EVENTS_STALE_CLAIM_SECONDS",
                    DEFAULT_STALE_CLAIM_SECONDS,
                )
            ),
        )
