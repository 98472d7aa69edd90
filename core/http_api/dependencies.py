"""
ERP HTTP API - Dependencies
===========================
Injected collaborators for handler wiring.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.events.config import BusSettings
from core.events.dispatcher import EventDispatcher
from core.http_api.auth.provider import IdentityProvider


@dataclass(frozen=True)
class HttpApiDependencies:
    dispatcher: EventDispatcher
    identity_provider: IdentityProvider
    settings: BusSettings
