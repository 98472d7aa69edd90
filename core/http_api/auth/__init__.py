"""
ERP HTTP API Auth - Public API
==============================
"""

from core.http_api.auth.provider import (
    SYSTEM_PRINCIPAL,
    AuthPrincipal,
    IdentityProvider,
    InMemoryIdentityProvider,
)
from core.http_api.auth.resolver import AuthFailure, authenticate_request

__all__ = [
    "AuthFailure",
    "AuthPrincipal",
    "IdentityProvider",
    "InMemoryIdentityProvider",
    "SYSTEM_PRINCIPAL",
    "authenticate_request",
]
