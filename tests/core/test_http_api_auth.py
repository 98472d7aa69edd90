from __future__ import annotations

import uuid

import pytest

from core.http_api.auth import (
    SYSTEM_PRINCIPAL,
    AuthFailure,
    AuthPrincipal,
    InMemoryIdentityProvider,
    authenticate_request,
)

TENANT_ID = uuid.uuid5(uuid.NAMESPACE_URL, "erp-http-auth-tenant")
OTHER_TENANT_ID = uuid.uuid5(uuid.NAMESPACE_URL, "erp-http-auth-other-tenant")
INTERNAL_SECRET = "internal-secret-value"
USER_TOKEN = "user-token-1"


def _provider() -> InMemoryIdentityProvider:
    return InMemoryIdentityProvider(
        {
            USER_TOKEN: AuthPrincipal(
                actor_id="user-1",
                actor_type="HUMAN",
                allowed_tenant_ids=(str(TENANT_ID),),
            )
        }
    )


def test_internal_secret_resolves_to_system_principal() -> None:
    principal = authenticate_request(
        {"X-Internal-Secret": INTERNAL_SECRET},
        _provider(),
        internal_secret=INTERNAL_SECRET,
    )

    assert principal is SYSTEM_PRINCIPAL
    assert principal.is_system is True
    assert principal.can_access_tenant(OTHER_TENANT_ID) is True


def test_bearer_token_resolves_to_user_principal() -> None:
    principal = authenticate_request(
        {"Authorization": f"Bearer {USER_TOKEN}"},
        _provider(),
        internal_secret=INTERNAL_SECRET,
    )

    assert isinstance(principal, AuthPrincipal)
    assert principal.actor_id == "user-1"
    assert principal.can_access_tenant(TENANT_ID) is True
    assert principal.can_access_tenant(OTHER_TENANT_ID) is False


def test_header_names_are_case_insensitive() -> None:
    principal = authenticate_request(
        {"authorization": f"bearer {USER_TOKEN}"},
        _provider(),
        internal_secret=INTERNAL_SECRET,
    )

    assert isinstance(principal, AuthPrincipal)


@pytest.mark.parametrize(
    "headers",
    [
        {},
        None,
        {"X-Internal-Secret": "wrong-secret"},
        {"Authorization": "Bearer unknown-token"},
        {"Authorization": f"Basic {USER_TOKEN}"},
        {"Authorization": "Bearer "},
    ],
)
def test_missing_or_invalid_credentials_fail(headers) -> None:
    outcome = authenticate_request(headers, _provider(), internal_secret=INTERNAL_SECRET)

    assert isinstance(outcome, AuthFailure)
    assert outcome.code == "UNAUTHORIZED"


def test_wrong_secret_falls_through_to_bearer_token() -> None:
    principal = authenticate_request(
        {"X-Internal-Secret": "wrong", "Authorization": f"Bearer {USER_TOKEN}"},
        _provider(),
        internal_secret=INTERNAL_SECRET,
    )

    assert isinstance(principal, AuthPrincipal)
    assert principal.is_system is False


def test_empty_configured_secret_disables_secret_path() -> None:
    outcome = authenticate_request(
        {"X-Internal-Secret": ""},
        _provider(),
        internal_secret="",
    )

    assert isinstance(outcome, AuthFailure)


def test_principal_normalizes_tenant_ids() -> None:
    principal = AuthPrincipal(
        actor_id="user-2",
        actor_type="HUMAN",
        allowed_tenant_ids=(str(TENANT_ID).upper(), str(TENANT_ID)),
    )

    assert principal.allowed_tenant_ids == (str(TENANT_ID),)


def test_principal_rejects_unknown_actor_type() -> None:
    with pytest.raises(ValueError):
        AuthPrincipal(actor_id="x", actor_type="ROBOT")
