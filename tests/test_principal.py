from __future__ import annotations

import pytest
from fastapi import HTTPException

from textpost.core.dependencies import resolve_principal
from textpost.core.principal import PasswordPrincipal, ProviderPrincipal
from textpost.modules.auth.passwords import hash_password, verify_password


def test_password_principal_filters_on_username() -> None:
    p = PasswordPrincipal(username="alice")
    assert p.provider == "password"
    assert p.display_name == "alice"
    assert p.author_fields() == {"username": "alice"}
    assert p.owner_filter() == {"username": "alice"}


def test_provider_principal_filters_on_user_id() -> None:
    p = ProviderPrincipal(user_id="u-1", email="carol@example.com")
    assert p.provider == "supabase"
    assert p.display_name == "carol@example.com"
    assert p.author_fields() == {"user_id": "u-1", "email": "carol@example.com"}
    assert p.owner_filter() == {"user_id": "u-1"}


def test_bearer_wins_over_body_username() -> None:
    bearer = ProviderPrincipal(user_id="u-1", email="carol@example.com")
    assert resolve_principal(bearer, "alice") is bearer
    assert resolve_principal(None, "alice") == PasswordPrincipal(username="alice")


def test_no_identity_is_400() -> None:
    with pytest.raises(HTTPException) as exc:
        resolve_principal(None, "")
    assert exc.value.status_code == 400


def test_password_hash_roundtrip() -> None:
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)


def test_malformed_hash_is_a_mismatch() -> None:
    assert not verify_password("secret123", "secret123")
