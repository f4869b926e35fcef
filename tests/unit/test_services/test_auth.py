"""Tests for auth actions."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from panoproperty.services.auth import (
    CONFIRM_EMAIL_NOTICE,
    sign_in_with_oauth,
    sign_in_with_password,
    sign_out,
    sign_up,
)
from panoproperty.utils.errors import SupabaseError
from tests.utils.factories import create_auth_session


@pytest.fixture
def auth_client():
    client = MagicMock()
    with patch("panoproperty.services.supabase_client.get_supabase_client", return_value=client):
        yield client


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_in_with_password_returns_session(auth_client):
    auth_client.auth.sign_in_with_password.return_value = SimpleNamespace(
        session=create_auth_session("user-1", email="a@b.co"),
    )

    result = await sign_in_with_password("a@b.co", "secret")

    assert result.ok
    assert result.session.user_id == "user-1"
    auth_client.auth.sign_in_with_password.assert_called_once_with({"email": "a@b.co", "password": "secret"})


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_in_failure_returns_backend_message(auth_client):
    error = Exception("wrapped")
    error.message = "Invalid login credentials"
    auth_client.auth.sign_in_with_password.side_effect = error

    result = await sign_in_with_password("a@b.co", "wrong")

    assert not result.ok
    assert result.error == "Invalid login credentials"
    assert result.session is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_up_with_session_stores_role(auth_client, pending_roles):
    auth_client.auth.sign_up.return_value = SimpleNamespace(session=create_auth_session("user-1"))

    with patch("panoproperty.services.auth.update_profile_role", new_callable=AsyncMock) as update_role:
        result = await sign_up("a@b.co", "secret", role="seller", full_name="Sam", pending_roles=pending_roles)

    assert result.ok
    update_role.assert_awaited_once_with("user-1", "seller")
    payload = auth_client.auth.sign_up.call_args.args[0]
    assert payload["options"]["data"] == {"role": "seller", "full_name": "Sam"}
    assert pending_roles.peek() is None


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_up_role_write_failure_is_reported(auth_client, pending_roles):
    auth_client.auth.sign_up.return_value = SimpleNamespace(session=create_auth_session("user-1"))

    with patch("panoproperty.services.auth.update_profile_role", new_callable=AsyncMock) as update_role:
        update_role.side_effect = SupabaseError("permission denied")
        result = await sign_up("a@b.co", "secret", role="seller", pending_roles=pending_roles)

    assert result.error == "permission denied"
    assert result.session.user_id == "user-1"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_up_awaiting_confirmation_stages_role(auth_client, pending_roles):
    auth_client.auth.sign_up.return_value = SimpleNamespace(session=None)

    result = await sign_up("a@b.co", "secret", role="seller", pending_roles=pending_roles)

    assert result.notice == CONFIRM_EMAIL_NOTICE
    assert result.session is None
    assert pending_roles.peek() == "seller"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_up_rejects_unknown_role(auth_client):
    with pytest.raises(ValueError):
        await sign_up("a@b.co", "secret", role="admin")


@pytest.mark.unit
@pytest.mark.asyncio
async def test_oauth_stages_role_and_returns_redirect(auth_client, pending_roles):
    auth_client.auth.sign_in_with_oauth.return_value = SimpleNamespace(
        url="https://test.supabase.co/auth/v1/authorize?provider=google",
    )

    result = await sign_in_with_oauth("seller", pending_roles=pending_roles)

    assert result.redirect_url == "https://test.supabase.co/auth/v1/authorize?provider=google"
    assert pending_roles.peek() == "seller"
    auth_client.auth.sign_in_with_oauth.assert_called_once_with({
        "provider": "google",
        "options": {"redirect_to": "https://panoproperty.test/"},
    })


@pytest.mark.unit
@pytest.mark.asyncio
async def test_oauth_failure_keeps_staged_role(auth_client, pending_roles):
    auth_client.auth.sign_in_with_oauth.side_effect = Exception("provider is not enabled")

    result = await sign_in_with_oauth("buyer", provider="github", pending_roles=pending_roles)

    assert result.error == "provider is not enabled"
    assert pending_roles.peek() == "buyer"


@pytest.mark.unit
@pytest.mark.asyncio
async def test_sign_out(auth_client):
    result = await sign_out()

    assert result.ok
    auth_client.auth.sign_out.assert_called_once()
