"""Tests for management token acquisition."""

from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock, patch

import pytest
import pytest_asyncio
from azure.core.exceptions import ClientAuthenticationError

from fabric_capacity.credentials import acquire_management_token, close_credential
from fabric_capacity.errors import CredentialUnavailable


def make_settings(token=None):
    return SimpleNamespace(
        azure_bearer_token=token,
        azure_managed_identity_client_id="mi-client-id",
        management_scope="https://management.azure.com/.default",
    )


def make_credential(**get_token_kwargs):
    credential = MagicMock()
    credential.get_token = AsyncMock(**get_token_kwargs)
    credential.close = AsyncMock()
    return credential


@pytest_asyncio.fixture(autouse=True)
async def fresh_credential():
    """Drop any credential cached by a previous test."""
    await close_credential()
    yield
    await close_credential()


@pytest.mark.asyncio
class TestAcquireManagementToken:
    """Tests for acquire_management_token."""

    async def test_static_token_wins(self):
        """Test that a configured token is used without azure-identity."""
        with patch("fabric_capacity.credentials.DefaultAzureCredential") as credential_cls:
            token = await acquire_management_token(make_settings(token="static"))

        assert token == "static"
        credential_cls.assert_not_called()

    async def test_default_credential(self):
        """Test that the token comes from DefaultAzureCredential for the management scope."""
        credential = make_credential(return_value=SimpleNamespace(token="issued", expires_on=0))

        with patch("fabric_capacity.credentials.DefaultAzureCredential", return_value=credential) as credential_cls:
            token = await acquire_management_token(make_settings())

        assert token == "issued"
        credential_cls.assert_called_once_with(managed_identity_client_id="mi-client-id")
        credential.get_token.assert_awaited_once_with("https://management.azure.com/.default")
        credential.close.assert_not_awaited()

    async def test_credential_reused_across_calls(self):
        """Test that repeated polls share one credential instead of building a new one each time."""
        credential = make_credential(return_value=SimpleNamespace(token="issued", expires_on=0))

        with patch("fabric_capacity.credentials.DefaultAzureCredential", return_value=credential) as credential_cls:
            for _ in range(3):
                assert await acquire_management_token(make_settings()) == "issued"

        credential_cls.assert_called_once()
        assert credential.get_token.await_count == 3

        await close_credential()
        credential.close.assert_awaited_once()

    async def test_authentication_failure(self):
        """Test that an authentication failure becomes CredentialUnavailable."""
        credential = make_credential(side_effect=ClientAuthenticationError("no identity"))

        with patch("fabric_capacity.credentials.DefaultAzureCredential", return_value=credential):
            with pytest.raises(CredentialUnavailable):
                await acquire_management_token(make_settings())
