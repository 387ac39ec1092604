"""Bearer token acquisition for the Azure management endpoint."""

import logging
from typing import Optional

from azure.core.exceptions import ClientAuthenticationError
from azure.identity.aio import DefaultAzureCredential

from .config import Settings
from .errors import CredentialUnavailable

logger = logging.getLogger(__name__)

# One credential per worker process; it caches issued tokens until they expire.
_credential: Optional[DefaultAzureCredential] = None


def _get_credential(settings: Settings) -> DefaultAzureCredential:
    global _credential
    if _credential is None:
        logger.info("Creating DefaultAzureCredential for the management endpoint")
        _credential = DefaultAzureCredential(
            managed_identity_client_id=settings.azure_managed_identity_client_id,
        )
    return _credential


async def close_credential() -> None:
    """Close the cached credential, if one was created."""
    global _credential
    if _credential is not None:
        await _credential.close()
        _credential = None


async def acquire_management_token(settings: Settings) -> str:
    """Return a bearer token scoped to the management endpoint.

    A static ``AZURE_BEARER_TOKEN`` wins when set. Otherwise the token comes
    from a process-wide ``DefaultAzureCredential``, which covers managed
    identity on the worker host as well as developer logins.

    Raises:
        CredentialUnavailable: If no credential source can issue a token
    """
    if settings.azure_bearer_token:
        logger.debug("Using static bearer token from settings")
        return settings.azure_bearer_token

    scope = settings.management_scope
    credential = _get_credential(settings)

    try:
        token = await credential.get_token(scope)
    except ClientAuthenticationError as e:
        logger.error(f"Failed to acquire management token for scope {scope}: {e}")
        raise CredentialUnavailable(f"Could not acquire a token for {scope}: {e}") from e

    return token.token
