"""Client for the Microsoft Fabric capacity management API."""

import logging
from typing import Any, Optional

import httpx

from .errors import (
    CapacityOperationError,
    ResizeRejected,
    ResumeRejected,
    StatusFetchFailed,
    SuspendRejected,
)
from .models.types import CapacityResource, TransitionRequest
from .resource_locator import ResourceCoordinates, format_resource_id

logger = logging.getLogger(__name__)


class FabricCapacityClient:
    """Client for reading and transitioning a Fabric capacity through ARM."""

    def __init__(
        self,
        token: str,
        base_url: str = "https://management.azure.com",
        api_version: str = "2023-11-01",
        timeout: float = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize the management API client.

        Args:
            token: Bearer token scoped to the management endpoint
            base_url: Base URL for the management endpoint
            api_version: api-version query parameter sent with every request
            timeout: Timeout in seconds for a single request
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.api_version = api_version
        self.client = httpx.AsyncClient(
            headers={
                "Authorization": f"Bearer {token}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    async def close(self):
        """Close the HTTP client."""
        await self.client.aclose()

    def _url(self, coordinates: ResourceCoordinates, action: str = "") -> str:
        path = format_resource_id(coordinates)
        if action:
            path = f"{path}/{action}"
        return f"{self.base_url}{path}"

    @property
    def _params(self) -> dict[str, str]:
        return {"api-version": self.api_version}

    async def get_capacity(self, coordinates: ResourceCoordinates) -> CapacityResource:
        """Read the current snapshot of a capacity.

        Args:
            coordinates: The capacity to read

        Returns:
            CapacityResource snapshot

        Raises:
            StatusFetchFailed: On any non-success status or transport error
        """
        logger.info(f"Fetching capacity status for {coordinates}")

        try:
            response = await self.client.get(self._url(coordinates), params=self._params)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"Failed to get capacity {coordinates.capacity_name}: {e}")
            raise _api_error(StatusFetchFailed, "Failed to get capacity status", e) from e
        except httpx.HTTPError as e:
            logger.error(f"Failed to get capacity {coordinates.capacity_name}: {e}")
            raise StatusFetchFailed(f"Failed to get capacity status: {e}") from e
        except ValueError as e:
            raise StatusFetchFailed(f"Capacity status response is not valid JSON: {e}") from e

        capacity = _parse_capacity(coordinates, data)
        logger.info(
            f"Capacity {capacity.name}: sku={capacity.sku}, state={capacity.state}, "
            f"provisioning={capacity.provisioning_state}"
        )
        return capacity

    async def resume_capacity(self, coordinates: ResourceCoordinates) -> bool:
        """Ask the API to resume a capacity. Does not wait for completion.

        Raises:
            ResumeRejected: If the request is rejected
        """
        return await self._post_action(coordinates, "resume", ResumeRejected)

    async def suspend_capacity(self, coordinates: ResourceCoordinates) -> bool:
        """Ask the API to suspend a capacity. Does not wait for completion.

        Raises:
            SuspendRejected: If the request is rejected
        """
        return await self._post_action(coordinates, "suspend", SuspendRejected)

    async def update_capacity_sku(self, request: TransitionRequest) -> bool:
        """Replace the capacity resource with a new SKU.

        The body echoes the location and properties of the snapshot the
        request was built from; the API replaces the full object.

        Args:
            request: Target SKU plus the carried-through resource body

        Returns:
            True if the request was accepted

        Raises:
            ResizeRejected: On any non-success status or transport error
        """
        coordinates = request.coordinates
        logger.info(f"Requesting SKU {request.target_sku} for {coordinates}")

        try:
            response = await self.client.put(
                self._url(coordinates),
                params=self._params,
                json=request.to_body(),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"Resize of {coordinates.capacity_name} rejected: {e}")
            raise _api_error(ResizeRejected, f"Resize to {request.target_sku} was rejected", e) from e
        except httpx.HTTPError as e:
            logger.error(f"Resize of {coordinates.capacity_name} failed: {e}")
            raise ResizeRejected(f"Resize to {request.target_sku} failed: {e}") from e

        logger.info(f"Resize request accepted for {coordinates.capacity_name} (HTTP {response.status_code})")
        return True

    async def _post_action(
        self,
        coordinates: ResourceCoordinates,
        action: str,
        error_cls: type[CapacityOperationError],
    ) -> bool:
        logger.info(f"Requesting {action} for {coordinates}")

        try:
            response = await self.client.post(self._url(coordinates, action), params=self._params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(f"{action} of {coordinates.capacity_name} rejected: {e}")
            raise _api_error(error_cls, f"{action.capitalize()} request was rejected", e) from e
        except httpx.HTTPError as e:
            logger.error(f"{action} of {coordinates.capacity_name} failed: {e}")
            raise error_cls(f"{action.capitalize()} request failed: {e}") from e

        logger.info(f"{action.capitalize()} request accepted for {coordinates.capacity_name} (HTTP {response.status_code})")
        return True


def _api_error(
    error_cls: type[CapacityOperationError],
    message: str,
    error: httpx.HTTPStatusError,
) -> CapacityOperationError:
    return error_cls(
        message,
        status_code=error.response.status_code,
        response_body=error.response.text or None,
    )


def _parse_capacity(coordinates: ResourceCoordinates, data: dict[str, Any]) -> CapacityResource:
    sku = data.get("sku") or {}
    properties = data.get("properties") or {}

    return CapacityResource(
        subscription_id=coordinates.subscription_id,
        resource_group=coordinates.resource_group,
        name=data.get("name") or coordinates.capacity_name,
        sku=sku.get("name") or "",
        sku_tier=sku.get("tier") or "Fabric",
        state=properties.get("state") or "",
        provisioning_state=properties.get("provisioningState") or "",
        location=data.get("location") or "",
        properties=properties,
        tags=data.get("tags") or {},
    )
