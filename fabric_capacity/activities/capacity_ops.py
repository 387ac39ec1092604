"""Activities for capacity status reads and state transitions."""

import logging

from temporalio import activity
from temporalio.exceptions import ApplicationError

from ..config import Settings, get_settings
from ..credentials import acquire_management_token
from ..errors import CapacityOperationError
from ..fabric_client import FabricCapacityClient
from ..models.types import CapacityResource, TransitionRequest
from ..resource_locator import ResourceCoordinates

logger = logging.getLogger(__name__)


def to_application_error(error: CapacityOperationError) -> ApplicationError:
    """Wrap a capacity error so the workflow can recover its kind and HTTP details.

    Issuing calls are never retried, so every wrapped error is non-retryable.
    """
    return ApplicationError(
        error.message,
        error.status_code,
        error.response_body,
        type=error.kind.value,
        non_retryable=True,
    )


async def _connect(settings: Settings) -> FabricCapacityClient:
    try:
        token = await acquire_management_token(settings)
    except CapacityOperationError as e:
        activity.logger.error(f"Failed to acquire management credential: {e}")
        raise to_application_error(e) from e

    return FabricCapacityClient(
        token=token,
        base_url=settings.azure_management_url,
        api_version=settings.fabric_api_version,
        timeout=settings.http_timeout_seconds,
    )


@activity.defn
async def get_capacity_status(coordinates: ResourceCoordinates) -> CapacityResource:
    """Read the current snapshot of a capacity.

    Args:
        coordinates: The capacity to read

    Returns:
        CapacityResource snapshot

    Raises:
        ApplicationError: Of type StatusFetchFailed if the read fails
    """
    settings = get_settings()

    activity.logger.info(f"Activity: get_capacity_status for {coordinates}")

    client = await _connect(settings)

    try:
        capacity = await client.get_capacity(coordinates)
        activity.logger.info(f"Capacity status: {capacity}")
        return capacity

    except CapacityOperationError as e:
        activity.logger.error(f"Failed to read status for {coordinates}: {e}")
        raise to_application_error(e) from e
    finally:
        await client.close()


@activity.defn
async def resume_capacity(coordinates: ResourceCoordinates) -> bool:
    """Request a resume. Returns once the request is accepted.

    Raises:
        ApplicationError: Of type ResumeRejected if the request is rejected
    """
    settings = get_settings()

    activity.logger.info(f"Activity: resume_capacity for {coordinates}")

    client = await _connect(settings)

    try:
        return await client.resume_capacity(coordinates)

    except CapacityOperationError as e:
        activity.logger.error(f"Failed to resume {coordinates}: {e}")
        raise to_application_error(e) from e
    finally:
        await client.close()


@activity.defn
async def suspend_capacity(coordinates: ResourceCoordinates) -> bool:
    """Request a suspend. Returns once the request is accepted.

    Raises:
        ApplicationError: Of type SuspendRejected if the request is rejected
    """
    settings = get_settings()

    activity.logger.info(f"Activity: suspend_capacity for {coordinates}")

    client = await _connect(settings)

    try:
        return await client.suspend_capacity(coordinates)

    except CapacityOperationError as e:
        activity.logger.error(f"Failed to suspend {coordinates}: {e}")
        raise to_application_error(e) from e
    finally:
        await client.close()


@activity.defn
async def resize_capacity(request: TransitionRequest) -> bool:
    """Replace the capacity with a new SKU, echoing the snapshot body.

    Args:
        request: Target SKU plus the location and properties to carry through

    Returns:
        True if the request was accepted

    Raises:
        ApplicationError: Of type ResizeRejected if the request is rejected
    """
    settings = get_settings()

    activity.logger.info(
        f"Activity: resize_capacity for {request.coordinates} to {request.target_sku}"
    )

    client = await _connect(settings)

    try:
        return await client.update_capacity_sku(request)

    except CapacityOperationError as e:
        activity.logger.error(f"Failed to resize {request.coordinates}: {e}")
        raise to_application_error(e) from e
    finally:
        await client.close()
