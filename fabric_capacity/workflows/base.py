"""Workflow-side plumbing shared by the capacity workflows."""

from datetime import timedelta
from typing import Optional

from temporalio import workflow
from temporalio.common import RetryPolicy
from temporalio.exceptions import ActivityError, ApplicationError

with workflow.unsafe.imports_passed_through():
    from ..activities import get_capacity_status, send_slack_notification
    from ..errors import CapacityErrorKind, CapacityOperationError, error_for
    from ..models.types import CapacityResource, NotificationSeverity, OperationResult
    from ..resource_locator import ResourceCoordinates
    from .convergence import ConvergenceWaiter

ACTIVITY_TIMEOUT = timedelta(minutes=2)

# Issuing calls and status reads are never retried; only waiting is repeated.
NO_RETRY = RetryPolicy(maximum_attempts=1)

NOTIFICATION_RETRY = RetryPolicy(
    initial_interval=timedelta(seconds=1),
    maximum_interval=timedelta(seconds=30),
    maximum_attempts=3,
    backoff_coefficient=2.0,
)


def translate_activity_error(
    error: ActivityError,
    fallback_kind: CapacityErrorKind,
) -> CapacityOperationError:
    """Rebuild the typed capacity error carried by a failed activity."""
    cause = error.cause
    if isinstance(cause, ApplicationError):
        try:
            kind = CapacityErrorKind(cause.type)
        except ValueError:
            kind = fallback_kind
        details = list(cause.details or ())
        status_code = details[0] if len(details) > 0 else None
        response_body = details[1] if len(details) > 1 else None
        return error_for(kind, cause.message, status_code=status_code, response_body=response_body)

    return error_for(fallback_kind, str(cause or error))


async def run_capacity_activity(activity_fn, arg, fallback_kind: CapacityErrorKind):
    """Execute a capacity activity once, raising the typed error on failure."""
    try:
        return await workflow.execute_activity(
            activity_fn,
            arg,
            start_to_close_timeout=ACTIVITY_TIMEOUT,
            retry_policy=NO_RETRY,
        )
    except ActivityError as e:
        raise translate_activity_error(e, fallback_kind) from e


async def notify(message: str, severity: NotificationSeverity) -> None:
    """Send a Slack notification. Failures are logged and never propagate."""
    try:
        await workflow.execute_activity(
            send_slack_notification,
            args=[message, severity],
            start_to_close_timeout=timedelta(seconds=30),
            retry_policy=NOTIFICATION_RETRY,
        )
    except Exception as notify_error:
        workflow.logger.error(f"Failed to send notification: {notify_error}")


class CapacityWorkflowBase:
    """State and helpers common to workflows that act on one capacity."""

    # failures after which the snapshot is re-read before reporting
    REFRESH_ON_FAILURE = frozenset(
        {
            CapacityErrorKind.SCALING_FAILED,
            CapacityErrorKind.TIMEOUT,
            CapacityErrorKind.START_TIMEOUT_BEFORE_SCALE,
        }
    )

    def __init__(self):
        """Initialize workflow state."""
        self._phase = "pending"
        self._coordinates: Optional[ResourceCoordinates] = None
        self._snapshot: Optional[CapacityResource] = None
        self._previous_sku: Optional[str] = None
        self._transition_issued = False

    async def _read(self) -> CapacityResource:
        self._snapshot = await run_capacity_activity(
            get_capacity_status,
            self._coordinates,
            CapacityErrorKind.STATUS_FETCH_FAILED,
        )
        return self._snapshot

    def _waiter(self, poll_interval_seconds: int, paused_poll_interval_seconds: Optional[int] = None) -> ConvergenceWaiter:
        paused = paused_poll_interval_seconds or poll_interval_seconds
        return ConvergenceWaiter(
            read_status=self._read,
            sleep=workflow.sleep,
            now=workflow.now,
            poll_interval=timedelta(seconds=poll_interval_seconds),
            paused_poll_interval=timedelta(seconds=paused),
            logger=workflow.logger,
        )

    def _result(
        self,
        *,
        target_sku: Optional[str],
        success: bool,
        message: Optional[str] = None,
        state: Optional[str] = None,
        current_sku: Optional[str] = None,
        error: Optional[CapacityOperationError] = None,
    ) -> OperationResult:
        snapshot = self._snapshot
        coordinates = self._coordinates

        return OperationResult(
            capacity_name=(snapshot.name if snapshot else coordinates.capacity_name if coordinates else ""),
            subscription_id=coordinates.subscription_id if coordinates else "",
            resource_group=coordinates.resource_group if coordinates else "",
            location=snapshot.location if snapshot else None,
            previous_sku=self._previous_sku,
            current_sku=current_sku or (snapshot.sku if snapshot else None),
            target_sku=target_sku,
            state=state or (snapshot.state if snapshot else None),
            success=success,
            timestamp=workflow.now().isoformat(),
            message=error.message if error else message,
            error=error is not None,
            error_kind=error.kind if error else None,
            status_code=error.status_code if error else None,
            response_body=error.response_body if error else None,
        )

    async def _failure_result(
        self,
        error: CapacityOperationError,
        target_sku: Optional[str],
    ) -> OperationResult:
        """Best-effort result reflecting the last known state of the capacity."""
        if self._coordinates is not None and error.kind in self.REFRESH_ON_FAILURE:
            try:
                await self._read()
            except CapacityOperationError as read_error:
                workflow.logger.warning(f"Could not refresh capacity status after failure: {read_error}")

        return self._result(target_sku=target_sku, success=False, error=error)
