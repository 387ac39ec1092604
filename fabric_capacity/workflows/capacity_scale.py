"""Workflow that scales a Fabric capacity to a target SKU."""

import logging
from datetime import timedelta

from temporalio import workflow

with workflow.unsafe.imports_passed_through():
    from ..activities import resize_capacity, resume_capacity
    from ..errors import (
        CannotScaleWhileStopped,
        CapacityErrorKind,
        CapacityOperationError,
        PostScaleVerificationFailed,
        ScalingFailed,
        StartTimeoutBeforeScale,
        WaitTimeout,
    )
    from ..models.types import (
        CapacityScaleInput,
        CapacitySku,
        NotificationSeverity,
        OperationResult,
        TransitionRequest,
        WaitStatus,
    )
    from ..resource_locator import parse_resource_id
    from .base import CapacityWorkflowBase, notify, run_capacity_activity

logger = logging.getLogger(__name__)


@workflow.defn
class CapacityScaleWorkflow(CapacityWorkflowBase):
    """Workflow that moves a single capacity to a target SKU.

    This workflow:
    1. Resolves the capacity coordinates and reads the current snapshot
    2. Returns immediately if the capacity already runs at the target SKU
    3. Resumes a non-running capacity and waits for it to start
    4. Issues the resize with the snapshot's location and properties
    5. Polls until the SKU converges, the capacity fails, or the timeout passes
    6. Re-reads the capacity to verify the final SKU

    Failures never escape as workflow errors. They come back as an
    OperationResult with ``error=True``; callers use ``raise_for_error()``
    to turn that into the matching exception.
    """

    @workflow.run
    async def run(self, input: CapacityScaleInput) -> OperationResult:
        """Execute the capacity scale workflow.

        Args:
            input: Workflow input parameters

        Returns:
            OperationResult describing the outcome
        """
        workflow.logger.info(f"Starting capacity scale workflow: {input}")

        try:
            result = await self._scale(input)
        except CapacityOperationError as e:
            workflow.logger.error(f"Capacity scale failed: {e}")
            result = await self._failure_result(e, input.target_sku)
            await notify(
                f"❌ Scaling {result.capacity_name or input.resource_id} to {input.target_sku} failed: {e}",
                NotificationSeverity.ERROR,
            )
        else:
            if self._transition_issued:
                await notify(
                    f"✅ {result.capacity_name}: {result.message}",
                    NotificationSeverity.INFO,
                )

        self._phase = "completed" if result.success else "failed"
        workflow.logger.info(f"Workflow completed: {result}")
        return result

    async def _scale(self, input: CapacityScaleInput) -> OperationResult:
        # Step 1: Resolve coordinates and validate parameters
        self._phase = "resolving"
        self._coordinates = parse_resource_id(input.resource_id)
        input.validate()
        target = CapacitySku.parse(input.target_sku)
        timeout = timedelta(minutes=input.timeout_minutes)
        waiter = self._waiter(input.poll_interval_seconds, input.paused_poll_interval_seconds)

        # Step 2: Read the current snapshot
        self._phase = "reading"
        snapshot = await self._read()
        self._previous_sku = snapshot.sku
        workflow.logger.info(f"Current capacity: {snapshot}")

        # Step 3: Nothing to do if already at the target SKU
        if snapshot.sku.upper() == target.value:
            workflow.logger.info(f"{snapshot.name} already at {target.value}, no transition issued")
            return self._result(
                target_sku=target.value,
                success=True,
                message=f"Capacity already at target SKU {target.value}",
            )

        # Step 4: A resize is only safe against a running capacity
        if not snapshot.lifecycle.is_running:
            self._phase = "resuming"
            workflow.logger.info(f"{snapshot.name} is {snapshot.state}, requesting resume")
            await run_capacity_activity(resume_capacity, self._coordinates, CapacityErrorKind.RESUME_REJECTED)
            self._transition_issued = True

            if not input.wait_for_completion:
                raise CannotScaleWhileStopped(
                    f"Capacity {snapshot.name} was {snapshot.state}. Resume was requested, "
                    f"but scaling is only issued once the capacity is confirmed running; "
                    f"re-run with wait_for_completion enabled"
                )

            if input.settle_delay_seconds > 0:
                await workflow.sleep(timedelta(seconds=input.settle_delay_seconds))

            self._phase = "waiting_for_start"
            start_timeout = timeout / 2
            outcome = await waiter.wait_for_running(start_timeout)
            if not outcome.converged:
                raise StartTimeoutBeforeScale(
                    f"Capacity did not reach a running state within {start_timeout} "
                    f"({outcome.reason}); resize not attempted"
                )

            snapshot = await self._read()
            workflow.logger.info(f"Capacity running after resume: {snapshot}")

        # Step 5: Issue the resize with the freshest snapshot as the body
        self._phase = "resizing"
        request = TransitionRequest.from_snapshot(snapshot, target)
        await run_capacity_activity(resize_capacity, request, CapacityErrorKind.RESIZE_REJECTED)
        self._transition_issued = True

        # Step 6: Without waiting, the request is accepted but unconfirmed
        if not input.wait_for_completion:
            return self._result(
                target_sku=target.value,
                success=True,
                state="Scaling",
                current_sku=snapshot.sku,
                message=f"Scale to {target.value} accepted; completion not confirmed",
            )

        # Step 7: Wait for the SKU to converge
        self._phase = "waiting_for_scale"
        outcome = await waiter.wait_for_sku(target, timeout)
        if outcome.status == WaitStatus.FAILED:
            raise ScalingFailed(outcome.reason)
        if outcome.status == WaitStatus.TIMED_OUT:
            raise WaitTimeout(
                f"Scaling to {target.value} did not complete within "
                f"{input.timeout_minutes} minute(s): {outcome.reason}"
            )

        # Step 8: Verify with a fresh read
        self._phase = "verifying"
        final = await self._read()
        if final.sku.upper() != target.value:
            raise PostScaleVerificationFailed(
                f"Wait reported convergence but the final read shows SKU {final.sku}, "
                f"expected {target.value}"
            )

        # Step 9: Report
        return self._result(
            target_sku=target.value,
            success=True,
            message=f"Scaled from {self._previous_sku} to {final.sku}",
        )

    @workflow.query
    def get_status(self) -> str:
        """Query to get current workflow status.

        Returns:
            Status string
        """
        return self._phase
