"""Workflows that start (resume) or stop (suspend) a Fabric capacity."""

import logging
from datetime import timedelta

from temporalio import workflow

with workflow.unsafe.imports_passed_through():
    from ..activities import resume_capacity, suspend_capacity
    from ..errors import CapacityErrorKind, CapacityOperationError, WaitTimeout
    from ..models.types import CapacityLifecycleInput, NotificationSeverity, OperationResult
    from ..resource_locator import parse_resource_id
    from .base import CapacityWorkflowBase, notify, run_capacity_activity

logger = logging.getLogger(__name__)


@workflow.defn
class CapacityResumeWorkflow(CapacityWorkflowBase):
    """Workflow that resumes a paused capacity and waits until it runs."""

    @workflow.run
    async def run(self, input: CapacityLifecycleInput) -> OperationResult:
        workflow.logger.info(f"Starting capacity resume workflow for {input.resource_id}")

        try:
            result = await self._resume(input)
        except CapacityOperationError as e:
            workflow.logger.error(f"Capacity resume failed: {e}")
            result = await self._failure_result(e, self._previous_sku)
            await notify(
                f"❌ Resuming {result.capacity_name or input.resource_id} failed: {e}",
                NotificationSeverity.ERROR,
            )
        else:
            if self._transition_issued:
                await notify(f"✅ {result.capacity_name}: {result.message}", NotificationSeverity.INFO)

        self._phase = "completed" if result.success else "failed"
        workflow.logger.info(f"Workflow completed: {result}")
        return result

    async def _resume(self, input: CapacityLifecycleInput) -> OperationResult:
        self._phase = "resolving"
        self._coordinates = parse_resource_id(input.resource_id)
        input.validate()

        self._phase = "reading"
        snapshot = await self._read()
        self._previous_sku = snapshot.sku

        if snapshot.lifecycle.is_running:
            workflow.logger.info(f"{snapshot.name} is already {snapshot.state}")
            return self._result(target_sku=snapshot.sku, success=True, message="Capacity already running")

        self._phase = "resuming"
        await run_capacity_activity(resume_capacity, self._coordinates, CapacityErrorKind.RESUME_REJECTED)
        self._transition_issued = True

        if not input.wait_for_completion:
            return self._result(
                target_sku=snapshot.sku,
                success=True,
                state="Resuming",
                message="Resume accepted; completion not confirmed",
            )

        self._phase = "waiting_for_start"
        outcome = await self._waiter(input.poll_interval_seconds).wait_for_running(
            timedelta(minutes=input.timeout_minutes)
        )
        if not outcome.converged:
            raise WaitTimeout(
                f"Capacity did not reach a running state within "
                f"{input.timeout_minutes} minute(s): {outcome.reason}"
            )

        final = await self._read()
        return self._result(target_sku=snapshot.sku, success=True, message=f"Capacity resumed ({final.state})")

    @workflow.query
    def get_status(self) -> str:
        """Query to get current workflow status."""
        return self._phase


@workflow.defn
class CapacitySuspendWorkflow(CapacityWorkflowBase):
    """Workflow that suspends a capacity and waits until it is paused."""

    @workflow.run
    async def run(self, input: CapacityLifecycleInput) -> OperationResult:
        workflow.logger.info(f"Starting capacity suspend workflow for {input.resource_id}")

        try:
            result = await self._suspend(input)
        except CapacityOperationError as e:
            workflow.logger.error(f"Capacity suspend failed: {e}")
            result = await self._failure_result(e, self._previous_sku)
            await notify(
                f"❌ Suspending {result.capacity_name or input.resource_id} failed: {e}",
                NotificationSeverity.ERROR,
            )
        else:
            if self._transition_issued:
                await notify(f"✅ {result.capacity_name}: {result.message}", NotificationSeverity.INFO)

        self._phase = "completed" if result.success else "failed"
        workflow.logger.info(f"Workflow completed: {result}")
        return result

    async def _suspend(self, input: CapacityLifecycleInput) -> OperationResult:
        self._phase = "resolving"
        self._coordinates = parse_resource_id(input.resource_id)
        input.validate()

        self._phase = "reading"
        snapshot = await self._read()
        self._previous_sku = snapshot.sku

        if snapshot.lifecycle.is_stopped:
            workflow.logger.info(f"{snapshot.name} is already {snapshot.state}")
            return self._result(target_sku=snapshot.sku, success=True, message="Capacity already paused")

        self._phase = "suspending"
        await run_capacity_activity(suspend_capacity, self._coordinates, CapacityErrorKind.SUSPEND_REJECTED)
        self._transition_issued = True

        if not input.wait_for_completion:
            return self._result(
                target_sku=snapshot.sku,
                success=True,
                state="Pausing",
                message="Suspend accepted; completion not confirmed",
            )

        self._phase = "waiting_for_pause"
        outcome = await self._waiter(input.poll_interval_seconds).wait_for_paused(
            timedelta(minutes=input.timeout_minutes)
        )
        if not outcome.converged:
            raise WaitTimeout(
                f"Capacity did not pause within {input.timeout_minutes} minute(s): {outcome.reason}"
            )

        final = await self._read()
        return self._result(target_sku=snapshot.sku, success=True, message=f"Capacity suspended ({final.state})")

    @workflow.query
    def get_status(self) -> str:
        """Query to get current workflow status."""
        return self._phase
