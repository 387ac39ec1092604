"""Polling a capacity until it converges on a target state."""

import logging
from datetime import datetime, timedelta
from typing import Awaitable, Callable, Optional

from ..models.types import (
    CapacityResource,
    CapacitySku,
    ProvisioningState,
    WaitOutcome,
    WaitStatus,
)

ReadStatus = Callable[[], Awaitable[CapacityResource]]
Sleep = Callable[[timedelta], Awaitable[None]]
Now = Callable[[], datetime]


class ConvergenceWaiter:
    """Polls capacity status until a target state, a failure state or a timeout.

    The waiter never reads the clock or sleeps on its own. Inside a workflow it
    is given ``workflow.now`` and ``workflow.sleep`` so every poll delay is a
    durable timer; tests hand it a fake clock.

    Errors raised by ``read_status`` propagate immediately. Only waiting for a
    state is repeated, never a failed read.
    """

    def __init__(
        self,
        read_status: ReadStatus,
        sleep: Sleep,
        now: Now,
        poll_interval: timedelta = timedelta(seconds=30),
        paused_poll_interval: timedelta = timedelta(seconds=60),
        logger=None,
    ):
        self._read_status = read_status
        self._sleep = sleep
        self._now = now
        self.poll_interval = poll_interval
        self.paused_poll_interval = paused_poll_interval
        self._logger = logger or logging.getLogger(__name__)

    async def wait_for_sku(self, target_sku: CapacitySku, timeout: timedelta) -> WaitOutcome:
        """Wait until the capacity runs at ``target_sku``.

        Returns FAILED as soon as a poll observes a failure-family lifecycle
        state or a failed provisioning state, and TIMED_OUT when the deadline
        passes first.
        """
        deadline = self._now() + timeout
        polls = 0
        last: Optional[CapacityResource] = None

        while True:
            if self._now() >= deadline:
                return self._timed_out(last, polls)

            last = await self._read_status()
            polls += 1
            self._log_poll("resize", polls, last)

            if last.lifecycle.is_failure:
                return self._outcome(
                    WaitStatus.FAILED,
                    last,
                    polls,
                    reason=(
                        f"Capacity entered {last.state} state while scaling to "
                        f"{target_sku.value}; this may indicate a quota limitation"
                    ),
                )

            if last.provisioning == ProvisioningState.FAILED:
                return self._outcome(
                    WaitStatus.FAILED,
                    last,
                    polls,
                    reason=(
                        f"Provisioning failed while scaling to {target_sku.value} "
                        f"(state {last.state}, sku {last.sku}); this may indicate a quota limitation"
                    ),
                )

            if last.sku.upper() == target_sku.value and last.lifecycle.is_running:
                return self._outcome(WaitStatus.CONVERGED, last, polls)

            await self._sleep(self.poll_interval)

    async def wait_for_running(self, timeout: timedelta) -> WaitOutcome:
        """Wait until the capacity is in a running-family state.

        Never fails on its own: unrecognized states count as still
        transitioning, so the only non-converged outcome is TIMED_OUT.
        """
        deadline = self._now() + timeout
        polls = 0
        last: Optional[CapacityResource] = None

        while True:
            if self._now() >= deadline:
                return self._timed_out(last, polls)

            last = await self._read_status()
            polls += 1
            self._log_poll("start", polls, last)

            lifecycle = last.lifecycle
            if lifecycle.is_running:
                return self._outcome(WaitStatus.CONVERGED, last, polls)

            if lifecycle.is_stopped:
                await self._sleep(self.paused_poll_interval)
            elif lifecycle.is_transitional:
                await self._sleep(self.poll_interval)
            elif lifecycle.is_failure:
                self._logger.warning(
                    f"Capacity reports {last.state} while waiting to start, continuing to poll"
                )
                await self._sleep(self.poll_interval)
            else:
                self._logger.warning(
                    f"Unrecognized lifecycle state {last.state!r} while waiting to start, continuing to poll"
                )
                await self._sleep(self.poll_interval)

    async def wait_for_paused(self, timeout: timedelta) -> WaitOutcome:
        """Wait until the capacity reports the paused state."""
        deadline = self._now() + timeout
        polls = 0
        last: Optional[CapacityResource] = None

        while True:
            if self._now() >= deadline:
                return self._timed_out(last, polls)

            last = await self._read_status()
            polls += 1
            self._log_poll("pause", polls, last)

            if last.lifecycle.is_stopped:
                return self._outcome(WaitStatus.CONVERGED, last, polls)

            await self._sleep(self.poll_interval)

    def _log_poll(self, kind: str, polls: int, capacity: CapacityResource) -> None:
        self._logger.info(
            f"{kind} wait poll {polls}: state={capacity.state}, sku={capacity.sku}, "
            f"provisioning={capacity.provisioning_state}"
        )

    def _timed_out(self, last: Optional[CapacityResource], polls: int) -> WaitOutcome:
        state = last.state if last else "unknown"
        sku = last.sku if last else "unknown"
        outcome = self._outcome(
            WaitStatus.TIMED_OUT,
            last,
            polls,
            reason=f"timeout, last observed {state}/{sku}",
        )
        self._logger.warning(f"Wait timed out after {polls} poll(s), last observed {state}/{sku}")
        return outcome

    @staticmethod
    def _outcome(
        status: WaitStatus,
        last: Optional[CapacityResource],
        polls: int,
        reason: Optional[str] = None,
    ) -> WaitOutcome:
        return WaitOutcome(
            status=status,
            reason=reason,
            last_state=last.state if last else None,
            last_sku=last.sku if last else None,
            polls=polls,
        )
