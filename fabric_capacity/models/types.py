"""Type definitions for capacity lifecycle automation."""

import json
from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Optional

from ..errors import (
    CapacityErrorKind,
    InvalidParameters,
    error_for,
)
from ..resource_locator import ResourceCoordinates, parse_resource_id


class CapacitySku(str, Enum):
    """Fabric capacity SKUs that can be targeted."""

    F2 = "F2"
    F4 = "F4"
    F8 = "F8"
    F16 = "F16"
    F32 = "F32"
    F64 = "F64"
    F128 = "F128"
    F256 = "F256"
    F512 = "F512"
    F1024 = "F1024"

    @classmethod
    def parse(cls, value: str) -> "CapacitySku":
        """Parse a SKU name, rejecting anything outside the enumeration."""
        normalized = (value or "").strip().upper()
        for sku in cls:
            if sku.value == normalized:
                return sku
        allowed = ", ".join(sku.value for sku in cls)
        raise ValueError(f"Invalid SKU {value!r}. Allowed values: {allowed}")


class LifecycleState(str, Enum):
    """Lifecycle state of a capacity as reported by the management API."""

    RUNNING = "Running"
    ACTIVE = "Active"
    PAUSED = "Paused"
    STARTING = "Starting"
    RESUMING = "Resuming"
    PREPARING_FOR_RUNNING = "PreparingForRunning"
    PAUSING = "Pausing"
    FAILED = "Failed"
    ERROR = "Error"
    UNKNOWN = "Unknown"

    @classmethod
    def from_api(cls, value: Optional[str]) -> "LifecycleState":
        """Classify a raw API value; unrecognized values map to UNKNOWN."""
        if value:
            lowered = value.strip().lower()
            for state in cls:
                if state.value.lower() == lowered:
                    return state
        return cls.UNKNOWN

    @property
    def is_running(self) -> bool:
        return self in RUNNING_STATES

    @property
    def is_stopped(self) -> bool:
        return self is STOPPED_STATE

    @property
    def is_transitional(self) -> bool:
        return self in TRANSITIONAL_STATES

    @property
    def is_failure(self) -> bool:
        return self in FAILURE_STATES


RUNNING_STATES = frozenset({LifecycleState.RUNNING, LifecycleState.ACTIVE})
STOPPED_STATE = LifecycleState.PAUSED
TRANSITIONAL_STATES = frozenset(
    {
        LifecycleState.STARTING,
        LifecycleState.RESUMING,
        LifecycleState.PREPARING_FOR_RUNNING,
        LifecycleState.PAUSING,
    }
)
FAILURE_STATES = frozenset({LifecycleState.FAILED, LifecycleState.ERROR})


class ProvisioningState(str, Enum):
    """State of the most recent control-plane operation on a capacity."""

    SUCCEEDED = "Succeeded"
    FAILED = "Failed"
    IN_PROGRESS = "InProgress"
    UNKNOWN = "Unknown"

    @classmethod
    def from_api(cls, value: Optional[str]) -> "ProvisioningState":
        """Classify a raw API value."""
        lowered = (value or "").strip().lower()
        if lowered == "succeeded":
            return cls.SUCCEEDED
        if lowered == "failed":
            return cls.FAILED
        if lowered in {"inprogress", "provisioning", "updating", "deleting", "accepted"}:
            return cls.IN_PROGRESS
        return cls.UNKNOWN


class NotificationSeverity(str, Enum):
    """Notification severity levels."""

    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


@dataclass
class CapacityResource:
    """Snapshot of a capacity resource as read from the management API.

    ``location`` and ``properties`` are carried back unmodified on resize,
    because the API replaces the whole object on update.
    """

    subscription_id: str
    resource_group: str
    name: str
    sku: str
    state: str
    provisioning_state: str
    location: str
    sku_tier: str = "Fabric"
    properties: dict[str, Any] = field(default_factory=dict)
    tags: dict[str, str] = field(default_factory=dict)

    @property
    def coordinates(self) -> ResourceCoordinates:
        return ResourceCoordinates(
            subscription_id=self.subscription_id,
            resource_group=self.resource_group,
            capacity_name=self.name,
        )

    @property
    def lifecycle(self) -> LifecycleState:
        return LifecycleState.from_api(self.state)

    @property
    def provisioning(self) -> ProvisioningState:
        return ProvisioningState.from_api(self.provisioning_state)

    def __str__(self) -> str:
        """String representation."""
        return (
            f"{self.name} ({self.sku}, state={self.state}, "
            f"provisioning={self.provisioning_state}, location={self.location})"
        )


@dataclass
class TransitionRequest:
    """A resize request: target SKU plus the body carried from the last snapshot."""

    coordinates: ResourceCoordinates
    target_sku: str
    location: str
    properties: dict[str, Any] = field(default_factory=dict)
    sku_tier: str = "Fabric"
    tags: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_snapshot(cls, snapshot: CapacityResource, target_sku: CapacitySku) -> "TransitionRequest":
        """Build a request that echoes the snapshot's location and properties."""
        return cls(
            coordinates=snapshot.coordinates,
            target_sku=target_sku.value,
            location=snapshot.location,
            properties=snapshot.properties,
            sku_tier=snapshot.sku_tier,
            tags=snapshot.tags,
        )

    def to_body(self) -> dict[str, Any]:
        """Full resource representation for the replace call."""
        body = {
            "location": self.location,
            "properties": self.properties,
            "sku": {"name": self.target_sku, "tier": self.sku_tier},
        }
        if self.tags:
            body["tags"] = self.tags
        return body


class WaitStatus(str, Enum):
    """Terminal states of a convergence wait."""

    CONVERGED = "converged"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass
class WaitOutcome:
    """Result of waiting for a capacity to reach a target state."""

    status: WaitStatus
    reason: Optional[str] = None
    last_state: Optional[str] = None
    last_sku: Optional[str] = None
    polls: int = 0

    @property
    def converged(self) -> bool:
        return self.status == WaitStatus.CONVERGED

    def __str__(self) -> str:
        """String representation."""
        detail = f": {self.reason}" if self.reason else ""
        return f"{self.status.value} after {self.polls} poll(s){detail}"


@dataclass
class CapacityScaleInput:
    """Input parameters for the capacity scale workflow."""

    resource_id: str
    target_sku: str
    wait_for_completion: bool = True
    timeout_minutes: int = 10
    poll_interval_seconds: int = 30
    paused_poll_interval_seconds: int = 60
    settle_delay_seconds: int = 30

    def validate(self) -> None:
        """Check parameters before the orchestrator starts.

        Raises:
            InvalidIdentifier: If the resource ID has the wrong shape
            InvalidParameters: If the SKU or any duration is invalid
        """
        parse_resource_id(self.resource_id)
        try:
            CapacitySku.parse(self.target_sku)
        except ValueError as e:
            raise InvalidParameters(str(e)) from e
        _require_positive(
            timeout_minutes=self.timeout_minutes,
            poll_interval_seconds=self.poll_interval_seconds,
            paused_poll_interval_seconds=self.paused_poll_interval_seconds,
        )
        if self.settle_delay_seconds < 0:
            raise InvalidParameters("settle_delay_seconds must not be negative")

    def __str__(self) -> str:
        """String representation."""
        mode = "wait" if self.wait_for_completion else "no wait"
        return f"Scale {self.resource_id} to {self.target_sku} ({mode}, timeout {self.timeout_minutes} min)"


@dataclass
class CapacityLifecycleInput:
    """Input parameters for the resume and suspend workflows."""

    resource_id: str
    wait_for_completion: bool = True
    timeout_minutes: int = 10
    poll_interval_seconds: int = 30

    def validate(self) -> None:
        """Check parameters before the workflow starts."""
        parse_resource_id(self.resource_id)
        _require_positive(
            timeout_minutes=self.timeout_minutes,
            poll_interval_seconds=self.poll_interval_seconds,
        )


def _require_positive(**values: int) -> None:
    for name, value in values.items():
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            raise InvalidParameters(f"{name} must be a positive integer, got {value!r}")


@dataclass
class OperationResult:
    """Outcome of a single capacity operation.

    The same value drives both the JSON payload printed for the caller and the
    exception raised on failure, so the two can never disagree.
    """

    capacity_name: str
    subscription_id: str
    resource_group: str
    location: Optional[str]
    previous_sku: Optional[str]
    current_sku: Optional[str]
    target_sku: Optional[str]
    state: Optional[str]
    success: bool
    timestamp: str
    message: Optional[str] = None
    error: bool = False
    error_kind: Optional[CapacityErrorKind] = None
    status_code: Optional[int] = None
    response_body: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        """Serializable representation."""
        data = asdict(self)
        data["error_kind"] = self.error_kind.value if self.error_kind else None
        return data

    def to_json(self) -> str:
        """JSON payload for the caller."""
        return json.dumps(self.to_dict(), indent=2)

    def raise_for_error(self) -> None:
        """Raise the typed exception matching this result, if it is a failure."""
        if not self.error:
            return
        kind = self.error_kind or CapacityErrorKind.SCALING_FAILED
        raise error_for(
            kind,
            self.message or "Capacity operation failed",
            status_code=self.status_code,
            response_body=self.response_body,
        )

    def __str__(self) -> str:
        """String representation."""
        status = "SUCCESS" if self.success and not self.error else "FAILED"
        result = (
            f"[{status}] {self.capacity_name or '<unknown>'}: "
            f"{self.previous_sku} -> {self.current_sku} (target {self.target_sku}), state={self.state}"
        )
        if self.error_kind:
            result += f", {self.error_kind.value}"
        if self.message:
            result += f": {self.message}"
        return result

