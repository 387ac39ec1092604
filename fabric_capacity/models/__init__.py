"""Data models for capacity lifecycle automation."""

from ..resource_locator import ResourceCoordinates
from .types import (
    CapacityLifecycleInput,
    CapacityResource,
    CapacityScaleInput,
    CapacitySku,
    LifecycleState,
    NotificationSeverity,
    OperationResult,
    ProvisioningState,
    TransitionRequest,
    WaitOutcome,
    WaitStatus,
)

__all__ = [
    "CapacityLifecycleInput",
    "CapacityResource",
    "CapacityScaleInput",
    "CapacitySku",
    "LifecycleState",
    "NotificationSeverity",
    "OperationResult",
    "ProvisioningState",
    "ResourceCoordinates",
    "TransitionRequest",
    "WaitOutcome",
    "WaitStatus",
]
