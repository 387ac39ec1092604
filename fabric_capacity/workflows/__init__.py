"""Workflows for capacity lifecycle automation."""

from .capacity_lifecycle import CapacityResumeWorkflow, CapacitySuspendWorkflow
from .capacity_scale import CapacityScaleWorkflow

__all__ = [
    "CapacityResumeWorkflow",
    "CapacityScaleWorkflow",
    "CapacitySuspendWorkflow",
]
