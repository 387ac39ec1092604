"""Activities for capacity lifecycle workflows."""

from .capacity_ops import get_capacity_status, resize_capacity, resume_capacity, suspend_capacity
from .notification_ops import send_slack_notification

__all__ = [
    "get_capacity_status",
    "resize_capacity",
    "resume_capacity",
    "send_slack_notification",
    "suspend_capacity",
]
