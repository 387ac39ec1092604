"""Slack notifications about capacity operations."""

import logging
from datetime import datetime
from typing import Any

import httpx
from temporalio import activity

from ..config import get_settings
from ..models.types import NotificationSeverity

logger = logging.getLogger(__name__)

COLOR_MAP = {
    NotificationSeverity.INFO: "#36a64f",
    NotificationSeverity.WARNING: "#ff9900",
    NotificationSeverity.ERROR: "#ff0000",
    NotificationSeverity.CRITICAL: "#990000",
}

EMOJI_MAP = {
    NotificationSeverity.INFO: ":information_source:",
    NotificationSeverity.WARNING: ":warning:",
    NotificationSeverity.ERROR: ":x:",
    NotificationSeverity.CRITICAL: ":rotating_light:",
}


def build_slack_payload(
    message: str,
    severity: NotificationSeverity,
    workflow_type: str,
    workflow_id: str,
) -> dict[str, Any]:
    """Build a Slack attachment naming the workflow that sent it."""
    return {
        "attachments": [
            {
                "color": COLOR_MAP.get(severity, "#808080"),
                "title": f"{EMOJI_MAP.get(severity, ':bell:')} Fabric Capacity Automation",
                "text": message,
                "fields": [
                    {"title": "Workflow", "value": workflow_type, "short": True},
                    {"title": "Workflow ID", "value": workflow_id, "short": True},
                ],
                "footer": f"severity: {severity.value}",
                "ts": int(datetime.now().timestamp()),
            }
        ]
    }


async def _post_webhook(url: str, payload: dict[str, Any]) -> None:
    async with httpx.AsyncClient(timeout=10.0) as client:
        response = await client.post(url, json=payload)
        response.raise_for_status()


@activity.defn
async def send_slack_notification(message: str, severity: NotificationSeverity) -> bool:
    """Send a notification to Slack.

    Args:
        message: The message to send
        severity: The severity level of the notification

    Returns:
        True if sent, False if no webhook is configured

    Raises:
        httpx.HTTPError: If the webhook request fails
    """
    settings = get_settings()

    activity.logger.info(f"Activity: send_slack_notification with severity {severity.value}")

    if not settings.slack_webhook_url:
        activity.logger.info("No Slack webhook configured, skipping notification")
        return False

    info = activity.info()
    payload = build_slack_payload(message, severity, info.workflow_type, info.workflow_id)

    try:
        await _post_webhook(settings.slack_webhook_url, payload)
    except httpx.HTTPError as e:
        activity.logger.error(f"Failed to send Slack notification: {e}")
        raise

    activity.logger.info("Successfully sent Slack notification")
    return True
