"""Script to create the Temporal Schedule that scales a capacity on a cron."""

import asyncio
import logging
import sys
from pathlib import Path

from temporalio.client import Schedule, ScheduleActionStartWorkflow, ScheduleOverlapPolicy, ScheduleSpec

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fabric_capacity.config import get_settings
from fabric_capacity.connection import connect_temporal
from fabric_capacity.models.types import CapacityScaleInput
from fabric_capacity.workflows.capacity_scale import CapacityScaleWorkflow

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def main():
    """Create the Temporal Schedule for a recurring capacity scale."""
    # Load settings
    try:
        settings = get_settings()
        settings.validate_auth_config()
        settings.validate_schedule_config()
    except Exception as e:
        logger.error(f"Failed to load settings: {e}")
        logger.error("Please ensure all required environment variables are set")
        sys.exit(1)

    workflow_input = CapacityScaleInput(
        resource_id=settings.schedule_resource_id,
        target_sku=settings.schedule_target_sku,
        wait_for_completion=settings.schedule_wait_for_completion,
        timeout_minutes=settings.default_timeout_minutes,
        poll_interval_seconds=settings.poll_interval_seconds,
        paused_poll_interval_seconds=settings.paused_poll_interval_seconds,
        settle_delay_seconds=settings.resume_settle_seconds,
    )
    try:
        workflow_input.validate()
    except Exception as e:
        logger.error(f"Invalid schedule input: {e}")
        sys.exit(1)

    logger.info(f"Creating schedule for namespace: {settings.temporal_namespace}")

    try:
        client = await connect_temporal(settings)
    except Exception as e:
        logger.error(f"Failed to connect to Temporal: {e}")
        sys.exit(1)

    schedule_id = settings.schedule_id

    try:
        await client.create_schedule(
            schedule_id,
            Schedule(
                action=ScheduleActionStartWorkflow(
                    CapacityScaleWorkflow.run,
                    workflow_input,
                    id=f"{schedule_id}-workflow",
                    task_queue=settings.task_queue,
                ),
                spec=ScheduleSpec(cron_expressions=[settings.schedule_cron]),
                # Skip if previous run is still running
                policy=ScheduleOverlapPolicy.SKIP,
            ),
        )

        logger.info(f"✓ Successfully created schedule: {schedule_id}")
        logger.info(f"  - Cron: {settings.schedule_cron}")
        logger.info(f"  - Capacity: {workflow_input.resource_id}")
        logger.info(f"  - Target SKU: {workflow_input.target_sku}")
        logger.info(f"  - Wait for completion: {workflow_input.wait_for_completion}")
        logger.info(f"  - Overlap policy: SKIP")
        logger.info(f"  - Task queue: {settings.task_queue}")

    except Exception as e:
        if "already exists" in str(e).lower():
            logger.warning(f"Schedule {schedule_id} already exists")
            logger.info("To update the schedule, delete it first with:")
            logger.info(f"  temporal schedule delete --schedule-id {schedule_id}")
        else:
            logger.error(f"Failed to create schedule: {e}")
            sys.exit(1)


if __name__ == "__main__":
    asyncio.run(main())
