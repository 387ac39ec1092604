"""Worker script to run capacity lifecycle workflows and activities."""

import asyncio
import logging
import sys
from pathlib import Path

from temporalio.worker import Worker

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fabric_capacity.activities import (
    get_capacity_status,
    resize_capacity,
    resume_capacity,
    send_slack_notification,
    suspend_capacity,
)
from fabric_capacity.config import get_settings
from fabric_capacity.connection import connect_temporal
from fabric_capacity.credentials import close_credential
from fabric_capacity.workflows import (
    CapacityResumeWorkflow,
    CapacityScaleWorkflow,
    CapacitySuspendWorkflow,
)

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


async def main():
    """Start the worker to process capacity lifecycle workflows."""
    # Load settings
    try:
        settings = get_settings()
        settings.validate_auth_config()
    except Exception as e:
        logger.error(f"Failed to load settings: {e}")
        logger.error("Please ensure all required environment variables are set")
        sys.exit(1)

    logger.info(f"Starting worker for namespace: {settings.temporal_namespace}")
    logger.info(f"Task queue: {settings.task_queue}")
    logger.info(f"Management endpoint: {settings.azure_management_url} (api-version {settings.fabric_api_version})")

    try:
        client = await connect_temporal(settings)
    except Exception as e:
        logger.error(f"Failed to connect to Temporal: {e}")
        sys.exit(1)

    # Create and run worker
    worker = Worker(
        client,
        task_queue=settings.task_queue,
        workflows=[
            CapacityScaleWorkflow,
            CapacityResumeWorkflow,
            CapacitySuspendWorkflow,
        ],
        activities=[
            get_capacity_status,
            resize_capacity,
            resume_capacity,
            send_slack_notification,
            suspend_capacity,
        ],
    )

    logger.info("Worker started, waiting for tasks...")
    try:
        await worker.run()
    except KeyboardInterrupt:
        logger.info("Worker shutting down...")
    except Exception as e:
        logger.error(f"Worker error: {e}")
        raise
    finally:
        await close_credential()


if __name__ == "__main__":
    asyncio.run(main())
