"""Script to run the capacity scale workflow once and print its result."""

import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path

from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()

# Add parent directory to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from fabric_capacity.config import get_settings
from fabric_capacity.connection import connect_temporal
from fabric_capacity.errors import CapacityOperationError
from fabric_capacity.models.types import CapacityScaleInput, CapacitySku
from fabric_capacity.workflows.capacity_scale import CapacityScaleWorkflow

# Configure logging (stderr, so stdout carries only the JSON result)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

USAGE = """Usage: python run_capacity_scale.py <resource_id> <target_sku> [timeout_minutes] [--no-wait]

Arguments:
  resource_id      - /subscriptions/{sub}/resourceGroups/{rg}/providers/Microsoft.Fabric/capacities/{name}
  target_sku       - One of: {skus}
  timeout_minutes  - (Optional) Minutes to wait for the scale to complete (default from settings)
  --no-wait        - (Optional) Return once the request is accepted

Example:
  python run_capacity_scale.py /subscriptions/.../capacities/mycap F64
  python run_capacity_scale.py /subscriptions/.../capacities/mycap F2 20
"""


def build_input(argv: list[str], settings) -> CapacityScaleInput:
    """Build and validate the workflow input from command-line arguments.

    Raises:
        ValueError: If the arguments are malformed
        CapacityOperationError: If the identifier, SKU or timeout is invalid
    """
    wait_for_completion = "--no-wait" not in argv
    positional = [arg for arg in argv if arg != "--no-wait"]

    if len(positional) < 2:
        raise ValueError("resource_id and target_sku are required")

    timeout_minutes = settings.default_timeout_minutes
    if len(positional) >= 3:
        timeout_minutes = int(positional[2])

    workflow_input = CapacityScaleInput(
        resource_id=positional[0],
        target_sku=positional[1],
        wait_for_completion=wait_for_completion,
        timeout_minutes=timeout_minutes,
        poll_interval_seconds=settings.poll_interval_seconds,
        paused_poll_interval_seconds=settings.paused_poll_interval_seconds,
        settle_delay_seconds=settings.resume_settle_seconds,
    )
    workflow_input.validate()
    return workflow_input


async def main():
    """Execute the capacity scale workflow once."""
    # Load settings
    try:
        settings = get_settings()
        settings.validate_auth_config()
    except Exception as e:
        logger.error(f"Failed to load settings: {e}")
        logger.error("Please ensure all required environment variables are set")
        sys.exit(1)

    try:
        workflow_input = build_input(sys.argv[1:], settings)
    except (ValueError, CapacityOperationError) as e:
        logger.error(f"Invalid arguments: {e}")
        print(USAGE.replace("{skus}", ", ".join(sku.value for sku in CapacitySku)), file=sys.stderr)
        sys.exit(2)

    logger.info("=" * 80)
    logger.info("Fabric Capacity Scale")
    logger.info("=" * 80)
    logger.info(f"Input: {workflow_input}")

    try:
        client = await connect_temporal(settings)
    except Exception as e:
        logger.error(f"Failed to connect to Temporal: {e}")
        sys.exit(1)

    try:
        result = await client.execute_workflow(
            CapacityScaleWorkflow.run,
            workflow_input,
            id=f"capacity-scale-{workflow_input.resource_id.rsplit('/', 1)[-1]}-{int(datetime.now().timestamp())}",
            task_queue=settings.task_queue,
        )
    except Exception as e:
        logger.error(f"Failed to execute workflow: {e}")
        sys.exit(1)

    # Structured result first, then the exit status derived from the same value
    print(result.to_json())

    try:
        result.raise_for_error()
    except CapacityOperationError as e:
        logger.error(f"Capacity scale failed: {e}")
        sys.exit(1)

    logger.info(f"✓ {result}")


if __name__ == "__main__":
    asyncio.run(main())
