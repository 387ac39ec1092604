"""Script to resume or suspend a Fabric capacity once and print the result."""

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
from fabric_capacity.models.types import CapacityLifecycleInput
from fabric_capacity.workflows.capacity_lifecycle import CapacityResumeWorkflow, CapacitySuspendWorkflow

# Configure logging (stderr, so stdout carries only the JSON result)
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

WORKFLOWS = {
    "resume": CapacityResumeWorkflow,
    "suspend": CapacitySuspendWorkflow,
}

USAGE = """Usage: python run_capacity_lifecycle.py <resume|suspend> <resource_id> [timeout_minutes] [--no-wait]

Arguments:
  action           - resume or suspend
  resource_id      - /subscriptions/{sub}/resourceGroups/{rg}/providers/Microsoft.Fabric/capacities/{name}
  timeout_minutes  - (Optional) Minutes to wait for the transition (default from settings)
  --no-wait        - (Optional) Return once the request is accepted

Example:
  python run_capacity_lifecycle.py suspend /subscriptions/.../capacities/mycap
"""


def build_input(argv: list[str], settings) -> tuple[str, CapacityLifecycleInput]:
    """Parse the action and workflow input from command-line arguments."""
    wait_for_completion = "--no-wait" not in argv
    positional = [arg for arg in argv if arg != "--no-wait"]

    if len(positional) < 2:
        raise ValueError("action and resource_id are required")

    action = positional[0].lower()
    if action not in WORKFLOWS:
        raise ValueError(f"Unknown action {positional[0]!r}, expected resume or suspend")

    timeout_minutes = settings.default_timeout_minutes
    if len(positional) >= 3:
        timeout_minutes = int(positional[2])

    workflow_input = CapacityLifecycleInput(
        resource_id=positional[1],
        wait_for_completion=wait_for_completion,
        timeout_minutes=timeout_minutes,
        poll_interval_seconds=settings.poll_interval_seconds,
    )
    workflow_input.validate()
    return action, workflow_input


async def main():
    """Execute a resume or suspend workflow once."""
    # Load settings
    try:
        settings = get_settings()
        settings.validate_auth_config()
    except Exception as e:
        logger.error(f"Failed to load settings: {e}")
        logger.error("Please ensure all required environment variables are set")
        sys.exit(1)

    try:
        action, workflow_input = build_input(sys.argv[1:], settings)
    except (ValueError, CapacityOperationError) as e:
        logger.error(f"Invalid arguments: {e}")
        print(USAGE, file=sys.stderr)
        sys.exit(2)

    logger.info(f"Capacity {action}: {workflow_input.resource_id}")

    try:
        client = await connect_temporal(settings)
    except Exception as e:
        logger.error(f"Failed to connect to Temporal: {e}")
        sys.exit(1)

    capacity_name = workflow_input.resource_id.rstrip("/").rsplit("/", 1)[-1]
    try:
        result = await client.execute_workflow(
            WORKFLOWS[action].run,
            workflow_input,
            id=f"capacity-{action}-{capacity_name}-{int(datetime.now().timestamp())}",
            task_queue=settings.task_queue,
        )
    except Exception as e:
        logger.error(f"Failed to execute workflow: {e}")
        sys.exit(1)

    print(result.to_json())

    try:
        result.raise_for_error()
    except CapacityOperationError as e:
        logger.error(f"Capacity {action} failed: {e}")
        sys.exit(1)

    logger.info(f"✓ {result}")


if __name__ == "__main__":
    asyncio.run(main())
