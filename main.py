"""Run the Fabric capacity worker from the repository root.

Equivalent to ``python scripts/worker.py``; one-shot runs and schedule
creation live in the other scripts under ``scripts/``.
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()

# Add the project root to Python path
sys.path.insert(0, str(Path(__file__).parent))

from scripts.worker import main as run_worker


if __name__ == "__main__":
    print("Starting Fabric Capacity Automation worker...")
    print("  Scale once:        python scripts/run_capacity_scale.py <resource_id> <sku>")
    print("  Resume/suspend:    python scripts/run_capacity_lifecycle.py <resume|suspend> <resource_id>")
    print("  Create schedule:   python scripts/create_schedule.py")
    print()
    asyncio.run(run_worker())
