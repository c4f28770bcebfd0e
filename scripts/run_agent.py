"""
Launcher for running the agent from a source checkout.

Usage: python scripts/run_agent.py [once|forever]
"""

import sys
from pathlib import Path

# Add parent directory to path to import the package without installing it
sys.path.insert(0, str(Path(__file__).parent.parent))

from trafficlight_agent.cli import main


if __name__ == "__main__":
    sys.exit(main())
