#!/usr/bin/env python3
"""
Platform Simulation CLI

Thin wrapper so the simulator runs from a checkout without installing.
See platform_sim/adapters/inbound/cli_main.py for the commands.

    python bin/simulate_platform.py score --scenario getting-started --add api
"""

import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from platform_sim.adapters.inbound.cli_main import main


if __name__ == "__main__":
    sys.exit(main())
