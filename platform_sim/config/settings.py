"""
Application Settings

Environment configuration for the simulator.
"""

import os
from dataclasses import dataclass
from typing import Optional


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str) -> Optional[int]:
    value = os.getenv(name)
    if value is None or value.strip() == "":
        return None
    return int(value)


@dataclass
class Settings:
    """Simulator settings from environment."""

    # Fixed delays of the simulated asynchronous completions (seconds)
    deployment_settle_seconds: float = 2.0
    issue_resolution_seconds: float = 1.5
    check_seconds: float = 2.0

    # Seed for checkpoint draws; None draws from system entropy
    random_seed: Optional[int] = None

    # Count every descendant (not only direct children) in node allocation
    transitive_rollup: bool = False

    @classmethod
    def from_env(cls) -> "Settings":
        """Load settings from environment variables."""
        return cls(
            deployment_settle_seconds=float(os.getenv("PLATFORM_SIM_DEPLOY_SETTLE_SECONDS", "2.0")),
            issue_resolution_seconds=float(os.getenv("PLATFORM_SIM_ISSUE_RESOLUTION_SECONDS", "1.5")),
            check_seconds=float(os.getenv("PLATFORM_SIM_CHECK_SECONDS", "2.0")),
            random_seed=_env_int("PLATFORM_SIM_RANDOM_SEED"),
            transitive_rollup=_env_bool("PLATFORM_SIM_TRANSITIVE_ROLLUP", False),
        )
