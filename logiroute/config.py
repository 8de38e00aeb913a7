"""
Logiroute Configuration

Loads routing defaults from environment variables with sensible defaults.
"""

import os
from pathlib import Path
from dotenv import load_dotenv

# Load .env file if it exists
load_dotenv()


def _env_flag(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in {"1", "true", "yes", "on"}


class Config:
    """Routing configuration loaded from environment variables."""

    # Seconds between re-resolution attempts while a facility is unconfigured.
    # Matches the 5 second retry cadence of facilities built before their stockpile.
    RETRY_INTERVAL_SECONDS: float = float(os.getenv("LOGIROUTE_RETRY_INTERVAL", "5.0"))

    # BFS cap in road hops; generous enough for the largest plausible map.
    MAX_ROAD_DISTANCE: int = int(os.getenv("LOGIROUTE_MAX_ROAD_DISTANCE", "1000"))

    # Source inputs from producers before falling back to stockpiles
    PREFER_DIRECT_SUPPLY: bool = _env_flag("LOGIROUTE_PREFER_DIRECT_SUPPLY", "true")

    # Logging
    VERBOSE: bool = _env_flag("LOGIROUTE_VERBOSE", "false")

    # Project Paths
    PROJECT_ROOT: Path = Path(__file__).parent.parent
    SCENARIOS_DIR: Path = PROJECT_ROOT / "examples"

    @classmethod
    def validate(cls) -> None:
        """Validate configuration and raise errors if values are unusable."""
        if cls.RETRY_INTERVAL_SECONDS <= 0:
            raise ValueError(
                "LOGIROUTE_RETRY_INTERVAL must be a positive number of seconds "
                f"(got {cls.RETRY_INTERVAL_SECONDS})"
            )

        if cls.MAX_ROAD_DISTANCE <= 0:
            raise ValueError(
                "LOGIROUTE_MAX_ROAD_DISTANCE must be a positive number of hops "
                f"(got {cls.MAX_ROAD_DISTANCE})"
            )

    @classmethod
    def display(cls) -> str:
        """Return a formatted string showing current configuration."""
        lines = [
            "Logiroute Configuration:",
            f"  Retry Interval: {cls.RETRY_INTERVAL_SECONDS}s",
            f"  Max Road Distance: {cls.MAX_ROAD_DISTANCE} hops",
            f"  Prefer Direct Supply: {cls.PREFER_DIRECT_SUPPLY}",
            f"  Verbose: {cls.VERBOSE}",
        ]
        return "\n".join(lines)
