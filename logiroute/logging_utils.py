"""Logging utilities for Logiroute.

Provides color-coded console output to distinguish route searches, warnings,
retries, and successful resolutions.
"""

import os
from enum import Enum

from .config import Config


class Color(Enum):
    """ANSI color codes for terminal output."""

    # Colors for operation types
    BLUE = "\033[94m"      # Deterministic searches (BFS, nearest scans)
    YELLOW = "\033[93m"    # Warnings (misconfiguration, nothing found)
    RED = "\033[91m"       # Errors and retries
    GREEN = "\033[92m"     # Resolved routes
    CYAN = "\033[96m"      # Info/metadata

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if LOGIROUTE_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("LOGIROUTE_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


# Markers for operation types (color-blind accessible)
LOG_TAG_SEARCH = "[•]"    # Deterministic search step
LOG_TAG_WARNING = "[!]"   # Misconfiguration or missing endpoint
LOG_TAG_RETRY = "[↻]"     # Scheduled re-resolution
LOG_TAG_SUCCESS = "[✓]"   # Endpoint resolved
LOG_TAG_INFO = "[i]"      # Information


def log_deterministic(message: str) -> None:
    """Log a search step (blue). Only printed when verbose output is enabled."""
    if Config.VERBOSE:
        print(colored(f"{LOG_TAG_SEARCH} {message}", Color.BLUE))


def log_warning(message: str) -> None:
    """Log a warning (yellow)."""
    print(colored(f"{LOG_TAG_WARNING} {message}", Color.YELLOW))


def log_error(message: str) -> None:
    """Log an error (red)."""
    print(colored(f"{LOG_TAG_WARNING} {message}", Color.RED, bold=True))


def log_retry(message: str) -> None:
    """Log a retry (red)."""
    print(colored(f"{LOG_TAG_RETRY} {message}", Color.RED))


def log_success(message: str) -> None:
    """Log a success (green)."""
    print(colored(f"{LOG_TAG_SUCCESS} {message}", Color.GREEN))


def log_info(message: str) -> None:
    """Log metadata/info (cyan)."""
    print(colored(f"{LOG_TAG_INFO} {message}", Color.CYAN))
