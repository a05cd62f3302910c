"""Loguru sink configuration for the CLI."""

import sys

from loguru import logger

LOG_FORMAT = "<dim>{time:HH:mm:ss}</dim> <level>{level: <8}</level> {message}"


def configure_logging(verbose: bool = False) -> None:
    """Send log records to stderr, keeping stdout for command output."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format=LOG_FORMAT,
    )
