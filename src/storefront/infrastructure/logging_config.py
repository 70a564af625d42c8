"""Process-wide logging setup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install the storefront log format once, at process start."""
    logging.basicConfig(level=level.upper(), format=LOG_FORMAT)
    logging.getLogger("storefront").setLevel(level.upper())
