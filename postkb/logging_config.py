"""Logging setup for the postkb CLI."""

from __future__ import annotations

import logging

from postkb.config import LoggingConfig


def setup_logging(config: LoggingConfig | None = None, level: str | None = None) -> None:
    """Configure root logging once for command-line use.

    Args:
        config: Logging section of the app config (defaults if None)
        level: Explicit level name, takes precedence over ``config.level``
    """
    config = config or LoggingConfig()
    level_name = (level or config.level).upper()
    numeric = logging.getLevelName(level_name)
    if not isinstance(numeric, int):
        raise ValueError(f"Unknown log level: {level_name}")

    logging.basicConfig(level=numeric, format=config.format, force=True)
