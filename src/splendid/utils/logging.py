"""Logging setup utilities for splendid.

Configures the ``splendid`` logger from the logging settings: stderr
always, plus an append-only log file when one is configured.
"""

from __future__ import annotations

import logging
import sys

from splendid.config.settings import LoggingConfig


def setup_logging(config: LoggingConfig | None = None) -> None:
    """Configure logging for the splendid application.

    A log file that cannot be opened is reported on stderr and
    otherwise ignored; the relay keeps running without it.

    Args:
        config: Logging configuration. If None, uses defaults.
    """
    if config is None:
        config = LoggingConfig()

    root_logger = logging.getLogger("splendid")
    root_logger.setLevel(getattr(logging, config.level.upper(), logging.INFO))

    formatter = logging.Formatter(config.format)

    # Console handler
    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    # File handler (optional)
    if config.file:
        try:
            file_handler = logging.FileHandler(config.file, mode="a")
        except OSError as e:
            root_logger.error("Cannot open log file %s: %s", config.file, e)
        else:
            file_handler.setFormatter(formatter)
            root_logger.addHandler(file_handler)

    root_logger.info("Logging initialized at %s level", config.level)
