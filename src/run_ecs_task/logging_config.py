"""Logging setup for the CLI."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def configure_logging(level: str = "WARNING") -> None:
    """Route all log records to stderr so stdout stays reserved for results."""

    root = logging.getLogger()
    root.setLevel(level.upper())
    for handler in list(root.handlers):
        root.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)

    # botocore is chatty at INFO (credential resolution, retries).
    if root.level > logging.DEBUG:
        logging.getLogger("botocore").setLevel(logging.WARNING)
