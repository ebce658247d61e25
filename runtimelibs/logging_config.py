"""Logging setup shared by the application entry points."""

from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"

_HANDLER_NAME = "runtimelibs"


def configure_logging(level: str | int = "INFO") -> None:
    """Install a single stream handler on the root logger.

    Calling it again only updates the level, so repeated app factories do not
    duplicate output.
    """
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    if any(handler.get_name() == _HANDLER_NAME for handler in root.handlers):
        return

    handler = logging.StreamHandler(sys.stderr)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    logging.getLogger("httpx").setLevel(logging.WARNING)
