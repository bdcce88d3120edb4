"""Logging formatting and functions for debugging."""

import logging
import os
from typing import Any

import ujson

FORMAT = "[{asctime}][{name}][{levelname:8s}](L:{lineno}) {funcName}: {message}"
logging.basicConfig(format=FORMAT, datefmt="%Y-%m-%d %H:%M:%S", style="{")

LOG = logging.getLogger("remscontent")
LOG.setLevel(os.getenv("LOG_LEVEL", "INFO"))


def log_debug_json(content: dict[str, Any] | list[Any]) -> None:
    """
    Log a JSON-formatted payload at the debug level with pretty-printing.

    Nothing is serialised unless debug logging is enabled.

    :param content: A dictionary or list representing JSON data to be logged.
    """
    if LOG.isEnabledFor(logging.DEBUG):
        LOG.debug(ujson.dumps(content, indent=4, escape_forward_slashes=False))
