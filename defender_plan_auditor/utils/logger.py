"""Logging setup shared by every module"""

import logging
import sys
from typing import Optional

ROOT_LOGGER_NAME = "defender_plan_auditor"
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


def _root_logger() -> logging.Logger:
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(logging.WARNING)
        root.propagate = False
    return root


def setup_logger(name: str, level: Optional[str] = None) -> logging.Logger:
    """Return a logger under the package namespace.

    Passing ``level`` sets the level for the whole package, so the CLI can
    switch every component to DEBUG with a single call.
    """
    root = _root_logger()
    if level:
        root.setLevel(getattr(logging, level.upper(), logging.INFO))

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)
