"""Package logger setup.

All modules obtain their logger through :func:`get_logger` so that output is
routed through a single ``citystid`` handler. The level is read once from the
``CITYSTID_LOG_LEVEL`` environment variable.
"""
import logging
import os
import sys
from typing import Optional

_PACKAGE = "citystid"
_ENV_VAR = "CITYSTID_LOG_LEVEL"
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

_LEVEL_NAMES = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


def _resolve_level(value: Optional[str]) -> int:
    """Map a level name to a logging level, falling back to INFO."""
    if not value:
        return logging.INFO
    return _LEVEL_NAMES.get(value.strip().upper(), logging.INFO)


def _configure_root() -> logging.Logger:
    root = logging.getLogger(_PACKAGE)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(_FORMAT))
        root.addHandler(handler)
        root.setLevel(_resolve_level(os.environ.get(_ENV_VAR)))
        root.propagate = False
    return root


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """Return the package logger, or a child of it for ``name``.

    Module names already under the package (``citystid.ledger``) are used as
    they are; anything else is nested under ``citystid``.
    """
    root = _configure_root()
    if not name:
        return root
    if name == _PACKAGE or name.startswith(_PACKAGE + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{_PACKAGE}.{name}")
