"""Debug output controlled by the ``PKL_DEBUG`` environment variable."""

from __future__ import annotations

import os
import sys

_PREFIX = "[pklkit] "


def debug_enabled() -> bool:
    """Return True when ``PKL_DEBUG`` is set to ``1``."""
    return os.environ.get("PKL_DEBUG") == "1"


def debug(message: str, *args: object) -> None:
    """Write a debugging line to standard error if debugging is enabled.

    ``message`` is a %-style format string applied to ``args``.
    """
    if not debug_enabled():
        return
    text = message % args if args else message
    sys.stderr.write(f"{_PREFIX}{text}\n")