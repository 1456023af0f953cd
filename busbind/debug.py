from __future__ import annotations

import logging
import os
from typing import Optional

DEBUG_ENV = "BUSBIND_DEBUG"
_TRUTHY = {"1", "true", "yes", "on"}

_OVERRIDE: Optional[bool] = None


def debug_enabled() -> bool:
    if _OVERRIDE is not None:
        return _OVERRIDE
    return os.environ.get(DEBUG_ENV, "").strip().lower() in _TRUTHY


def set_debug(enabled: Optional[bool]) -> None:
    """Force tracing on or off; ``None`` falls back to the environment."""
    global _OVERRIDE
    _OVERRIDE = None if enabled is None else bool(enabled)


def trace(logger: logging.Logger, msg: str, *args: object) -> None:
    if debug_enabled():
        logger.debug(msg, *args)


__all__ = ["DEBUG_ENV", "debug_enabled", "set_debug", "trace"]
