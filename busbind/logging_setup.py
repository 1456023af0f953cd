from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Dict, Optional

from .debug import debug_enabled

LOGGER_NAME = "busbind"
LOG_FORMAT = "ts=%(asctime)s level=%(levelname)s logger=%(name)s msg=%(message)s"

_HANDLER: Optional[logging.Handler] = None


def configure_logging(base_dir: Optional[Path] = None, debug: Optional[bool] = None) -> Dict[str, str]:
    """Attach one key=value handler to the ``busbind`` logger.

    Calling again replaces the previous handler rather than stacking a
    second one.
    """
    global _HANDLER
    verbose = debug_enabled() if debug is None else bool(debug)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(logging.DEBUG if verbose else logging.INFO)
    logger.propagate = False

    if _HANDLER is not None:
        logger.removeHandler(_HANDLER)
        _HANDLER.close()
        _HANDLER = None

    if base_dir is not None:
        log_dir = Path(base_dir) / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)
        log_path = log_dir / "busbind.log"
        handler: logging.Handler = logging.FileHandler(log_path, encoding="utf-8")
        target = str(log_path)
        kind = "file"
    else:
        handler = logging.StreamHandler(sys.stderr)
        target = "stderr"
        kind = "stream"
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(handler)
    _HANDLER = handler

    return {
        "log_path": target,
        "format": "kv",
        "handlers": kind,
        "logger_name": LOGGER_NAME,
        "level": logging.getLevelName(logger.level),
    }


def get_logger() -> logging.Logger:
    return logging.getLogger(LOGGER_NAME)
