"""
Configuration and path management for porpsim.

Central place for default paths and logging setup.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Union

logger = logging.getLogger("porpsim")

# Landscape folders (each holding bathy.asc and patches.asc) live here by default
DEFAULT_DATA_DIR = Path("data")

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Stream handler installed by configure_logging
_handler: Optional[logging.Handler] = None


def configure_logging(level: Union[int, str] = logging.INFO) -> logging.Logger:
    """
    Send porpsim log records to stderr.

    Safe to call more than once; the handler is only installed once.

    Args:
        level: Logging level name or number

    Returns:
        The package logger
    """
    global _handler

    if isinstance(level, str):
        name = level
        level = logging.getLevelName(name.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {name}")

    logger.setLevel(level)
    if _handler is None or _handler not in logger.handlers:
        _handler = logging.StreamHandler(sys.stderr)
        _handler.setFormatter(logging.Formatter(LOG_FORMAT))
        logger.addHandler(_handler)
    return logger
