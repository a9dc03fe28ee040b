"""
Loguru configuration for applications embedding the object runtime.

The library itself only emits through ``loguru.logger``; call
``setup_logging`` once at application start to choose where it goes.
"""
import os
import sys
from typing import List, Optional

from loguru import logger

CONSOLE_FORMAT = ("<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
                  "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>")


def setup_logging(debug_mode: bool = True, log_dir: Optional[str] = None,
                  console: bool = True) -> List[int]:
    """
    Replace the default handler with the runtime's sinks.

    Args:
        debug_mode: Log CRUD, paging and selection details at DEBUG level.
        log_dir: Directory for a rotating log file, created if missing.
        console: Add a colourised stderr sink.

    Returns:
        Handler ids, for ``logger.remove``.
    """
    logger.remove()
    level = "DEBUG" if debug_mode else "INFO"
    handlers = []
    if console:
        handlers.append(logger.add(sys.stderr, level=level, format=CONSOLE_FORMAT))

    if log_dir:
        os.makedirs(log_dir, exist_ok=True)
        handlers.append(logger.add(os.path.join(log_dir, "bizobjects_{time}.log"),
                                   rotation="10 MB", retention="1 week", level="DEBUG"))

    logger.debug(f"Logging initialized at {level} with {len(handlers)} sink(s)")
    return handlers
