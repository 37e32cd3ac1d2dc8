"""
ProjectMap Logging Configuration

Configures logging based on environment variables:
- PROJECTMAP_DEBUG: Enable debug logging (default: false)
- PROJECTMAP_LOG_FILE: Optional log file path (default: stderr only)
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOG_FORMAT = "%(asctime)s %(levelname)-5s [%(name)s] %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def setup_logging(
    debug: Optional[bool] = None,
    log_file: Optional[str] = None,
) -> logging.Logger:
    """
    Configure logging for projectmap.

    Args:
        debug: Enable debug level. Defaults to PROJECTMAP_DEBUG env var.
        log_file: Log file path. Defaults to PROJECTMAP_LOG_FILE env var;
                  when neither is set only stderr is used.

    Returns:
        Root logger for projectmap
    """
    if debug is None:
        debug = os.environ.get("PROJECTMAP_DEBUG", "").lower() in ("true", "1", "yes")
    if log_file is None:
        log_file = os.environ.get("PROJECTMAP_LOG_FILE") or None

    level = logging.DEBUG if debug else logging.INFO
    formatter = logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT)

    logger = logging.getLogger("projectmap")
    logger.setLevel(level)
    logger.handlers.clear()

    stderr_handler = logging.StreamHandler(sys.stderr)
    stderr_handler.setFormatter(formatter)
    if log_file:
        # If logging to file, only show warnings on stderr
        stderr_handler.setLevel(logging.WARNING)
    else:
        stderr_handler.setLevel(level)
    logger.addHandler(stderr_handler)

    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)
        logger.info(f"Logging to file: {log_file}")

    return logger


def get_logger(component: str) -> logging.Logger:
    """
    Get a logger for a specific component.

    Args:
        component: Component name (e.g., "collector", "tokens", "ignore")

    Returns:
        Logger instance for the component
    """
    return logging.getLogger(f"projectmap.{component}")
