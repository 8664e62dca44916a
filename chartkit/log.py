"""
Logging configuration shared by the chart modules.
"""

import logging
import sys
from typing import Optional

from chartkit.settings import LOG_LEVEL


def setup_logging(level: Optional[str] = None) -> logging.Logger:
    """
    Configure the root logger with a single stdout handler.

    Args:
        level: Logging level name. Falls back to CHARTKIT_LOG_LEVEL.

    Returns:
        The configured root logger.
    """
    numeric_level = getattr(logging, (level or LOG_LEVEL).upper(), logging.INFO)

    formatter = logging.Formatter(
        fmt="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    # Streamlit re-runs scripts; avoid stacking handlers
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    return root_logger


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


__all__ = ("setup_logging", "get_logger")
