"""Utility modules for hookgate."""

from .logging import get_logger, setup_logging
from .platform import get_config_dir, get_platform

__all__ = [
    "get_config_dir",
    "get_logger",
    "get_platform",
    "setup_logging",
]
