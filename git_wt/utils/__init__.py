"""Utility functions for git-wt.

This package provides utility modules:
- logging: Logging configuration and logger creation
- threading: Worker pool sizing for parallel git probes
"""

from .logging import setup_logging, get_logger, ColoredFormatter
from .threading import is_free_threading_enabled, get_optimal_worker_count

__all__ = [
    "setup_logging",
    "get_logger",
    "ColoredFormatter",
    "is_free_threading_enabled",
    "get_optimal_worker_count",
]
