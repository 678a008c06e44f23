"""Threading utilities for sizing the probe worker pool."""

import os
import sys
from typing import Optional


def is_free_threading_enabled() -> bool:
    """Detect if Python is running with the GIL disabled (3.13+ free-threading builds)."""
    try:
        return hasattr(sys, "_is_gil_enabled") and not sys._is_gil_enabled()
    except Exception:
        return False


def get_optimal_worker_count(user_specified: Optional[int] = None, task_count: Optional[int] = None) -> int:
    """Calculate the worker count for I/O-bound git probes.

    Args:
        user_specified: User-specified worker count, if provided
        task_count: Number of tasks to run; the pool is never larger than this

    Returns:
        Number of workers to use (always at least 1)
    """
    if user_specified is not None and user_specified > 0:
        workers = user_specified
    else:
        cpu_count = os.cpu_count() or 1
        if is_free_threading_enabled():
            workers = min(64, cpu_count * 2)
        else:
            # Probes are subprocess-bound, CPU_count + 4 is the usual I/O heuristic
            workers = min(32, cpu_count + 4)

    if task_count is not None:
        workers = min(workers, task_count)
    return max(1, workers)
