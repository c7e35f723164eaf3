"""A fast, monotonically increasing tick counter."""

from __future__ import annotations

import time


def now() -> int:
    """Return the current tick count of a high-resolution monotonic clock.

    One tick is one nanosecond. The origin is arbitrary, so only
    differences between two readings are meaningful. The call is
    thread-safe.
    """
    return time.perf_counter_ns()