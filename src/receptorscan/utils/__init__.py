"""Utility functions for receptorscan.

- Interval sets (coalescing ranges, intersection, run lists)
- Logging configuration and stage timing

Example:
    >>> from receptorscan.utils import IntervalSet
    >>> spans = IntervalSet([(1, 3), (4, 6)])
    >>> spans.runlist()
    [Interval(lo=1, hi=6)]
"""

from receptorscan.utils.intervals import (
    Interval,
    IntervalSet,
    InvalidRangeError,
)
from receptorscan.utils.logging import Timer, log_run_start, setup_logging

__all__ = [
    "Interval",
    "IntervalSet",
    "InvalidRangeError",
    "Timer",
    "log_run_start",
    "setup_logging",
]
