"""
Utility functions for the roll search application.
"""

from .timing import (
    timed_operation,
    format_duration,
    TimingResult,
)

__all__ = [
    "timed_operation",
    "format_duration",
    "TimingResult",
]
