"""
Test utilities for nestwatch.

This package contains shared models and helpers used across the unit and
integration tests.
"""

from .memory_utils import (
    MemoryTracker,
    assert_collectable,
    assert_no_object_leak,
    count_types,
)
from .recorder import CallbackRecorder

__all__ = [
    "assert_collectable",
    "assert_no_object_leak",
    "count_types",
    "CallbackRecorder",
    "MemoryTracker",
]
