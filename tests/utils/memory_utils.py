"""
Memory testing utilities for nested dependency chains.

Nodes must never keep the objects they watch alive, and a disposed
registration must not leave nodes or observers behind. These helpers make such
checks short.

Examples:
    Lifetime check:

        >>> from tests.utils.memory_utils import assert_collectable
        >>> car = Car()
        >>> ref = weakref.ref(car)
        >>> garage.car = Car()
        >>> del car
        >>> assert_collectable(ref)

    Counting instances around an operation:

        >>> with MemoryTracker('TerminalNode') as tracker:
        ...     registration = NestedPropertyRegistration.create(garage, print)
        ...     registration.dispose()
        ...     del registration
        >>> tracker.assert_no_growth()
"""

import gc
import weakref
from collections import defaultdict
from typing import Any, Callable, Dict, Optional


def assert_collectable(
    ref: weakref.ref, description: str = "Object should be cleaned up"
) -> None:
    """Assert that the object behind ``ref`` has been garbage collected.

    Args:
        ref: Weak reference to the object expected to be gone
        description: Custom description for the assertion failure
    """
    gc.collect()
    assert ref() is None, f"{description}: object was not cleaned up"


def count_types() -> Dict[str, int]:
    """Count instances of each object type currently in memory.

    Returns:
        Dictionary mapping type names to counts
    """
    gc.collect()
    counts = defaultdict(int)
    for obj in gc.get_objects():
        counts[type(obj).__name__] += 1
    return counts


def assert_no_object_leak(
    operation: Callable[[], Any],
    type_name: str,
    tolerance: int = 0,
    description: Optional[str] = None,
) -> None:
    """Assert that an operation doesn't leave objects of a specific type behind.

    Args:
        operation: Function to execute that should not create persistent objects
        type_name: Name of the object type to monitor (e.g., 'LinkNode')
        tolerance: Allowed variance in object count
        description: Custom description for assertion failures
    """
    if description is None:
        description = f"Operation should not leak {type_name} objects"

    initial_count = count_types().get(type_name, 0)
    operation()
    final_count = count_types().get(type_name, 0)

    assert (
        abs(final_count - initial_count) <= tolerance
    ), f"{description}: {type_name} count changed from {initial_count} to {final_count}"


class MemoryTracker:
    """Context manager for tracking instance counts during operations."""

    def __init__(self, type_name: Optional[str] = None):
        self.type_name = type_name
        self.initial_counts = None

    def __enter__(self):
        self.initial_counts = count_types()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        pass

    @property
    def object_growth(self) -> Dict[str, int]:
        """Get the change in object counts since entering the context."""
        growth = {}
        for type_name, final_count in count_types().items():
            initial_count = self.initial_counts.get(type_name, 0)
            if final_count != initial_count:
                growth[type_name] = final_count - initial_count
        return growth

    def assert_no_growth(self, type_name: Optional[str] = None, tolerance: int = 0):
        """Assert no object growth occurred for the tracked type."""
        target_type = type_name or self.type_name
        growth = self.object_growth.get(target_type, 0)
        assert (
            abs(growth) <= tolerance
        ), f"{target_type} count changed by {growth} (tolerance: {tolerance})"
