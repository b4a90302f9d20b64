"""
nestwatch Accessors - Pooled Property Getters
=============================================

This module provides AccessorFactory, which hands out one reusable getter per
``(declaring type, property name)`` pair instead of looking properties up
again on every change notification.

Building an accessor validates that the property exists on the declaring
type; calling it is a plain attribute read:

```python
get_address = make_accessor(Customer, "address")
get_address(customer)  # same as customer.address
```

Accessors are pooled, so asking twice for the same pair returns the same
function object. The pool keeps a reference to every declaring type it has
seen; ``AccessorFactory.clear_pool()`` empties it (mostly useful in tests).
"""

import operator
import threading
from typing import Any, Callable, Dict, Tuple

from .errors import ConfigurationError
from .members import resolve_member

Accessor = Callable[[Any], Any]


class AccessorFactory:
    """
    Flyweight pool of property accessors keyed by declaring type and property name.
    """

    _pool: Dict[Tuple[type, str], Accessor] = {}
    _lock = threading.Lock()

    @staticmethod
    def get_accessor(declaring_type: type, property_name: str) -> Accessor:
        """
        Return the getter for ``property_name`` on instances of ``declaring_type``.

        Raises:
            ConfigurationError: If the type declares no such property.
        """
        key = (declaring_type, property_name)
        accessor = AccessorFactory._pool.get(key)
        if accessor is not None:
            return accessor

        member = resolve_member(declaring_type, property_name)
        if member is None:
            type_name = getattr(declaring_type, "__name__", repr(declaring_type))
            raise ConfigurationError(
                f"Property {property_name!r} could not be found on {type_name}",
                declaring_type=declaring_type,
                property_name=property_name,
            )

        with AccessorFactory._lock:
            return AccessorFactory._pool.setdefault(
                key, operator.attrgetter(member.attribute_name)
            )

    @staticmethod
    def pool_size() -> int:
        return len(AccessorFactory._pool)

    @staticmethod
    def clear_pool() -> None:
        """Clear the pool (for testing)."""
        with AccessorFactory._lock:
            AccessorFactory._pool.clear()


def make_accessor(declaring_type: type, property_name: str) -> Accessor:
    """Shorthand for ``AccessorFactory.get_accessor``."""
    return AccessorFactory.get_accessor(declaring_type, property_name)
