"""
nestwatch Observable Protocol - Property Change Notification Interface
======================================================================

This module defines the structural interface a type must satisfy to take part
in a nested dependency chain: it must let listeners register for change
notifications identified by property name.

Any class providing ``add_property_observer`` and ``remove_property_observer``
qualifies, whether or not it inherits from ``ObservableObject``. Observers are
called as ``observer(sender, property_name)`` after the named property changed.

Example:
    ```python
    class Thermostat:
        def __init__(self):
            self._observers = []
            self._target = 20

        def add_property_observer(self, observer):
            self._observers.append(observer)

        def remove_property_observer(self, observer):
            if observer in self._observers:
                self._observers.remove(observer)

    assert is_observable_type(Thermostat)
    ```
"""

from typing import Any, Callable, Protocol, runtime_checkable

PropertyObserver = Callable[[Any, str], None]


@runtime_checkable
class PropertyChangeNotifier(Protocol):
    """
    Protocol for objects that raise change notifications by property name.

    Root objects and every intermediate object of a dependency path must
    implement this protocol. The final leaf value does not need to.
    """

    def add_property_observer(self, observer: PropertyObserver) -> None:
        """Register an observer called as ``observer(sender, property_name)``."""
        ...

    def remove_property_observer(self, observer: PropertyObserver) -> None:
        """Remove a previously registered observer. Unknown observers are ignored."""
        ...


def is_observable_type(tp: Any) -> bool:
    """Return True if ``tp`` is a class whose instances can notify property changes."""
    if not isinstance(tp, type):
        return False
    try:
        return issubclass(tp, PropertyChangeNotifier)
    except TypeError:
        return False


def is_observable(obj: Any) -> bool:
    """Return True if ``obj`` can notify property changes."""
    return isinstance(obj, PropertyChangeNotifier)
