"""
nestwatch Notifier - Observable Objects and Attributes
======================================================

This module provides a ready-made implementation of the property change
notification protocol:

**ObservableObject**: A base class that keeps a list of property observers and
notifies them by property name.

**ObservableProperty**: A data descriptor that stores a value on the instance
and notifies observers every time it is assigned.

**observable**: A factory function that creates ``ObservableProperty`` attributes.

Basic Usage
-----------

```python
from nestwatch import ObservableObject, observable

class Address(ObservableObject):
    city: str = observable("Paris")

class Customer(ObservableObject):
    address: Address = observable()

customer = Customer()
customer.add_property_observer(lambda sender, name: print(f"{name} changed"))
customer.address = Address()  # Prints: address changed
```

Assignments always notify, even when the new value equals the old one.
Observers run on the thread that performed the assignment, after the
observer list has been snapshotted, so observers may subscribe or unsubscribe
while a notification is in flight.
"""

import threading
from typing import Any, Generic, List, Optional, Type, TypeVar

from .protocol import PropertyObserver

T = TypeVar("T")

_MISSING = object()


class ObservableObject:
    """
    Base class for objects that notify observers when a named property changes.

    The observer list is created lazily, so subclasses (including dataclasses)
    do not need to call ``super().__init__()``.
    """

    # Guards lazy creation of per-instance observer state
    _state_lock = threading.Lock()

    def _observer_state(self):
        state = self.__dict__.get("_property_observers")
        if state is None:
            with ObservableObject._state_lock:
                state = self.__dict__.get("_property_observers")
                if state is None:
                    state = ([], threading.RLock())
                    self.__dict__["_property_observers"] = state
        return state

    def add_property_observer(self, observer: PropertyObserver) -> None:
        observers, lock = self._observer_state()
        with lock:
            observers.append(observer)

    def remove_property_observer(self, observer: PropertyObserver) -> None:
        observers, lock = self._observer_state()
        with lock:
            try:
                observers.remove(observer)
            except ValueError:
                pass

    def has_property_observer(self, observer: PropertyObserver) -> bool:
        observers, lock = self._observer_state()
        with lock:
            return observer in observers

    def property_observer_count(self) -> int:
        observers, lock = self._observer_state()
        with lock:
            return len(observers)

    def notify_property_changed(self, property_name: str) -> None:
        """Notify every registered observer that ``property_name`` changed."""
        observers, lock = self._observer_state()
        with lock:
            snapshot = tuple(observers)

        for observer in snapshot:
            observer(self, property_name)


class ObservableProperty(Generic[T]):
    """
    Descriptor for attributes that notify their owner's observers on assignment.

    The value lives in the instance ``__dict__`` under the attribute name.
    Reading the attribute on the class returns the descriptor itself.

    The owner must provide ``notify_property_changed``; ``ObservableObject``
    does.
    """

    def __init__(
        self, default: Optional[T] = None, declared_type: Optional[Type] = None
    ) -> None:
        self.attr_name: Optional[str] = None
        self.default = default
        self.declared_type = declared_type

    def __set_name__(self, owner: Type, name: str) -> None:
        self.attr_name = name

    def __get__(self, instance: Optional[object], owner: Type) -> Any:
        if instance is None:
            return self
        value = instance.__dict__.get(self.attr_name, _MISSING)
        if value is _MISSING:
            return self.default
        return value

    def __set__(self, instance: object, value: Optional[T]) -> None:
        instance.__dict__[self.attr_name] = value
        instance.notify_property_changed(self.attr_name)

    def __repr__(self) -> str:
        return f"ObservableProperty({self.attr_name!r}, default={self.default!r})"


def observable(default: Optional[T] = None, *, declared_type: Optional[Type] = None) -> Any:
    """
    Create an observable attribute for an ``ObservableObject`` subclass.

    Args:
        default: Value returned until the attribute is first assigned. It is
            shared by all instances, so prefer immutable defaults.
        declared_type: Type reachable through this attribute, used when the
            attribute carries no annotation.
    """
    return ObservableProperty(default, declared_type)
