"""
nestwatch Observable Module
===========================

This module contains the property change notification protocol and a base
class plus descriptor implementing it.
"""

from .notifier import ObservableObject, ObservableProperty, observable
from .protocol import (
    PropertyChangeNotifier,
    PropertyObserver,
    is_observable,
    is_observable_type,
)

__all__ = [
    "ObservableObject",
    "ObservableProperty",
    "PropertyChangeNotifier",
    "PropertyObserver",
    "is_observable",
    "is_observable_type",
    "observable",
]
