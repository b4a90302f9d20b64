"""
nestwatch Nodes - Runtime Subscription Chain
============================================

A compiled ``Chain`` is brought to life as a linked list of nodes, one per path
segment. Each node is bound to at most one live object and watches exactly one
property name on it:

**LinkNode**: Watches a non-leaf property. When it changes, the node unbinds
its downstream node, reads the new value through its accessor and binds the
downstream node to that value.

**TerminalNode**: Watches the leaf property and invokes the dependency
callback whenever it changes, and also whenever the node is (re)bound, since
a rebind means some upstream link was replaced.

For the path ``"a.b.c"`` on ``root`` the chain is::

    LinkNode('a') bound to root
      -> LinkNode('b') bound to root.a
           -> TerminalNode('c') bound to root.a.b

Binding runs outside-in and unbinding runs inside-out, so a downstream node is
never left subscribed to an object its owner no longer points at.

When a link resolves to ``None`` the chain below it stays unbound and the link
reports the change itself, so every bind or rebind reports exactly once
whether or not the chain reaches its leaf.

Binding and rebinding only decide, under the node locks, which node owes the
report. The callback runs after every node lock has been released, so it may
take its own locks without ordering against the chain.

Nodes reference the objects they watch through ``weakref.ref`` only, and each
node serializes its bind/unbind/rebind steps behind its own reentrant lock.
"""

import logging
import threading
import weakref
from typing import Any, Callable, Iterator, Optional

from .accessors import Accessor
from .observable.protocol import is_observable

Notify = Callable[[], None]


class Node:
    """
    Base class for chain nodes: one watched property on one bound object.

    Subclasses define what happens when the node is bound, released or sees
    its watched property change.
    """

    def __init__(self, property_name: str, notify: Optional[Notify]) -> None:
        self.property_name = property_name
        self._notify = notify
        self._target: Optional[weakref.ref] = None
        self._lock = threading.RLock()
        self._disposed = False

    @property
    def target(self) -> Any:
        """The currently bound object, or None."""
        ref = self._target
        return ref() if ref is not None else None

    @property
    def is_bound(self) -> bool:
        return self.target is not None

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def bind(self, instance: Any) -> bool:
        """
        Bind this node to ``instance``, replacing any current binding.

        Returns True if the node ended up bound. ``None``, objects that cannot
        notify property changes and disposed nodes leave it unbound.
        A successful bind reports once, after the node lock is released.
        """
        reporter = self._attach(instance)
        if reporter is not None:
            reporter._invoke()
        return reporter is not None

    def _attach(self, instance: Any) -> Optional["Node"]:
        """Bind under the lock; return the node owing the report, or None if unbound."""
        with self._lock:
            if self._disposed:
                return None

            self._release()

            if instance is not None and not is_observable(instance):
                logging.warning(
                    f"{type(instance).__name__} cannot raise property change "
                    f"notifications; {self!r} stays unbound"
                )
                instance = None

            if instance is None:
                self._on_bound_to_nothing()
                return None

            try:
                self._target = weakref.ref(instance, self._on_target_collected)
            except TypeError:
                logging.warning(
                    f"{type(instance).__name__} does not support weak references; "
                    f"{self!r} stays unbound"
                )
                self._on_bound_to_nothing()
                return None

            instance.add_property_observer(self._on_property_changed)
            return self._on_bound(instance)

    def unbind(self) -> None:
        """Drop the current binding, if any. Safe to call repeatedly."""
        with self._lock:
            self._release()

    def dispose(self) -> None:
        """Unbind for good; later ``bind`` calls do nothing."""
        with self._lock:
            self._release()
            self._disposed = True
            self._notify = None

    def walk(self) -> Iterator["Node"]:
        """Yield this node and every node downstream of it."""
        yield self

    def _release(self) -> None:
        ref = self._target
        if ref is None:
            return
        self._before_release()
        instance = ref()
        if instance is not None:
            instance.remove_property_observer(self._on_property_changed)
        self._target = None

    def _on_target_collected(self, ref: weakref.ref) -> None:
        with self._lock:
            if self._target is ref:
                self._release()

    def _on_property_changed(self, sender: Any, property_name: str) -> None:
        if property_name != self.property_name:
            return
        self._handle_change(sender)

    def _invoke(self) -> None:
        notify = self._notify
        if notify is not None:
            notify()

    def _on_bound(self, instance: Any) -> Optional["Node"]:
        raise NotImplementedError

    def _on_bound_to_nothing(self) -> None:
        pass

    def _before_release(self) -> None:
        pass

    def _handle_change(self, sender: Any) -> None:
        raise NotImplementedError

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else ("bound" if self.is_bound else "unbound")
        return f"{type(self).__name__}({self.property_name!r}, {state})"


class TerminalNode(Node):
    """Innermost node; reports every bind and every change of its leaf."""

    def _on_bound(self, instance: Any) -> Node:
        return self

    def _handle_change(self, sender: Any) -> None:
        with self._lock:
            if self._disposed or self.target is not sender:
                return
        self._invoke()


class LinkNode(Node):
    """
    Non-leaf node owning exactly one downstream node.

    The downstream node object persists across rebinds; only its binding
    changes.
    """

    def __init__(
        self,
        property_name: str,
        accessor: Accessor,
        downstream: Node,
        notify: Optional[Notify],
    ) -> None:
        super().__init__(property_name, notify)
        self._accessor: Optional[Accessor] = accessor
        self.downstream = downstream

    def dispose(self) -> None:
        with self._lock:
            super().dispose()
            self._accessor = None

    def walk(self) -> Iterator[Node]:
        yield self
        yield from self.downstream.walk()

    def _attach_downstream(self, instance: Any) -> Node:
        value = self._accessor(instance)
        # Nothing below will report when the rest of the chain stays unbound
        return self.downstream._attach(value) or self

    def _on_bound(self, instance: Any) -> Node:
        return self._attach_downstream(instance)

    def _on_bound_to_nothing(self) -> None:
        self.downstream.unbind()

    def _before_release(self) -> None:
        self.downstream.unbind()

    def _handle_change(self, sender: Any) -> None:
        with self._lock:
            if self._disposed or self.target is not sender:
                return
            self.downstream.unbind()
            reporter = self._attach_downstream(sender)
        reporter._invoke()
