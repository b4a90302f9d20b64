"""
nestwatch Registration - Nested Dependency Tracking for One Object
==================================================================

``NestedPropertyRegistration`` ties everything together for a single root
object: it discovers the nested paths declared on the root's type, compiles
each one, builds a chain of nodes per path and binds it to the root. From then
on the callback is invoked with a dependent property's name whenever any link
of one of its paths changes, including intermediate objects being replaced.

Basic Usage
-----------

```python
from nestwatch import (
    NestedPropertyRegistration,
    ObservableObject,
    depends_on_nested,
    observable,
)

class Address(ObservableObject):
    city: str = observable("Paris")

class Customer(ObservableObject):
    address: Address = observable()

class Invoice(ObservableObject):
    customer: Customer = observable()

    @property
    @depends_on_nested("customer.address.city")
    def ships_to(self) -> str:
        return self.customer.address.city

invoice = Invoice()
registration = NestedPropertyRegistration.create(invoice, print)
# Prints "ships_to" once: binding reports immediately

invoice.customer = Customer()             # ships_to
invoice.customer.address = Address()      # ships_to
invoice.customer.address.city = "Lyon"    # ships_to

registration.dispose()
invoice.customer.address.city = "Nice"    # nothing
```

Lifecycle
---------

``create`` is all-or-nothing: every path is compiled before anything is bound,
and the first ``ConfigurationError`` aborts the call with no subscription left
behind. The registration never changes its set of chains afterwards; only the
nodes' bindings move. ``dispose`` detaches every subscription, is idempotent
and runs automatically when the registration is used as a context manager.

The registration holds the root object weakly, through its nodes. The callback
is held strongly until ``dispose``.
"""

import functools
import logging
import threading
import weakref
from typing import Any, Callable, Dict, List, Optional, Tuple

from .declarations import (
    Dependency,
    DependencyTable,
    discover_dependencies,
    normalize_dependencies,
)
from .errors import ConfigurationError
from .nodes import LinkNode, Node, TerminalNode
from .observable.protocol import is_observable
from .path import Chain, compile_path

DependencyCallback = Callable[[str], None]


def build_nodes(chain: Chain, notify: Callable[[], None]) -> Node:
    """Build the node chain for ``chain``, innermost first, and return its outermost node."""
    node: Node = TerminalNode(chain.leaf_name, notify)
    for link in reversed(chain.links):
        node = LinkNode(link.property_name, link.accessor, node, notify)
    return node


class NestedPropertyRegistration:
    """
    Live nested dependency subscriptions for one root object.

    Use ``create`` rather than the constructor.
    """

    def __init__(
        self,
        root: Any,
        on_changed: DependencyCallback,
        compiled: List[Tuple[str, Chain]],
    ) -> None:
        self._on_changed: Optional[DependencyCallback] = on_changed
        self._lock = threading.Lock()
        self._disposed = False
        self._root_type = type(root)

        chains: Dict[str, List[Chain]] = {}
        nodes: Dict[str, List[Node]] = {}
        for name, chain in compiled:
            notify = functools.partial(self._invoke, name)
            chains.setdefault(name, []).append(chain)
            nodes.setdefault(name, []).append(build_nodes(chain, notify))

        self._chains = {name: tuple(items) for name, items in chains.items()}
        self._nodes = {name: tuple(items) for name, items in nodes.items()}

    @classmethod
    def create(
        cls,
        root: Any,
        on_changed: DependencyCallback,
        dependencies: Optional[DependencyTable] = None,
    ) -> "NestedPropertyRegistration":
        """
        Register every nested dependency of ``root`` and bind it.

        Args:
            root: Object whose type declares the dependencies. Must be able to
                raise property change notifications.
            on_changed: Called with a dependent property's name whenever one of
                its paths may have changed, and once per path right away.
            dependencies: Explicit table used instead of the declarations
                found on ``type(root)``.

        Raises:
            ConfigurationError: If ``root`` cannot notify property changes or
                cannot be weakly referenced, a path starts with its own
                dependent property, or a path does not resolve on the root's
                type. Nothing stays registered.
        """
        root_type = type(root)
        if not is_observable(root):
            raise ConfigurationError(
                f"{root_type.__name__} cannot raise property change notifications",
                declaring_type=root_type,
            )

        try:
            weakref.ref(root)
        except TypeError:
            raise ConfigurationError(
                f"{root_type.__name__} does not support weak references and cannot "
                f"be tracked",
                declaring_type=root_type,
            ) from None

        if dependencies is None:
            declared = discover_dependencies(root_type)
        else:
            declared = normalize_dependencies(dependencies, root_type)

        compiled = [
            (dependency.name, _compile_dependency(root_type, dependency))
            for dependency in declared
        ]

        registration = cls(root, on_changed, compiled)
        try:
            registration._bind(root)
        except Exception:
            registration.dispose()
            raise

        logging.debug(
            f"Registered {len(compiled)} nested dependency path(s) on "
            f"{root_type.__name__}"
        )
        return registration

    @property
    def dependent_properties(self) -> Tuple[str, ...]:
        return tuple(self._nodes)

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    @property
    def root(self) -> Any:
        """The root object, or None once it has been collected or unbound."""
        for nodes in self._nodes.values():
            for node in nodes:
                target = node.target
                if target is not None:
                    return target
        return None

    def chains(self, name: str) -> Tuple[Chain, ...]:
        """Compiled chains registered for dependent property ``name``."""
        return self._chains.get(name, ())

    def nodes(self, name: str) -> Tuple[Node, ...]:
        """Outermost nodes registered for dependent property ``name``."""
        return self._nodes.get(name, ())

    def bound_node_count(self, name: Optional[str] = None) -> int:
        """Count nodes currently bound, for one dependent property or all of them."""
        names = [name] if name is not None else list(self._nodes)
        return sum(
            1
            for key in names
            for outermost in self._nodes.get(key, ())
            for node in outermost.walk()
            if node.is_bound
        )

    def dispose(self) -> None:
        """Detach every subscription and release the callback. Idempotent."""
        with self._lock:
            if self._disposed:
                return
            self._disposed = True

        for nodes in self._nodes.values():
            for outermost in nodes:
                # Outermost first: its unbind already walks the chain inside-out
                for node in outermost.walk():
                    node.dispose()

        self._on_changed = None
        logging.debug(f"Disposed nested dependency registration on {self._root_type.__name__}")

    def _bind(self, root: Any) -> None:
        for nodes in self._nodes.values():
            for outermost in nodes:
                outermost.bind(root)

    def _invoke(self, name: str) -> None:
        callback = self._on_changed
        if callback is not None:
            callback(name)

    def __enter__(self) -> "NestedPropertyRegistration":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else f"{self.bound_node_count()} bound nodes"
        return (
            f"NestedPropertyRegistration({self._root_type.__name__}, "
            f"{list(self._nodes)}, {state})"
        )


def _compile_dependency(root_type: type, dependency: Dependency) -> Chain:
    if dependency.path[0] == dependency.name:
        raise ConfigurationError(
            f"Property {dependency.name!r} of {root_type.__name__} depends on "
            f"itself through {dependency.dotted!r}",
            declaring_type=root_type,
            property_name=dependency.name,
            path=dependency.path,
            dependent_property=dependency.name,
        )

    try:
        return compile_path(root_type, dependency.path)
    except ConfigurationError as error:
        raise ConfigurationError(
            f"Invalid nested dependency {dependency.dotted!r} for property "
            f"{root_type.__name__}.{dependency.name}: {error}",
            declaring_type=error.declaring_type,
            property_name=error.property_name,
            path=dependency.path,
            dependent_property=dependency.name,
        ) from error


def track_nested(
    obj: Any, dependencies: Optional[DependencyTable] = None
) -> NestedPropertyRegistration:
    """
    Register ``obj``'s nested dependencies, reporting through its own
    ``notify_property_changed``.

    The returned registration must be kept and disposed by the caller.
    """
    return NestedPropertyRegistration.create(
        obj, obj.notify_property_changed, dependencies
    )
