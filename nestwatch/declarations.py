"""
nestwatch Declarations - Which Properties Depend on Which Paths
===============================================================

Dependent properties declare the nested paths they are computed from, either
with the ``depends_on_nested`` decorator:

```python
class OrderView(ObservableObject):
    order: Order = observable()

    @property
    @depends_on_nested("order.customer.address.city")
    @depends_on_nested("order.shipping.city")
    def destination(self) -> str:
        ...
```

or with a class-level table, which is handy for properties you do not define
yourself:

```python
class OrderView(ObservableObject):
    __depends_on_nested__ = {
        "destination": ("order.customer.address.city", "order.shipping.city"),
        "total": "order.total",
    }
```

``discover_dependencies`` collects both forms across the class MRO. The most
derived definition of a property wins; table entries of every class are merged.
"""

from typing import Any, Iterable, List, Mapping, NamedTuple, Optional, Tuple, Union

from .path import PATH_SEPARATOR, PathLike, parse_path

DECLARATION_TABLE = "__depends_on_nested__"

NESTED_PATHS_ATTRIBUTE = "__nested_paths__"

DependencyTable = Union[
    Mapping[str, Union[PathLike, Iterable[PathLike]]],
    Iterable[Tuple[str, PathLike]],
]


class Dependency(NamedTuple):
    """A dependent property name and one path it depends on."""

    name: str
    path: Tuple[str, ...]
    declared_on: Optional[type] = None

    @property
    def dotted(self) -> str:
        return PATH_SEPARATOR.join(self.path)


def depends_on_nested(path: str):
    """
    Mark a property as depending on the nested ``path``.

    May be stacked to declare several paths for one property, and applied
    either above ``@property`` or directly to the getter below it.
    """

    def decorator(target):
        func = target.fget if isinstance(target, property) else target
        if func is None or not callable(func):
            raise TypeError(
                "depends_on_nested must decorate a property or its getter function"
            )
        paths = func.__dict__.setdefault(NESTED_PATHS_ATTRIBUTE, [])
        # Decorators apply bottom-up; keep the order they are written in
        paths.insert(0, path)
        return target

    return decorator


def declared_paths(member: Any) -> List[str]:
    """Return the paths recorded on a property or getter by ``depends_on_nested``."""
    func = member.fget if isinstance(member, property) else member
    if func is None:
        return []
    paths = getattr(func, NESTED_PATHS_ATTRIBUTE, None)
    return list(paths) if isinstance(paths, list) else []


def _table_paths(paths: Any) -> List[PathLike]:
    if isinstance(paths, str):
        return [paths]
    return list(paths)


def normalize_dependencies(
    table: DependencyTable, declared_on: Optional[type] = None
) -> Tuple[Dependency, ...]:
    """
    Turn a dependency table into ``Dependency`` entries.

    ``table`` is either a mapping from dependent property name to a path or a
    collection of paths, or an iterable of ``(name, path)`` pairs.
    """
    if isinstance(table, Mapping):
        pairs = [
            (name, path) for name, paths in table.items() for path in _table_paths(paths)
        ]
    else:
        pairs = list(table)

    return tuple(
        Dependency(str(name), parse_path(path), declared_on) for name, path in pairs
    )


def discover_dependencies(cls: type) -> Tuple[Dependency, ...]:
    """
    Collect every ``(dependent property, path)`` pair declared on ``cls``.

    Raises:
        ConfigurationError: If a declared path is syntactically empty.
    """
    found: List[Dependency] = []
    seen = set()

    for klass in cls.__mro__:
        for name, value in vars(klass).items():
            if name in seen:
                continue
            seen.add(name)
            for path in declared_paths(value):
                found.append(Dependency(name, parse_path(path), klass))

    for klass in reversed(cls.__mro__):
        table = vars(klass).get(DECLARATION_TABLE)
        if not table:
            continue
        for dependency in normalize_dependencies(table, klass):
            if any(
                d.name == dependency.name and d.path == dependency.path for d in found
            ):
                continue
            found.append(dependency)

    return tuple(found)
