"""
nestwatch Path Compiler - From Dotted Paths to Link Chains
==========================================================

A dependency path such as ``"order.customer.address.city"`` names a property
on the root object, then a property on the value found there, and so on. This
module turns such a path into a ``Chain``: an immutable, instance-independent
description of every link, built once when a registration is created.

Compilation walks the path from the root type:

1. Every segment but the last must be read from a type that can raise property
   change notifications, must resolve to a property on that type, and must
   declare the type found behind it (``Optional`` is fine).
2. The last segment only has to resolve on the final type; the leaf value may
   be of any type.

Any violation raises ``ConfigurationError`` immediately, naming the type, the
segment and the full path.

```python
chain = compile_path(Order, "customer.address.city")
chain.depth                                  # 3
[link.property_name for link in chain.links]  # ['customer', 'address']
chain.leaf_name                              # 'city'
```
"""

import logging
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple, Union

from .accessors import Accessor, AccessorFactory
from .errors import ConfigurationError
from .members import resolve_member, unresolved_reference
from .observable.protocol import is_observable_type

PATH_SEPARATOR = "."

PathLike = Union[str, Sequence[str]]


@dataclass(frozen=True)
class PathLink:
    """One non-leaf segment of a compiled path."""

    property_name: str
    accessor: Accessor
    declared_type: type


@dataclass(frozen=True)
class Chain:
    """
    Compiled form of a dependency path, outermost link first.

    Attributes:
        root_type: Type the path was compiled against.
        path: The path segments as written.
        links: One ``PathLink`` per segment except the last.
        leaf_name: Property watched by the innermost node.
        leaf_type: Declared type of the leaf, if any. Never required.
    """

    root_type: type
    path: Tuple[str, ...]
    links: Tuple[PathLink, ...]
    leaf_name: str
    leaf_type: Optional[type] = None

    @property
    def depth(self) -> int:
        return len(self.links) + 1

    @property
    def dotted(self) -> str:
        return PATH_SEPARATOR.join(self.path)

    def __repr__(self) -> str:
        return f"Chain({self.root_type.__name__}, {self.dotted!r})"


def parse_path(path: PathLike) -> Tuple[str, ...]:
    """
    Split a dotted path into its segments.

    Raises:
        ConfigurationError: If the path or any of its segments is empty.
    """
    if isinstance(path, str):
        segments = tuple(segment.strip() for segment in path.split(PATH_SEPARATOR))
    else:
        segments = tuple(str(segment).strip() for segment in path)

    if not segments or not any(segments):
        raise ConfigurationError("Dependency path is empty", path=segments or None)

    if not all(segments):
        dotted = PATH_SEPARATOR.join(segments)
        raise ConfigurationError(
            f"Dependency path {dotted!r} contains an empty segment", path=segments
        )

    return segments


def _type_name(tp: object) -> str:
    return getattr(tp, "__name__", repr(tp))


def compile_path(root_type: type, path: PathLike) -> Chain:
    """
    Resolve ``path`` against ``root_type`` and build its link chain.

    Raises:
        ConfigurationError: If a segment does not resolve, an intermediate type
            cannot notify property changes, or an intermediate property does
            not declare its type.
    """
    segments = parse_path(path)
    dotted = PATH_SEPARATOR.join(segments)
    current = root_type
    links = []

    for index, segment in enumerate(segments[:-1]):
        if not is_observable_type(current):
            reached = PATH_SEPARATOR.join(segments[:index]) or "the root"
            raise ConfigurationError(
                f"Type {_type_name(current)} of {reached!r} in path {dotted!r} "
                f"cannot raise property change notifications",
                declaring_type=current,
                property_name=segment,
                path=segments,
            )

        member = resolve_member(current, segment)
        if member is None:
            raise ConfigurationError(
                f"Path item {segment!r} of {dotted!r} could not be found on "
                f"{_type_name(current)}",
                declaring_type=current,
                property_name=segment,
                path=segments,
            )

        if member.declared_type is None:
            reference = unresolved_reference(member.type_hint)
            if reference is not None:
                detail = (
                    f"its annotation refers to {reference!r}, which could not be "
                    f"resolved to a type"
                )
            else:
                detail = f"found {member.type_hint!r}"
            raise ConfigurationError(
                f"Property {_type_name(current)}.{segment} in path {dotted!r} does "
                f"not declare a single type to continue the path with ({detail})",
                declaring_type=current,
                property_name=segment,
                path=segments,
            )

        accessor = AccessorFactory.get_accessor(current, segment)
        links.append(PathLink(member.attribute_name, accessor, member.declared_type))
        current = member.declared_type

    leaf = resolve_member(current, segments[-1])
    if leaf is None:
        raise ConfigurationError(
            f"Path item {segments[-1]!r} of {dotted!r} could not be found on "
            f"{_type_name(current)}",
            declaring_type=current,
            property_name=segments[-1],
            path=segments,
        )

    logging.debug(f"Compiled path {dotted!r} on {_type_name(root_type)}")

    return Chain(
        root_type=root_type,
        path=segments,
        links=tuple(links),
        leaf_name=leaf.attribute_name,
        leaf_type=leaf.declared_type,
    )
