"""
nestwatch Members - Property Lookup on Classes
==============================================

Resolves a property name against a class and works out which type is reachable
through it. A member is anything readable per instance that the class declares:

- a ``property`` (type taken from the getter's return annotation)
- an ``ObservableProperty`` created with ``observable()``
- any other non-callable class attribute or descriptor
- a bare instance attribute annotation such as ``name: str``

Methods, static methods and class methods are not properties and never resolve.
Private names written with two leading underscores are looked up under their
mangled form on each class of the MRO, so ``"__secret"`` finds the attribute
``_Owner__secret``.

The declared type comes from the class annotations first (``typing.get_type_hints``),
then from a property getter's return annotation, then from the explicit
``declared_type`` of an ``ObservableProperty``. ``Optional[X]`` resolves to ``X``.
"""

import inspect
import types
import typing
from typing import Any, NamedTuple, Optional, Union

from .observable.notifier import ObservableProperty

_MISSING = object()


class Member(NamedTuple):
    """A resolved property of a class."""

    name: str
    attribute_name: str
    owner: type
    kind: str
    declared_type: Optional[type]
    type_hint: Any = None


def mangled_name(owner: type, name: str) -> str:
    """Return the attribute name Python stores ``name`` under inside ``owner``."""
    if name.startswith("__") and not name.endswith("__"):
        return f"_{owner.__name__.lstrip('_')}{name}"
    return name


def unwrap_optional(hint: Any) -> Optional[type]:
    """
    Reduce a type hint to the single class it names, or None if it names none.

    ``Optional[X]`` and ``X | None`` give ``X``; parameterized generics give
    their origin class; ``Any``, strings and unions of several classes give None.
    """
    if hint is None or hint is Any or isinstance(hint, str):
        return None

    origin = typing.get_origin(hint)
    if origin is Union or (
        hasattr(types, "UnionType") and origin is getattr(types, "UnionType")
    ):
        args = [arg for arg in typing.get_args(hint) if arg is not type(None)]
        if len(args) != 1:
            return None
        return unwrap_optional(args[0])

    if origin is typing.ClassVar:
        args = typing.get_args(hint)
        return unwrap_optional(args[0]) if args else None

    if isinstance(hint, type):
        return hint

    if isinstance(origin, type):
        return origin

    return None


def unresolved_reference(hint: Any) -> Optional[str]:
    """Return the first forward reference inside ``hint`` left as text, if any."""
    if isinstance(hint, str):
        return hint
    if isinstance(hint, typing.ForwardRef):
        return hint.__forward_arg__
    if typing.get_origin(hint) is typing.Literal:
        return None
    for arg in typing.get_args(hint):
        reference = unresolved_reference(arg)
        if reference is not None:
            return reference
    return None


def _class_hints(cls: type) -> dict:
    try:
        return typing.get_type_hints(cls)
    except (NameError, TypeError, AttributeError):
        # Forward references that do not resolve; fall back to raw annotations
        hints = {}
        for klass in reversed(cls.__mro__):
            hints.update(inspect.get_annotations(klass))
        return hints


def _getter_hint(prop: property) -> Any:
    if prop.fget is None:
        return None
    try:
        return typing.get_type_hints(prop.fget).get("return")
    except (NameError, TypeError, AttributeError):
        return inspect.get_annotations(prop.fget).get("return")


def _find(cls: type, name: str):
    for klass in cls.__mro__:
        if klass is object:
            continue
        attribute_name = mangled_name(klass, name)
        namespace = vars(klass)
        if attribute_name in namespace:
            return klass, attribute_name, namespace[attribute_name]
        if attribute_name in inspect.get_annotations(klass):
            return klass, attribute_name, _MISSING
    return None


def resolve_member(cls: type, name: str) -> Optional[Member]:
    """
    Find the instance-readable property ``name`` on ``cls``.

    Returns None when ``cls`` declares no such property.
    """
    if not isinstance(cls, type) or not name:
        return None

    found = _find(cls, name)
    if found is None:
        return None
    owner, attribute_name, value = found

    if isinstance(value, (staticmethod, classmethod)) or inspect.isroutine(value):
        return None

    hint = _class_hints(cls).get(attribute_name)

    if isinstance(value, property):
        kind = "property"
        if hint is None:
            hint = _getter_hint(value)
    elif isinstance(value, ObservableProperty):
        kind = "observable"
        if hint is None:
            hint = value.declared_type
    else:
        kind = "attribute"

    return Member(
        name=name,
        attribute_name=attribute_name,
        owner=owner,
        kind=kind,
        declared_type=unwrap_optional(hint),
        type_hint=hint,
    )
