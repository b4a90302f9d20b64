"""
nestwatch Analysis - Checking Declarations Without Binding
==========================================================

``check_declarations`` inspects the nested paths declared on a class and
reports problems as data instead of raising, so declarations can be verified
in a test suite or a pre-commit hook long before any object is created:

```python
for diagnostic in check_declarations(OrderView):
    print(diagnostic.message)
```

Two problems are reported:

- ``self-reference``: the first segment of a path names the dependent property itself.
- ``invalid-path``: a segment does not exist on the type declared at its depth.

Only property existence is checked; whether intermediate types can raise
change notifications is left to the runtime compiler, which fails eagerly when
a registration is created.
"""

from typing import List, NamedTuple, Optional

from .declarations import Dependency, discover_dependencies
from .errors import ConfigurationError
from .members import resolve_member

SELF_REFERENCE = "self-reference"
INVALID_PATH = "invalid-path"


class Diagnostic(NamedTuple):
    """One problem found in a nested dependency declaration."""

    code: str
    dependent_property: str
    path: str
    message: str
    type_name: Optional[str] = None


def _check_dependency(cls: type, dependency: Dependency) -> Optional[Diagnostic]:
    if dependency.path[0] == dependency.name:
        return Diagnostic(
            SELF_REFERENCE,
            dependency.name,
            dependency.dotted,
            f"The property {dependency.name} of {dependency.dotted} is a self-reference",
        )

    current: Optional[type] = cls
    for index, segment in enumerate(dependency.path):
        member = resolve_member(current, segment)
        if member is None:
            return Diagnostic(
                INVALID_PATH,
                dependency.name,
                dependency.dotted,
                f"The property {segment} of {dependency.dotted} could not be "
                f"found on {current.__name__}",
                current.__name__,
            )
        if index == len(dependency.path) - 1:
            break
        if member.declared_type is None:
            # Nothing is known past an undeclared type
            break
        current = member.declared_type

    return None


def check_declarations(cls: type) -> List[Diagnostic]:
    """
    Return every problem found in the nested dependencies declared on ``cls``.

    A declaration that cannot even be parsed (an empty path or segment) is
    reported as ``invalid-path``.
    """
    try:
        dependencies = discover_dependencies(cls)
    except ConfigurationError as error:
        return [
            Diagnostic(
                INVALID_PATH,
                error.dependent_property or "",
                error.dotted_path or "",
                str(error),
                cls.__name__,
            )
        ]

    diagnostics = []
    for dependency in dependencies:
        diagnostic = _check_dependency(cls, dependency)
        if diagnostic is not None:
            diagnostics.append(diagnostic)
    return diagnostics
