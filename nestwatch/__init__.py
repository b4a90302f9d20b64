"""
nestwatch - Nested Property Dependency Tracking
===============================================

Lets an object expose computed properties derived from chains of nested
observable properties (``root.a.b.c``) and be notified whenever any link of
such a chain changes, including intermediate objects being replaced, without
re-subscribing at every level by hand.
"""

# Observable capability and a ready-made implementation of it
from .observable import (
    ObservableObject,
    ObservableProperty,
    PropertyChangeNotifier,
    PropertyObserver,
    is_observable,
    is_observable_type,
    observable,
)

# Declaring dependencies
from .declarations import (
    DECLARATION_TABLE,
    Dependency,
    depends_on_nested,
    discover_dependencies,
    normalize_dependencies,
)

# Compiling paths
from .accessors import AccessorFactory, make_accessor
from .path import PATH_SEPARATOR, Chain, PathLink, compile_path, parse_path

# Runtime chain and registration
from .nodes import LinkNode, Node, TerminalNode
from .registration import NestedPropertyRegistration, track_nested

# Design-time checks
from .analysis import Diagnostic, check_declarations

from .errors import ConfigurationError

__all__ = [
    # Observable capability
    "ObservableObject",
    "ObservableProperty",
    "PropertyChangeNotifier",
    "PropertyObserver",
    "is_observable",
    "is_observable_type",
    "observable",
    # Declarations
    "DECLARATION_TABLE",
    "Dependency",
    "depends_on_nested",
    "discover_dependencies",
    "normalize_dependencies",
    # Path compilation
    "AccessorFactory",
    "make_accessor",
    "PATH_SEPARATOR",
    "Chain",
    "PathLink",
    "compile_path",
    "parse_path",
    # Runtime
    "Node",
    "LinkNode",
    "TerminalNode",
    "NestedPropertyRegistration",
    "track_nested",
    # Analysis
    "Diagnostic",
    "check_declarations",
    # Exceptions
    "ConfigurationError",
]
