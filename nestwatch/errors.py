"""
nestwatch Errors
================

Exceptions raised while declaring and compiling nested dependency paths.
"""

from typing import Optional, Sequence


class ConfigurationError(Exception):
    """
    Raised when a nested dependency path cannot be compiled.

    This covers a path segment that does not resolve on the type reachable at
    its depth, an intermediate type that cannot raise property change
    notifications, and a dependent property whose path starts with itself.
    The error is always raised while a registration is being created, never
    while change notifications are being handled.

    Attributes:
        declaring_type: The type on which resolution failed, if known.
        property_name: The offending path segment, if known.
        path: The full path being compiled, if known.
        dependent_property: The dependent property that declared the path, if known.
    """

    def __init__(
        self,
        message: str,
        *,
        declaring_type: Optional[type] = None,
        property_name: Optional[str] = None,
        path: Optional[Sequence[str]] = None,
        dependent_property: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.declaring_type = declaring_type
        self.property_name = property_name
        self.path = tuple(path) if path is not None else None
        self.dependent_property = dependent_property

    @property
    def dotted_path(self) -> Optional[str]:
        """The failing path joined back into its dotted form."""
        if self.path is None:
            return None
        return ".".join(self.path)
