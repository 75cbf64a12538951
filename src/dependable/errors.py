"""Exceptions raised while declaring search modules and resolving dependencies."""

from typing import Optional

__all__ = [
    "DependencyError",
    "DependencyNotFound",
    "ChainFrozenError",
    "InvalidSearchModule",
]


class DependencyError(Exception):
    """Base class for every error raised by dependable."""

    pass


class DependencyNotFound(DependencyError):
    """Raised when no search module can supply a required dependency.

    Attributes:
        name: The dependency name that could not be resolved.
        requesting_type: The host type whose resolver chain was searched.
        target_type: The type being instantiated when the miss happened, or
            None when the name was requested directly with ``get``.
    """

    def __init__(
        self,
        name: str,
        requesting_type: Optional[type],
        target_type: Optional[type] = None,
    ):
        self.name = name
        self.requesting_type = requesting_type
        self.target_type = target_type
        super().__init__(self._describe())

    def for_target(self, target_type: type) -> "DependencyNotFound":
        """Return a copy of this error tagged with the type being built."""
        return DependencyNotFound(self.name, self.requesting_type, target_type)

    def _describe(self) -> str:
        host = _type_name(self.requesting_type)
        if self.target_type is None:
            return f"Dependency '{self.name}' not found in search modules of {host}"
        return (
            f"Dependency '{self.name}' of {_type_name(self.target_type)} "
            f"not found in search modules of {host}"
        )

    def __reduce__(self):
        return type(self), (self.name, self.requesting_type, self.target_type)


class ChainFrozenError(DependencyError):
    """Raised when search modules are added to a chain that has already been read."""

    pass


class InvalidSearchModule(DependencyError):
    """Raised when an object cannot be used as a search module."""

    pass


def _type_name(t: Optional[type]) -> str:
    if t is None:
        return "<unknown>"
    return getattr(t, "__qualname__", None) or repr(t)
