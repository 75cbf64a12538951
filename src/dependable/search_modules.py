"""Lookup sources that a host type searches for dependency values.

A search module answers one question: "do you provide a value under this
name, and if so, what is it?" Anything with a ``try_get(name)`` method
returning a :class:`LookupResult` can be registered on a host. This module
also provides adapters for the common sources: plain mappings, namespaces
(Python modules, classes or objects holding constants) and registries of
provider functions.

Example:
    >>> providers = ProviderModule(profiles={"test"})
    >>>
    >>> @providers.provides(profiles=["test"])
    ... def make_clock() -> Clock:
    ...     return FrozenClock()
    >>>
    >>> providers.try_get("clock")
    LookupResult(value=<FrozenClock ...>, found=True)
"""

import inspect
import threading
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable, NamedTuple, Optional, Protocol, runtime_checkable

from dependable.errors import DependencyError, InvalidSearchModule

__all__ = [
    "LookupResult",
    "MISSING",
    "SearchModule",
    "MappingModule",
    "NamespaceModule",
    "Provider",
    "ProviderModule",
    "as_search_module",
    "inferred_name",
]


class LookupResult(NamedTuple):
    """Outcome of asking a search module for a name.

    ``found`` distinguishes a provided ``None`` from a miss.
    """

    value: Any
    found: bool


MISSING = LookupResult(None, False)


@runtime_checkable
class SearchModule(Protocol):
    """Protocol for a named-lookup source."""

    def try_get(self, name: str) -> LookupResult:
        """Return the value provided under ``name``, or :data:`MISSING`.

        Modules may also support ``name in module`` to answer presence
        without building a value.
        """


class MappingModule:
    """Provides the entries of a mapping as dependencies."""

    def __init__(self, mapping: Mapping[str, Any]):
        self._mapping = mapping

    def try_get(self, name: str) -> LookupResult:
        if name in self._mapping:
            return LookupResult(self._mapping[name], True)
        return MISSING

    def __contains__(self, name: object) -> bool:
        return name in self._mapping

    def __repr__(self):
        return f"MappingModule({sorted(self._mapping)!r})"


class NamespaceModule:
    """Provides the public attributes of a module, class or object.

    Attributes whose names start with an underscore are never provided.
    """

    def __init__(self, namespace: Any):
        self._namespace = namespace

    def try_get(self, name: str) -> LookupResult:
        if name.startswith("_"):
            return MISSING
        try:
            return LookupResult(getattr(self._namespace, name), True)
        except AttributeError:
            return MISSING

    def __repr__(self):
        return f"NamespaceModule({self._namespace!r})"


@dataclass(frozen=True)
class Provider:
    """A provider callable registered in a :class:`ProviderModule`.

    Attributes:
        name: Dependency name the provider answers to.
        func: Zero-argument callable producing the value.
        profiles: Profiles under which the provider is active. Empty means
            active in every profile; ``"!name"`` excludes a profile.
        cached: Whether the first result is kept and returned on later lookups.
    """

    name: str
    func: Callable[[], Any]
    profiles: list[str] = field(default_factory=list)
    cached: bool = False


class ProviderModule:
    """Registry of provider callables, filtered by a set of active profiles.

    Providers are registered with the :meth:`provides` decorator. Only providers
    whose profiles match the module's active profiles answer lookups, and at
    most one active provider may be registered under any name.
    """

    def __init__(self, profiles: Optional[set[str]] = None):
        self._profiles = set(profiles) if profiles is not None else set()
        self._providers: dict[str, Provider] = {}
        self._results: dict[str, Any] = {}
        self._lock = threading.RLock()

    @property
    def profiles(self) -> frozenset[str]:
        return frozenset(self._profiles)

    def register(self, provider: Provider):
        """Register a provider explicitly.

        Providers inactive under this module's profiles are ignored.

        Raises:
            DependencyError: If an active provider is already registered
                under the same name, or if the provider has required parameters.
        """
        _check_takes_no_arguments(provider)
        if not _profiles_match(provider.profiles, self._profiles):
            return
        if provider.name in self._providers:
            raise DependencyError(
                f"Duplicate provider name '{provider.name}' "
                f"in profiles {sorted(self._profiles)}"
            )
        self._providers[provider.name] = provider

    def provides(
        self,
        name: Optional[str] = None,
        profiles: Optional[list[str]] = None,
        cached: bool = False,
    ) -> Callable:
        """Decorator to register a function or class as a provider.

        Args:
            name: Optional dependency name; defaults to the function name with
                any ``make_`` prefix removed, or the class name.
            profiles: Optional list of profiles for which the provider is active.
            cached: Build the value once and return it on every later lookup.

        Example:
            @module.provides(profiles=["!test"], cached=True)
            def make_database() -> Database:
                return Database(DSN)
        """

        def decorator(obj):
            if not callable(obj):
                raise DependencyError(f"{obj!r} is not a class or function")
            self.register(
                Provider(name or inferred_name(obj), obj, list(profiles or []), cached)
            )
            return obj

        return decorator

    def registered_names(self) -> list[str]:
        return list(self._providers)

    def __contains__(self, name: object) -> bool:
        return name in self._providers

    def try_get(self, name: str) -> LookupResult:
        provider = self._providers.get(name)
        if provider is None:
            return MISSING
        if not provider.cached:
            return LookupResult(provider.func(), True)

        if name not in self._results:
            with self._lock:
                if name not in self._results:
                    self._results[name] = provider.func()
        return LookupResult(self._results[name], True)

    def __repr__(self):
        return f"ProviderModule(profiles={sorted(self._profiles)!r})"


def as_search_module(obj: Any) -> SearchModule:
    """Adapt a declaration argument to the :class:`SearchModule` protocol.

    Objects with a callable ``try_get`` are used as they are, mappings become
    :class:`MappingModule` and anything else (Python modules, classes, plain
    objects) becomes a :class:`NamespaceModule`.

    Raises:
        InvalidSearchModule: For ``None`` and for strings.
    """
    if obj is None or isinstance(obj, (str, bytes)):
        raise InvalidSearchModule(f"{obj!r} cannot be used as a search module")
    if not inspect.isclass(obj) and callable(getattr(obj, "try_get", None)):
        return obj
    if isinstance(obj, Mapping):
        return MappingModule(obj)
    return NamespaceModule(obj)


def inferred_name(target: Any) -> str:
    """Derive a dependency name from a class or function name.

    Example:
        >>> inferred_name(Database)       # Returns "Database"
        >>> inferred_name(make_database)  # Returns "database"
    """
    if inspect.isclass(target):
        return target.__name__

    if target.__name__.startswith("make_"):
        return target.__name__[5:]
    return target.__name__


def _profiles_match(stated: list[str], selected: set[str]) -> bool:
    provided = [p for p in stated if not p.startswith("!")]
    excluded = [p[1:] for p in stated if p.startswith("!")]

    return not any(e in selected for e in excluded) and (
        not provided or any(p in selected for p in provided)
    )


def _check_takes_no_arguments(provider: Provider):
    try:
        sig = inspect.signature(provider.func)
    except (ValueError, TypeError):
        return

    required = [
        param.name
        for param in sig.parameters.values()
        if param.default is inspect.Parameter.empty
        and param.kind not in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
    ]
    if required:
        raise DependencyError(
            f"Provider <{provider.name}> has required parameters {required}; "
            "providers are called without arguments"
        )
