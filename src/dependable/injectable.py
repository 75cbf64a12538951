"""Mixin that turns a class into a dependency-resolution context.

A host class declares where its dependencies come from with
:meth:`Injectable.look_in_modules`. Its instances can then resolve
dependency names and build other objects with :meth:`Injectable.inject`.

Example:
    >>> class App(Injectable):
    ...     pass
    >>> App.look_in_modules({"logger": logging.getLogger("app")}, settings)
    >>>
    >>> class Service:
    ...     def __init__(self, logger, db_url):
    ...         ...
    >>>
    >>> app = App()
    >>> service = app.inject(Service)
    >>> test_service = app.inject(Service, db_url="sqlite://")
"""

import threading
from collections.abc import Mapping
from typing import Any, Callable, Optional, TypeVar

from dependable.chain import ResolverChain
from dependable.errors import DependencyError
from dependable.instantiator import Instantiator
from dependable.resolvers import AutoResolver, OverrideResolver

__all__ = ["Injectable", "Dependencies", "look_in_modules"]

T = TypeVar("T")
C = TypeVar("C", bound=type)

_CHAIN_ATTRIBUTE = "_dependable_chain"
_RESOLVER_ATTRIBUTE = "_dependable_resolver"

_chain_lock = threading.Lock()
_resolver_lock = threading.Lock()


class Dependencies:
    """Attribute-style view of the dependencies a host can resolve.

    ``view.logger`` and ``view["logger"]`` resolve ``logger``;
    ``"logger" in view`` reports whether it is resolvable without building it.
    """

    __slots__ = ("_resolver",)

    def __init__(self, resolver: AutoResolver):
        self._resolver = resolver

    def __getattr__(self, name: str) -> Any:
        if name.startswith("__"):
            raise AttributeError(name)
        return self._resolver.get(name)

    def __getitem__(self, name: str) -> Any:
        return self._resolver.get(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self._resolver.resolvable(name)

    def __repr__(self):
        return f"Dependencies({type(self._resolver.host).__qualname__})"


class Injectable:
    """Mixin giving a class a resolver chain and its instances an ``inject`` method.

    Search modules are declared per class and shared by every instance. Modules
    declared on a subclass are searched before those of its base classes. A
    class's chain is frozen the first time one of its instances resolves a
    dependency; declaring modules after that raises :class:`ChainFrozenError`.
    """

    @classmethod
    def look_in_modules(cls, *modules: Any) -> None:
        """Append search modules to this class's resolver chain.

        Args:
            *modules: Search modules, mappings, or namespaces (Python modules,
                classes, objects) whose public attributes are dependencies.
        """
        cls.search_chain().add(*modules)

    @classmethod
    def search_chain(cls) -> ResolverChain:
        """Return the resolver chain owned by this class, creating it if needed."""
        chain = cls.__dict__.get(_CHAIN_ATTRIBUTE)
        if chain is not None:
            return chain

        parent = _parent_chain(cls)
        with _chain_lock:
            chain = cls.__dict__.get(_CHAIN_ATTRIBUTE)
            if chain is None:
                chain = ResolverChain(parent, owner=cls)
                setattr(cls, _CHAIN_ATTRIBUTE, chain)
        return chain

    def get(self, name: str) -> Any:
        """Resolve ``name`` through this class's search modules.

        Raises:
            DependencyNotFound: If no search module provides ``name``.
        """
        return self._auto_resolver().get(name)

    def resolvable(self, name: str) -> bool:
        """Return True if ``name`` can be resolved. Never raises."""
        return self._auto_resolver().resolvable(name)

    @property
    def dependencies(self) -> Dependencies:
        return Dependencies(self._auto_resolver())

    def inject(
        self,
        target: Callable[..., T],
        overrides: Optional[Mapping[str, Any]] = None,
        /,
        **more_overrides: Any,
    ) -> T:
        """Build ``target`` with dependencies resolved from this instance.

        Args:
            target: The class (or callable) to build. Its parameter names are
                the dependencies it requires.
            overrides: Explicit values that take precedence over the search
                modules for this call only.
            **more_overrides: Further overrides given as keyword arguments.

        Raises:
            DependencyNotFound: If a required dependency is neither overridden
                nor provided by a search module.
        """
        merged = dict(overrides or {})
        merged.update(more_overrides)
        resolver = OverrideResolver(self._auto_resolver(), merged)
        return Instantiator(resolver).instantiate(target)

    def _auto_resolver(self) -> AutoResolver:
        resolver = self.__dict__.get(_RESOLVER_ATTRIBUTE)
        if resolver is not None:
            return resolver

        chain = type(self).search_chain()
        with _resolver_lock:
            resolver = self.__dict__.get(_RESOLVER_ATTRIBUTE)
            if resolver is None:
                chain.freeze()
                resolver = AutoResolver(self, chain)
                self.__dict__[_RESOLVER_ATTRIBUTE] = resolver
        return resolver


def look_in_modules(*modules: Any) -> Callable[[C], C]:
    """Class decorator declaring the search modules of an :class:`Injectable` class.

    Example:
        @look_in_modules(config, providers)
        class App(Injectable):
            pass
    """

    def decorator(cls: C) -> C:
        if not (isinstance(cls, type) and issubclass(cls, Injectable)):
            raise DependencyError(f"{cls!r} is not an Injectable class")
        cls.look_in_modules(*modules)
        return cls

    return decorator


def _parent_chain(cls: type) -> Optional[ResolverChain]:
    for base in cls.__mro__[1:]:
        if base is not Injectable and issubclass(base, Injectable):
            return base.search_chain()
    return None
