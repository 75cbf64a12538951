"""Resolvers turning dependency names into values.

:class:`AutoResolver` searches a host's resolver chain and is the one place
where a missing name becomes an error. :class:`OverrideResolver` layers a
mapping of explicit values over an auto resolver for the duration of a single
``inject`` call.
"""

import logging
from collections.abc import Mapping
from types import MappingProxyType
from typing import Any, Optional, Protocol

from dependable.chain import ResolverChain
from dependable.errors import DependencyNotFound

__all__ = ["Resolver", "AutoResolver", "OverrideResolver"]

logger = logging.getLogger(__name__)


class Resolver(Protocol):
    """Protocol shared by the resolvers an :class:`Instantiator` can use."""

    def get(self, name: str) -> Any:
        """Return the value for ``name`` or raise :class:`DependencyNotFound`."""

    def resolvable(self, name: str) -> bool:
        """Return True if ``get(name)`` would succeed. Never raises."""


class AutoResolver:
    """Resolves names strictly through the resolver chain of a host."""

    def __init__(self, host: Any, chain: ResolverChain):
        self._host = host
        self._chain = chain

    @property
    def host(self) -> Any:
        return self._host

    @property
    def chain(self) -> ResolverChain:
        return self._chain

    def get(self, name: str) -> Any:
        """Return the value the first matching search module provides.

        Raises:
            DependencyNotFound: If no search module in the chain provides ``name``.
        """
        result = self._chain.lookup(name)
        if not result.found:
            raise DependencyNotFound(name, type(self._host))
        return result.value

    def resolvable(self, name: str) -> bool:
        return self._chain.contains(name)

    def __repr__(self):
        return f"AutoResolver(host={type(self._host).__qualname__}, chain={self._chain!r})"


class OverrideResolver:
    """Resolves names from explicit overrides first, then from an auto resolver.

    An override always wins, including an override whose value is ``None``.
    Overrides only add resolving power: every name the wrapped resolver can
    resolve stays resolvable.
    """

    def __init__(self, resolver: AutoResolver, overrides: Optional[Mapping[str, Any]] = None):
        self._resolver = resolver
        self._overrides = MappingProxyType(dict(overrides or {}))

    @property
    def overrides(self) -> Mapping[str, Any]:
        return self._overrides

    def get(self, name: str) -> Any:
        if name in self._overrides:
            logger.debug("Using override for '%s'", name)
            return self._overrides[name]
        return self._resolver.get(name)

    def resolvable(self, name: str) -> bool:
        return name in self._overrides or self._resolver.resolvable(name)

    def __repr__(self):
        return f"OverrideResolver(overrides={sorted(self._overrides)!r}, resolver={self._resolver!r})"
