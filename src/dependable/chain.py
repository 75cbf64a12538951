"""Ordered, type-level lists of search modules.

A :class:`ResolverChain` belongs to one host type. Modules are appended while
the type is being declared; the first lookup freezes the chain, after which it
can be read concurrently without locking. Chains may be layered: a chain
created for a subclass falls back to the chain of its base class, so modules
declared on a subclass shadow those declared on its bases.
"""

import logging
import threading
from typing import Any, Iterator, Optional

from dependable.errors import ChainFrozenError
from dependable.search_modules import MISSING, LookupResult, SearchModule, as_search_module

__all__ = ["ResolverChain"]

logger = logging.getLogger(__name__)


class ResolverChain:
    """Ordered list of search modules with first-match-wins lookup.

    Attributes:
        parent: Optional chain consulted after every module of this chain.

    Example:
        >>> chain = ResolverChain()
        >>> chain.add({"greeting": "hello"}, {"greeting": "hi", "name": "world"})
        >>> chain.lookup("greeting")
        LookupResult(value='hello', found=True)
    """

    def __init__(self, parent: Optional["ResolverChain"] = None, owner: Any = None):
        self.parent = parent
        self._owner = owner
        self._modules: tuple[SearchModule, ...] = ()
        self._frozen = False
        self._lock = threading.Lock()

    def add(self, *modules: Any) -> None:
        """Append search modules, preserving call order.

        Arguments are adapted with :func:`as_search_module`, so mappings and
        namespaces may be passed directly.

        Raises:
            ChainFrozenError: If the chain has already been read.
            InvalidSearchModule: If an argument cannot be adapted.
        """
        adapted = tuple(as_search_module(module) for module in modules)
        with self._lock:
            if self._frozen:
                raise ChainFrozenError(
                    f"Cannot add search modules to the chain of {self._owner_name()} "
                    "after it has been used for resolution"
                )
            self._modules = self._modules + adapted
        logger.debug("Added %s to the chain of %s", adapted, self._owner_name())

    def lookup(self, name: str) -> LookupResult:
        """Return the first value provided under ``name``, or :data:`MISSING`.

        Modules are tried in insertion order, then the parent chain.
        """
        if not self._frozen:
            self.freeze()

        for module in self._modules:
            result = module.try_get(name)
            if result.found:
                return result

        if self.parent is not None:
            return self.parent.lookup(name)
        return MISSING

    def contains(self, name: str) -> bool:
        """Return True if some module of this chain or its parents provides ``name``.

        Modules that support ``in`` are asked with it, so no value is built;
        other modules are asked with ``try_get``.
        """
        if not self._frozen:
            self.freeze()

        for module in self._modules:
            if _module_contains(module, name):
                return True

        return self.parent is not None and self.parent.contains(name)

    def freeze(self) -> None:
        """Forbid further additions to this chain and its parents. Freezing is permanent."""
        with self._lock:
            if self._frozen:
                return
            self._frozen = True
        if self.parent is not None:
            self.parent.freeze()
        logger.debug(
            "Froze the chain of %s with %d search modules",
            self._owner_name(),
            len(self._modules),
        )

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def modules(self) -> tuple[SearchModule, ...]:
        """The modules of this chain, excluding those of the parent."""
        return self._modules

    def __iter__(self) -> Iterator[SearchModule]:
        return iter(self._modules)

    def __len__(self) -> int:
        return len(self._modules)

    def __repr__(self):
        return f"ResolverChain(owner={self._owner_name()}, modules={list(self._modules)!r})"

    def _owner_name(self) -> str:
        if self._owner is None:
            return "<anonymous>"
        return getattr(self._owner, "__qualname__", repr(self._owner))


def _module_contains(module: SearchModule, name: str) -> bool:
    if hasattr(type(module), "__contains__"):
        return name in module
    return module.try_get(name).found
