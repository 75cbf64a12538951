"""Dependable: name-based dependency injection for plain Python classes.

A host class mixes in :class:`Injectable` and declares the search modules its
dependencies come from. Any instance of the host can then build objects whose
constructor parameter names are the dependencies they need, optionally
overriding some of them for a single call.

Key Features:
    - Search modules from mappings, namespaces, or profile-filtered provider
      registries, searched in declaration order (first match wins)
    - Per-call overrides that never touch the declared modules
    - Fail-fast construction: a missing dependency is reported with the
      target being built, before anything is constructed
    - Explicit capability queries (``resolvable``) that never build a value

Basic Usage:
    >>> from dependable import Injectable, ProviderModule
    >>>
    >>> providers = ProviderModule()
    >>>
    >>> @providers.provides(cached=True)
    ... def make_database() -> Database:
    ...     return Database()
    >>>
    >>> class App(Injectable):
    ...     pass
    >>> App.look_in_modules(providers, {"retries": 3})
    >>>
    >>> class UserService:
    ...     def __init__(self, database, retries):
    ...         ...
    >>>
    >>> service = App().inject(UserService)
    >>> fake = App().inject(UserService, database=FakeDatabase())

The package consists of several modules:
    - search_modules: The search module protocol and its adapters
    - chain: Type-level ordered lists of search modules
    - resolvers: Automatic and override resolvers
    - instantiator: Constructor introspection and construction
    - injectable: The host mixin
    - errors: Framework-specific exceptions
"""

from dependable.chain import ResolverChain
from dependable.errors import (
    ChainFrozenError,
    DependencyError,
    DependencyNotFound,
    InvalidSearchModule,
)
from dependable.injectable import Dependencies, Injectable, look_in_modules
from dependable.instantiator import Dependency, Instantiator, required_dependencies
from dependable.resolvers import AutoResolver, OverrideResolver, Resolver
from dependable.search_modules import (
    MISSING,
    LookupResult,
    MappingModule,
    NamespaceModule,
    Provider,
    ProviderModule,
    SearchModule,
    as_search_module,
    inferred_name,
)

__all__ = [
    "AutoResolver",
    "ChainFrozenError",
    "Dependencies",
    "Dependency",
    "DependencyError",
    "DependencyNotFound",
    "Injectable",
    "Instantiator",
    "InvalidSearchModule",
    "LookupResult",
    "MISSING",
    "MappingModule",
    "NamespaceModule",
    "OverrideResolver",
    "Provider",
    "ProviderModule",
    "Resolver",
    "ResolverChain",
    "SearchModule",
    "as_search_module",
    "inferred_name",
    "look_in_modules",
    "required_dependencies",
]
