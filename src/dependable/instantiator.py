"""Construction of target types from resolved dependencies.

The names a target requires are read from its constructor signature. Each
parameter resolves the dependency with the same name, unless it is annotated
with ``Annotated[SomeType, "other_name"]``, in which case ``other_name`` is
resolved instead. Parameters with default values are optional: they are only
resolved when the resolver can supply them.
"""

import inspect
import logging
import sys
from dataclasses import dataclass
from typing import Annotated, Any, Callable, Optional, TypeVar, get_args, get_origin

from dependable.errors import DependencyError, DependencyNotFound
from dependable.resolvers import Resolver

__all__ = ["Dependency", "Instantiator", "required_dependencies"]

logger = logging.getLogger(__name__)

T = TypeVar("T")

_SKIPPED_KINDS = (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)


@dataclass(frozen=True)
class Dependency:
    """A dependency required by a target's constructor.

    Attributes:
        parameter_name: The parameter name in the constructor signature.
        declared_type: The annotated type of the parameter, if any.
        component_name: The dependency name resolved for this parameter.
        default: The parameter's default value, or ``inspect.Parameter.empty``.
        positional_only: Whether the value must be passed positionally.
    """

    parameter_name: str
    declared_type: Optional[Any]
    component_name: str
    default: Any = inspect.Parameter.empty
    positional_only: bool = False

    @property
    def optional(self) -> bool:
        return self.default is not inspect.Parameter.empty


def required_dependencies(target: Callable) -> list[Dependency]:
    """List the dependencies of a class or callable in declaration order.

    ``*args`` and ``**kwargs`` parameters are ignored.

    Example:
        >>> class Service:
        ...     def __init__(self, logger, cache: Annotated[Cache, "redis"], retries=3):
        ...         ...
        >>> required_dependencies(Service)
        [Dependency('logger', None, 'logger'),
         Dependency('cache', Cache, 'redis'),
         Dependency('retries', None, 'retries', default=3)]

    Raises:
        DependencyError: If the signature of ``target`` cannot be inspected.
    """
    try:
        sig = inspect.signature(target, eval_str=True)
    except NameError:
        # Names imported only for type checking; evaluate what can be evaluated.
        sig = _lenient_signature(target)
    except (ValueError, TypeError) as e:
        raise DependencyError(f"Cannot inspect the signature of {target!r}") from e

    return [
        _make_dependency(param)
        for param in sig.parameters.values()
        if param.kind not in _SKIPPED_KINDS
    ]


def _lenient_signature(target: Callable) -> inspect.Signature:
    sig = inspect.signature(target)
    module = sys.modules.get(getattr(target, "__module__", None) or "")
    namespace = vars(module) if module is not None else {}

    params = []
    for param in sig.parameters.values():
        if isinstance(param.annotation, str):
            try:
                param = param.replace(annotation=eval(param.annotation, namespace))
            except (NameError, AttributeError, SyntaxError):
                pass
        params.append(param)
    return sig.replace(parameters=params)


def _make_dependency(param: inspect.Parameter) -> Dependency:
    annotation = param.annotation
    positional_only = param.kind is inspect.Parameter.POSITIONAL_ONLY

    if annotation is inspect.Parameter.empty:
        return Dependency(param.name, None, param.name, param.default, positional_only)

    if get_origin(annotation) is Annotated:
        base_type, *metadata = get_args(annotation)
        component_name = next((m for m in metadata if isinstance(m, str)), param.name)
        return Dependency(
            param.name, base_type, component_name, param.default, positional_only
        )

    return Dependency(param.name, annotation, param.name, param.default, positional_only)


class Instantiator:
    """Builds targets by resolving their constructor parameters.

    The instantiator keeps no state between calls: every call to
    :meth:`instantiate` resolves every dependency again.
    """

    def __init__(self, resolver: Resolver):
        self._resolver = resolver

    def instantiate(self, target: Callable[..., T]) -> T:
        """Resolve the dependencies of ``target`` and call it with them.

        Resolution stops at the first missing dependency; ``target`` is never
        called with a partial set of arguments.

        Raises:
            DependencyNotFound: If a required dependency cannot be resolved.
                The error carries the missing name and ``target``.
        """
        dependencies = required_dependencies(target)
        resolved: dict[str, Any] = {}
        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for dependency in dependencies:
            name = dependency.component_name
            if name not in resolved:
                if dependency.optional and not self._resolver.resolvable(name):
                    # Later positional-only values must keep their positions.
                    if dependency.positional_only:
                        args.append(dependency.default)
                    continue
                resolved[name] = self._resolve(name, target)

            if dependency.positional_only:
                args.append(resolved[name])
            else:
                kwargs[dependency.parameter_name] = resolved[name]

        logger.debug("Instantiating %r with %s", target, sorted(resolved))
        return target(*args, **kwargs)

    def _resolve(self, name: str, target: Callable) -> Any:
        try:
            return self._resolver.get(name)
        except DependencyNotFound as e:
            logger.debug("Cannot instantiate %r: missing '%s'", target, name)
            if e.target_type is not None:
                raise
            raise e.for_target(target) from e
