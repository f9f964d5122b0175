import collections.abc
import inspect
import types
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple, Union, get_args, get_origin, get_type_hints

from strata_di.domain import ConstructionError, IInstanceCreator, Instance

_UNION_ORIGINS = (Union, getattr(types, "UnionType", Union))
_SEQUENCE_ORIGINS = (list, List, Sequence, collections.abc.Sequence, collections.abc.Iterable)


class ConstructorResolver:
    """Builds objects by resolving constructor parameters from their type hints.

    Parameter shapes understood:
    - ``T``: resolved through the creator.
    - ``Optional[T]``: resolved if registered, otherwise None.
    - ``Callable[[], T]``: a lazy factory resolving ``T`` when called.
    - ``List[T]`` / ``Sequence[T]``: every registration of ``T``.

    Parameters with default values are left to their defaults unless an
    explicit argument is supplied for them.
    """

    def create(
        self,
        concrete_type: type,
        creator: IInstanceCreator,
        arguments: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Resolve all constructor dependencies and create the object.

        Args:
            concrete_type: The class to instantiate.
            creator: Resolves nested dependencies.
            arguments: Per-parameter values or recipes overriding resolution.

        Returns:
            Instance with all dependencies injected.

        Raises:
            ConstructionError: If a parameter lacks a type hint and a default.

        Example:
            >>> class LoggerHolder:
            ...     def __init__(self, logger: FakeLogger):
            ...         self.logger = logger
            >>>
            >>> resolver = ConstructorResolver()
            >>> holder = resolver.create(LoggerHolder, creator)
        """
        kwargs = self.resolve_arguments(concrete_type, creator, arguments or {})
        return concrete_type(**kwargs)

    def resolve_arguments(
        self,
        concrete_type: type,
        creator: IInstanceCreator,
        arguments: Mapping[str, Any],
    ) -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {}
        for param_name, param, param_type in self._parameters(concrete_type):
            if param_name in arguments:
                value = arguments[param_name]
                if isinstance(value, Instance):
                    value = creator.build_instance(param_type if param_type is not None else object, value)
                kwargs[param_name] = value
                continue

            # Skip parameters with defaults (let them use default values)
            if param.default is not inspect.Parameter.empty:
                continue

            if param_type is None:
                raise ConstructionError(
                    concrete_type,
                    path=creator.resolution_path,
                    reason=f"Parameter '{param_name}' lacks type hint and has no default value.",
                )

            kwargs[param_name] = self.resolve_parameter(param_type, creator)
        return kwargs

    def resolve_parameter(self, param_type: Any, creator: IInstanceCreator) -> Any:
        origin = get_origin(param_type)
        args = get_args(param_type)

        if origin in _UNION_ORIGINS and len(args) == 2 and type(None) in args:
            inner = args[0] if args[1] is type(None) else args[1]
            return creator.try_resolve(inner)

        if origin is collections.abc.Callable and args and args[0] == []:
            return creator.create_lazy(args[1])

        if origin in _SEQUENCE_ORIGINS and len(args) == 1:
            return creator.resolve_all(args[0])

        return creator.resolve(param_type)

    def _parameters(self, concrete_type: type) -> List[Tuple[str, inspect.Parameter, Any]]:
        init = concrete_type.__init__
        signature = inspect.signature(init)
        type_hints = get_type_hints(init)

        parameters = []
        for param_name, param in signature.parameters.items():
            if param_name == "self":
                continue

            # Skip *args and **kwargs parameters (VAR_POSITIONAL and VAR_KEYWORD)
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            parameters.append((param_name, param, type_hints.get(param_name)))
        return parameters
