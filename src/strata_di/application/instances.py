"""Application layer - Concrete recipe variants."""

import inspect
from typing import Any, Callable, Dict, Mapping, Optional

from strata_di.application.resolver import ConstructorResolver
from strata_di.domain import IInstanceCreator, Instance, InstanceInterceptor, InstanceKind, Lifecycle


class ObjectInstance(Instance):
    """Recipe returning an already-built value.

    Defaults to ``Lifecycle.SINGLETON`` so the value is intercepted once and
    the intercepted result is reused by every session.

    Example:
        >>> container.use(Settings, ObjectInstance(Settings(debug=True)))
    """

    kind = InstanceKind.OBJECT

    def __init__(
        self,
        value: Any,
        name: Optional[str] = None,
        lifecycle: Optional[Lifecycle] = None,
        interceptor: Optional[InstanceInterceptor] = None,
    ) -> None:
        super().__init__(name, lifecycle or Lifecycle.SINGLETON, interceptor)
        self.value = value

    @property
    def concrete_type(self) -> Optional[type]:
        return type(self.value)

    def _build(self, contract: Any, creator: IInstanceCreator) -> Any:
        return self.value


class LambdaInstance(Instance):
    """Recipe delegating to a builder that receives the instance creator.

    The builder can pull nested dependencies with ``c.resolve`` and read
    the build context (``c.root_type``, ``c.parent_type``).

    Example:
        >>> LambdaInstance(lambda c: FakeLogger(c.root_type))
    """

    kind = InstanceKind.LAMBDA

    def __init__(
        self,
        builder: Callable[[IInstanceCreator], Any],
        returns: Optional[type] = None,
        name: Optional[str] = None,
        lifecycle: Optional[Lifecycle] = None,
        interceptor: Optional[InstanceInterceptor] = None,
    ) -> None:
        if not callable(builder):
            raise TypeError(f"Builder must be callable, got {type(builder).__name__}")
        super().__init__(name, lifecycle, interceptor)
        self.builder = builder
        self.returns = returns

    @property
    def concrete_type(self) -> Optional[type]:
        return self.returns

    def _build(self, contract: Any, creator: IInstanceCreator) -> Any:
        return self.builder(creator)


class ConstructorInstance(Instance):
    """Recipe creating a concrete class, auto-wiring its constructor.

    Attributes:
        arguments: Per-parameter overrides; values are passed as-is and
            ``Instance`` values are built for the parameter's type.
    """

    kind = InstanceKind.CONSTRUCTOR

    _resolver = ConstructorResolver()

    def __init__(
        self,
        concrete: type,
        arguments: Optional[Mapping[str, Any]] = None,
        name: Optional[str] = None,
        lifecycle: Optional[Lifecycle] = None,
        interceptor: Optional[InstanceInterceptor] = None,
    ) -> None:
        if not inspect.isclass(concrete):
            raise TypeError(f"ConstructorInstance requires a class, got {concrete!r}")
        super().__init__(name, lifecycle, interceptor)
        self.concrete = concrete
        self.arguments: Dict[str, Any] = dict(arguments or {})

    @property
    def concrete_type(self) -> Optional[type]:
        return self.concrete

    def with_argument(self, param_name: str, value: Any) -> "ConstructorInstance":
        self.arguments[param_name] = value
        return self

    def _build(self, contract: Any, creator: IInstanceCreator) -> Any:
        return self._resolver.create(self.concrete, creator, self.arguments)

    def describe(self) -> str:
        return f"{self.kind} instance '{self.name}' of {self.concrete.__name__}"


class ReferencedInstance(Instance):
    """Recipe forwarding to another named registration of the same contract."""

    kind = InstanceKind.REFERENCED

    def __init__(
        self,
        target_name: str,
        name: Optional[str] = None,
        lifecycle: Optional[Lifecycle] = None,
        interceptor: Optional[InstanceInterceptor] = None,
    ) -> None:
        super().__init__(name, lifecycle, interceptor)
        self.target_name = target_name

    def _build(self, contract: Any, creator: IInstanceCreator) -> Any:
        return creator.resolve(contract, self.target_name)

    def describe(self) -> str:
        return f"{self.kind} instance '{self.name}' -> '{self.target_name}'"


class LazyInstance(Instance):
    """Recipe producing a deferred factory for another contract.

    Calling the factory resolves ``target_contract`` in the same build
    session, at call time.

    Example:
        >>> container.use(LoggerFactory, LazyInstance(ILoggerHolder))
    """

    kind = InstanceKind.LAZY

    def __init__(
        self,
        target_contract: Any,
        target_name: Optional[str] = None,
        name: Optional[str] = None,
        lifecycle: Optional[Lifecycle] = None,
        interceptor: Optional[InstanceInterceptor] = None,
    ) -> None:
        super().__init__(name, lifecycle, interceptor)
        self.target_contract = target_contract
        self.target_name = target_name

    def _build(self, contract: Any, creator: IInstanceCreator) -> Any:
        return creator.create_lazy(self.target_contract, self.target_name)
