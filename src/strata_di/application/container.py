import inspect
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from strata_di.application.build_session import BuildSession
from strata_di.application.instances import ConstructorInstance, LambdaInstance, ObjectInstance
from strata_di.application.interceptor_chain import InterceptorChain
from strata_di.application.registry import Registry
from strata_di.domain import (
    ContainerSettings,
    ExplicitArguments,
    IInstanceCreator,
    Instance,
    Lifecycle,
    LifecycleError,
)

T = TypeVar("T")


class Container:
    """Main entry point: registrations, interceptors and top-level resolution.

    Every top-level call gets its own ``BuildSession``, so session-scoped
    values are never shared between calls while singletons live in the
    registry until ``dispose``.

    Attributes:
        settings: Configuration shared by the registry and sessions.
        _registry: Contract to recipe map and singleton store.
        _interceptors: Interceptor rules keyed by runtime type.
    """

    def __init__(self, settings: Optional[ContainerSettings] = None, registry: Optional[Registry] = None) -> None:
        """Initialize the container with an empty registry and interceptor chain."""
        self.settings = settings or ContainerSettings()
        self._registry = registry if registry is not None else Registry(self.settings)
        self._interceptors = InterceptorChain()

    @property
    def registry(self) -> Registry:
        return self._registry

    @property
    def interceptors(self) -> InterceptorChain:
        return self._interceptors

    def _register(
        self,
        contract: Any,
        builder: Callable[[IInstanceCreator], Any],
        lifecycle: Lifecycle,
    ) -> Instance:
        """Internal registration method with validation.

        Args:
            contract: The contract to register.
            builder: Factory receiving the instance creator.
            lifecycle: Lifecycle of the built value.

        Raises:
            LifecycleError: If the default is a builder registered with a different lifecycle.
        """
        if self._registry.has(contract):
            default = self._registry.lookup(contract)
            if isinstance(default, LambdaInstance) and default.lifecycle not in (None, lifecycle):
                raise LifecycleError(
                    f"Contract {getattr(contract, '__name__', contract)} is already registered "
                    f"with lifecycle {default.lifecycle.value}, "
                    f"cannot re-register with {lifecycle.value}"
                )
        return self._registry.use(contract, LambdaInstance(builder, lifecycle=lifecycle))

    def register_singletons(self, dependencies: Dict[Any, Callable[[IInstanceCreator], Any]]) -> None:
        """Register builders whose values are shared by every session until ``dispose``.

        Args:
            dependencies: Dictionary mapping contracts to builder functions.
                         Each builder receives the instance creator and returns a value.

        Raises:
            LifecycleError: If a contract's default builder has a different lifecycle.

        Example:
            >>> container.register_singletons({
            ...     DatabaseConfig: lambda c: DatabaseConfig.from_env(),
            ...     DatabaseConnection: lambda c: DatabaseConnection(c.resolve(DatabaseConfig)),
            ... })
        """
        for contract, builder in dependencies.items():
            self._register(contract, builder, Lifecycle.SINGLETON)

    def register_session_scoped(self, dependencies: Dict[Any, Callable[[IInstanceCreator], Any]]) -> None:
        """Register builders whose values are shared within one top-level resolution.

        Example:
            >>> container.register_session_scoped({
            ...     UnitOfWork: lambda c: UnitOfWork(c.resolve(DatabaseConnection)),
            ... })
        """
        for contract, builder in dependencies.items():
            self._register(contract, builder, Lifecycle.SESSION)

    def register_unique(self, dependencies: Dict[Any, Callable[[IInstanceCreator], Any]]) -> None:
        """Register builders that run on every request.

        Example:
            >>> container.register_unique({
            ...     FakeLogger: lambda c: FakeLogger(c.root_type),
            ... })
        """
        for contract, builder in dependencies.items():
            self._register(contract, builder, Lifecycle.UNIQUE)

    def use(self, contract: Any, recipe: Any, name: Optional[str] = None) -> Instance:
        """Register a recipe as the contract's default.

        Args:
            contract: The contract to register.
            recipe: An ``Instance``, a class to auto-wire, or a ready-made value.
            name: Optional registration name.

        Returns:
            The registered recipe, for further configuration.

        Example:
            >>> container.use(ILoggerHolder, LoggerHolder, name="Blue").always_unique()
        """
        return self._registry.use(contract, self._as_instance(recipe, name))

    def add(self, contract: Any, recipe: Any, name: Optional[str] = None) -> Instance:
        """Register an additional recipe; it becomes the default only if there was none."""
        return self._registry.add(contract, self._as_instance(recipe, name))

    @staticmethod
    def _as_instance(recipe: Any, name: Optional[str]) -> Instance:
        if isinstance(recipe, Instance):
            instance = recipe
        elif inspect.isclass(recipe):
            instance = ConstructorInstance(recipe)
        else:
            instance = ObjectInstance(recipe)
        if name is not None:
            instance.named(name)
        return instance

    def intercept(self, match_type: type, interceptor: Any) -> None:
        """Apply an interceptor to every built value of ``match_type`` or a subclass."""
        self._interceptors.register(match_type, interceptor)

    def intercept_when(self, predicate: Callable[[type], bool], interceptor: Any) -> None:
        """Apply an interceptor to every built value whose runtime type satisfies ``predicate``."""
        self._interceptors.register_rule(predicate, interceptor)

    def create_session(self, explicit_arguments: Optional[ExplicitArguments] = None) -> BuildSession:
        """Create a build session bound to this container's registry and interceptors."""
        return BuildSession(self._registry, self._interceptors, explicit_arguments, self.settings)

    def get_instance(
        self,
        contract: Type[T],
        name: Optional[str] = None,
        explicit_arguments: Optional[ExplicitArguments] = None,
    ) -> T:
        """Resolve a contract in a fresh build session.

        Args:
            contract: The contract to resolve.
            name: Optional registration name.
            explicit_arguments: Values overriding resolution for this call only.

        Returns:
            The resolved value.

        Raises:
            UnresolvableContractError: If the contract cannot be resolved.
            ConstructionError: If a recipe in the graph fails.
            InterceptionError: If an interceptor in the graph fails.
            CircularDependencyError: If the graph contains a cycle.

        Example:
            >>> holder = container.get_instance(ILoggerHolder, "Red")
        """
        return self.create_session(explicit_arguments).get_instance(contract, name)

    def try_get_instance(
        self,
        contract: Type[T],
        name: Optional[str] = None,
        explicit_arguments: Optional[ExplicitArguments] = None,
    ) -> Optional[T]:
        return self.create_session(explicit_arguments).try_get_instance(contract, name)

    def get_all_instances(
        self,
        contract: Type[T],
        explicit_arguments: Optional[ExplicitArguments] = None,
    ) -> List[T]:
        """Build every registration of a contract, in registration order, in one session."""
        return self.create_session(explicit_arguments).get_all_instances(contract)

    def build(
        self,
        contract: Type[T],
        recipe: Instance,
        explicit_arguments: Optional[ExplicitArguments] = None,
    ) -> T:
        """Build a caller-supplied recipe for a contract, without registering it."""
        return self.create_session(explicit_arguments).build_instance(contract, recipe)

    def dispose(self) -> None:
        """Drop all singletons; registrations are kept."""
        self._registry.dispose()

    def clear(self) -> None:
        """Clear all registrations, singletons and interceptors.

        Useful for testing or resetting the container state.
        """
        self._registry.clear()
        self._interceptors.clear()

    def __enter__(self) -> "Container":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> bool:
        self.dispose()
        return False
