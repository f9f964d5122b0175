"""Application layer - Per-call build context."""

import logging
from typing import Any, Callable, List, Optional, Tuple, Type, TypeVar

from strata_di.application.instance_creator import InstanceCreator
from strata_di.application.interceptor_chain import InterceptorChain
from strata_di.application.lifecycle_manager import LifecycleManager
from strata_di.domain import (
    ConstructionError,
    ContainerSettings,
    ExplicitArguments,
    Instance,
    InstanceKey,
    IRegistry,
    ResolutionFrame,
    ResolutionPath,
    UnresolvableContractError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class BuildSession:
    """Unit of work for one top-level resolution request.

    Tracks the root contract, the resolution path (from which the
    requesting contract is derived), a session cache and the caller's
    explicit arguments. A session is owned by one caller and is not
    thread-safe; create one per top-level request.

    Example:
        >>> session = BuildSession(registry, interceptors)
        >>> holder = session.get_instance(ILoggerHolder)
        >>> session.root_type is ILoggerHolder
        True
    """

    def __init__(
        self,
        registry: IRegistry,
        interceptors: Optional[InterceptorChain] = None,
        explicit_arguments: Optional[ExplicitArguments] = None,
        settings: Optional[ContainerSettings] = None,
    ) -> None:
        self._registry = registry
        self._interceptors = interceptors if interceptors is not None else InterceptorChain()
        self._explicit_arguments = explicit_arguments if explicit_arguments is not None else ExplicitArguments()
        self._settings = settings or ContainerSettings()
        self._lifecycle_manager = LifecycleManager(registry)
        self._path = ResolutionPath()
        self._root_type: Optional[Any] = None
        self._last_root_concrete_type: Optional[Any] = None
        self._root_floor = 0
        self._creator = InstanceCreator(self, self._interceptors)

    @property
    def creator(self) -> InstanceCreator:
        return self._creator

    @property
    def explicit_arguments(self) -> ExplicitArguments:
        return self._explicit_arguments

    @property
    def root_type(self) -> Optional[Any]:
        """Contract requested by the first top-level call on this session."""
        return self._root_type

    @property
    def root_concrete_type(self) -> Optional[Any]:
        """Concrete type of the outermost recipe that declares one.

        A call to a lazy factory starts a new concrete root for the graph it
        builds. While nothing is building, this is the value from the last
        top-level build.
        """
        for frame in self._path.frames[self._root_floor :]:
            if frame.concrete_type is not None:
                return frame.concrete_type
        return self._last_root_concrete_type

    @property
    def parent_type(self) -> Optional[Any]:
        """Contract of the immediate requester of the value being built, None at the top level."""
        requester = self._path.requester
        return requester.key.contract if requester else None

    @property
    def current_type(self) -> Optional[Any]:
        current = self._path.current
        return current.key.contract if current else None

    @property
    def resolution_path(self) -> Tuple[InstanceKey, ...]:
        return self._path.keys()

    def _enter(self, contract: Any) -> None:
        if self._root_type is None and self._path.depth == 0:
            self._root_type = contract
            logger.debug("Build session started for %s", InstanceKey.of(contract))

    def get_instance(self, contract: Type[T], name: Optional[str] = None) -> T:
        """Resolve ``(contract, name)``.

        An explicit argument for the exact key is returned as-is, without
        interceptors. Otherwise the registry's recipe is built according to
        its lifecycle.

        Args:
            contract: The contract to resolve.
            name: Optional registration name.

        Returns:
            The resolved value.

        Raises:
            UnresolvableContractError: If nothing is registered for the key.
            ConstructionError: If a recipe in the graph fails.
            InterceptionError: If an interceptor in the graph fails.
            CircularDependencyError: If the graph contains a cycle.
        """
        self._enter(contract)
        key = InstanceKey.of(contract, name)
        if key in self._explicit_arguments.values:
            logger.debug("Using explicit argument for %s", key)
            return self._explicit_arguments.values[key]

        instance = self._registry.lookup(contract, name)
        if instance is None:
            raise UnresolvableContractError(contract, name, self.resolution_path + (key,))
        return self.build_instance(contract, instance)

    def try_get_instance(self, contract: Type[T], name: Optional[str] = None) -> Optional[T]:
        """Like ``get_instance``, but returns None when nothing is registered for the key."""
        self._enter(contract)
        key = InstanceKey.of(contract, name)
        if key in self._explicit_arguments.values:
            return self._explicit_arguments.values[key]

        instance = self._registry.lookup(contract, name)
        if instance is None:
            return None
        return self.build_instance(contract, instance)

    def get_all_instances(self, contract: Type[T]) -> List[T]:
        """Build every registration of ``contract`` in registration order."""
        self._enter(contract)
        return [self.build_instance(contract, instance) for instance in self._registry.lookup_all(contract)]

    def create_lazy(self, contract: Type[T], name: Optional[str] = None) -> Callable[[], T]:
        """Return a factory resolving ``(contract, name)`` in this session each time it is called.

        The build context (root, parent) is the one in effect when the factory is
        called, except that ``root_concrete_type`` restarts at the lazily built graph.
        """

        def lazy() -> T:
            floor = self._root_floor
            self._root_floor = self._path.depth
            try:
                return self.get_instance(contract, name)
            finally:
                self._root_floor = floor

        return lazy

    def build_instance(self, contract: Type[T], instance: Instance) -> T:
        """Build a recipe for ``contract`` honoring its lifecycle.

        The recipe's frame is on the resolution path for the duration of the
        build and removed on every exit path.
        """
        self._enter(contract)
        frame = ResolutionFrame(
            key=InstanceKey.of(contract, instance.name),
            instance_id=instance.instance_id,
            concrete_type=instance.concrete_type,
        )
        if self._path.depth >= self._settings.max_depth:
            raise ConstructionError(
                contract,
                instance.name,
                self.resolution_path + (frame.key,),
                f"maximum resolution depth of {self._settings.max_depth} exceeded",
            )

        lifecycle = instance.lifecycle or self._settings.default_lifecycle
        self._path.push(frame)
        if self._root_floor == 0:
            if self._path.depth == 1:
                self._last_root_concrete_type = None
            if frame.concrete_type is not None and not any(f.concrete_type is not None for f in self._path.frames[:-1]):
                self._last_root_concrete_type = frame.concrete_type
        try:
            logger.debug("Building %s with %s (%s)", frame.key, instance.describe(), lifecycle)
            return self._lifecycle_manager.get_or_create(
                contract,
                instance,
                lifecycle,
                lambda: instance.build(contract, self._creator),
            )
        finally:
            self._path.pop()
