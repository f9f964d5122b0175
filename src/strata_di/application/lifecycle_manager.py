import logging
from typing import Any, Callable, Dict, Tuple

from strata_di.domain import Instance, IRegistry, Lifecycle, LifecycleError

logger = logging.getLogger(__name__)


class LifecycleManager:
    """Applies lifecycle caching for one build session.

    Session-scoped values live in this manager's cache; registry-wide
    singletons are owned by the registry.

    Attributes:
        _registry: Registry owning the singleton store.
        _session_cache: Values built under ``Lifecycle.SESSION``.
    """

    def __init__(self, registry: IRegistry) -> None:
        self._registry = registry
        self._session_cache: Dict[Tuple[Any, str], Any] = {}

    def get_or_create(
        self,
        contract: Any,
        instance: Instance,
        lifecycle: Lifecycle,
        factory: Callable[[], Any],
    ) -> Any:
        """Get a cached value or create a new one based on lifecycle.

        Args:
            contract: The contract being built.
            instance: The recipe being built.
            lifecycle: Effective lifecycle of the recipe.
            factory: Builds a new value.

        Returns:
            Value according to lifecycle rules:
            - Unique: Always a new value
            - Session: Cached value for this session or a new, cached one
            - Singleton: The registry's value, created on first use

        Raises:
            LifecycleError: If the lifecycle is unknown.
        """
        if lifecycle == Lifecycle.UNIQUE:
            return factory()

        if lifecycle == Lifecycle.SESSION:
            key = (contract, instance.instance_id)
            if key in self._session_cache:
                logger.debug("Session cache hit for %s", instance.describe())
                return self._session_cache[key]
            # Only successful builds are cached
            value = factory()
            self._session_cache[key] = value
            return value

        if lifecycle == Lifecycle.SINGLETON:
            return self._registry.get_or_create_singleton(contract, instance, factory)

        raise LifecycleError(f"Unknown lifecycle {lifecycle!r} for {instance.describe()}")

    def clear_session_cache(self) -> None:
        self._session_cache.clear()

    @property
    def session_cache_size(self) -> int:
        return len(self._session_cache)
