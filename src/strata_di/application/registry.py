"""Application layer - In-memory contract registry."""

import inspect
import logging
import threading
from typing import Any, Callable, Dict, List, Optional, Tuple

from strata_di.application.instances import ConstructorInstance
from strata_di.domain import DEFAULT_NAME, ContainerSettings, Instance, IRegistry

logger = logging.getLogger(__name__)


class Registry(IRegistry):
    """Thread-safe map of contracts to ordered recipes, plus the singleton store.

    The first recipe added for a contract becomes its default until
    ``use`` selects another one. Adding a named recipe whose name is already
    registered replaces it in place, keeping registration order.

    Attributes:
        _families: Recipes per contract, in registration order.
        _defaults: Default recipe per contract.
        _singletons: Registry-wide values keyed by ``(contract, instance_id)``.
    """

    def __init__(self, settings: Optional[ContainerSettings] = None) -> None:
        self._settings = settings or ContainerSettings()
        self._families: Dict[Any, List[Instance]] = {}
        self._defaults: Dict[Any, Instance] = {}
        self._singletons: Dict[Tuple[Any, str], Any] = {}
        self._lock = threading.RLock()

    def add(self, contract: Any, instance: Instance) -> Instance:
        """Register an additional recipe for a contract.

        Args:
            contract: The contract the recipe produces values for.
            instance: The recipe.

        Returns:
            The registered recipe.
        """
        with self._lock:
            family = self._families.setdefault(contract, [])
            replaced = self._find_named(family, instance.name) if instance.is_named else None
            if replaced is not None:
                family[family.index(replaced)] = instance
                if self._defaults.get(contract) is replaced:
                    self._defaults[contract] = instance
            else:
                family.append(instance)
                self._defaults.setdefault(contract, instance)
        logger.debug("Registered %s for %s", instance.describe(), contract)
        return instance

    def use(self, contract: Any, instance: Instance) -> Instance:
        """Register a recipe and make it the contract's default."""
        with self._lock:
            self.add(contract, instance)
            self._defaults[contract] = instance
        return instance

    def lookup(self, contract: Any, name: Optional[str] = None) -> Optional[Instance]:
        with self._lock:
            if name is None or name == DEFAULT_NAME:
                instance = self._defaults.get(contract)
                if instance is None and self._can_auto_wire(contract):
                    instance = self.use(contract, ConstructorInstance(contract))
                return instance
            return self._find_named(self._families.get(contract, []), name)

    def lookup_all(self, contract: Any) -> List[Instance]:
        with self._lock:
            return list(self._families.get(contract, []))

    def has(self, contract: Any, name: Optional[str] = None) -> bool:
        with self._lock:
            if name is None or name == DEFAULT_NAME:
                return contract in self._defaults
            return self._find_named(self._families.get(contract, []), name) is not None

    def contracts(self) -> List[Any]:
        with self._lock:
            return list(self._families)

    def eject(self, contract: Any) -> None:
        """Remove every recipe and singleton registered for a contract."""
        with self._lock:
            self._families.pop(contract, None)
            self._defaults.pop(contract, None)
            for key in [key for key in self._singletons if key[0] == contract]:
                del self._singletons[key]

    def get_or_create_singleton(self, contract: Any, instance: Instance, factory: Callable[[], Any]) -> Any:
        key = (contract, instance.instance_id)
        with self._lock:
            if key in self._singletons:
                return self._singletons[key]

        # The lock is released while user construction code runs, which may
        # re-enter resolution. Concurrent builders race; the first stored value wins.
        value = factory()

        with self._lock:
            stored = self._singletons.setdefault(key, value)
        if stored is value:
            logger.debug("Created singleton for %s", instance.describe())
        return stored

    def singleton_count(self) -> int:
        with self._lock:
            return len(self._singletons)

    def dispose(self) -> None:
        with self._lock:
            self._singletons.clear()
        logger.debug("Registry singletons disposed")

    def clear(self) -> None:
        """Remove all registrations and singletons."""
        with self._lock:
            self._families.clear()
            self._defaults.clear()
            self._singletons.clear()

    def copy(self) -> "Registry":
        """Copy the registrations into a new registry with an empty singleton store."""
        clone = Registry(self._settings)
        with self._lock:
            clone._families = {contract: list(family) for contract, family in self._families.items()}
            clone._defaults = dict(self._defaults)
        return clone

    def _can_auto_wire(self, contract: Any) -> bool:
        return (
            self._settings.auto_wire
            and inspect.isclass(contract)
            and not inspect.isabstract(contract)
            and not getattr(contract, "_is_protocol", False)
            and contract.__module__ != "builtins"
        )

    @staticmethod
    def _find_named(family: List[Instance], name: str) -> Optional[Instance]:
        for instance in family:
            if instance.is_named and instance.name == name:
                return instance
        return None
