from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, List, Optional, Tuple, Type, TypeVar

from strata_di.domain.models import InstanceKey

if TYPE_CHECKING:
    from strata_di.domain.instance import Instance

T = TypeVar("T")


class InstanceInterceptor(ABC):
    """Post-construction transform applied to a freshly built value."""

    @abstractmethod
    def process(self, target: Any) -> Any:
        """Process a built value and return the value handed back to the caller.

        Args:
            target: The value produced by the recipe or a previous interceptor.

        Returns:
            The same value, a decorated wrapper, or a replacement.
        """


class IInstanceCreator(ABC):
    """Surface a recipe uses to pull nested dependencies and find interceptors."""

    @abstractmethod
    def resolve(self, contract: Type[T], name: Optional[str] = None) -> T:
        """Resolve a nested dependency through the owning build session.

        Args:
            contract: The contract to resolve.
            name: Optional registration name.
        """

    @abstractmethod
    def resolve_all(self, contract: Type[T]) -> List[T]:
        """Build every registration of a contract, in registration order."""

    @abstractmethod
    def try_resolve(self, contract: Type[T], name: Optional[str] = None) -> Optional[T]:
        """Resolve a dependency, or return None when nothing is registered for it."""

    @abstractmethod
    def create_lazy(self, contract: Type[T], name: Optional[str] = None) -> Callable[[], T]:
        """Return a factory that resolves the contract each time it is called."""

    @abstractmethod
    def build_instance(self, contract: Type[T], instance: "Instance") -> T:
        """Build a specific recipe for a contract inside the owning session."""

    @abstractmethod
    def find_interceptor(self, runtime_type: type) -> InstanceInterceptor:
        """Find the interceptor registered for the runtime type of a built value.

        Args:
            runtime_type: ``type(value)`` of the value just built.

        Returns:
            The composed interceptor, or an identity interceptor.
        """

    @property
    @abstractmethod
    def root_type(self) -> Optional[Any]:
        """Contract originally requested by the top-level caller."""

    @property
    @abstractmethod
    def root_concrete_type(self) -> Optional[Any]:
        """Concrete type produced by the root recipe, when the recipe declares one."""

    @property
    @abstractmethod
    def parent_type(self) -> Optional[Any]:
        """Contract of the immediate requester of the value currently being built."""

    @property
    @abstractmethod
    def current_type(self) -> Optional[Any]:
        """Contract currently being built."""

    @property
    @abstractmethod
    def resolution_path(self) -> Tuple[InstanceKey, ...]:
        """Keys from the root to the value currently being built."""


class IRegistry(ABC):
    """Maps contracts to recipes and owns the registry-wide singleton store."""

    @abstractmethod
    def lookup(self, contract: Any, name: Optional[str] = None) -> Optional["Instance"]:
        """Return the recipe for ``(contract, name)``, or None.

        Args:
            contract: The requested contract.
            name: Optional registration name; None selects the default.
        """

    @abstractmethod
    def lookup_all(self, contract: Any) -> List["Instance"]:
        """Return every recipe registered for a contract, in registration order."""

    @abstractmethod
    def get_or_create_singleton(self, contract: Any, instance: "Instance", factory: Callable[[], Any]) -> Any:
        """Return the registry-wide value for a recipe, creating it with ``factory`` if needed.

        Implementations must not hold a lock while ``factory`` runs.
        """

    @abstractmethod
    def dispose(self) -> None:
        """Drop every registry-wide singleton."""
