import uuid
from abc import ABC, abstractmethod
from typing import Any, ClassVar, Optional

from strata_di.domain.enums import InstanceKind, Lifecycle
from strata_di.domain.exceptions import DEFAULT_NAME, ConstructionError, InterceptionError, StrataError
from strata_di.domain.interceptors import NullInterceptor, as_interceptor, compose
from strata_di.domain.interfaces import IInstanceCreator, InstanceInterceptor


class Instance(ABC):
    """A recipe that knows how to produce one value for a contract.

    Subclasses form a closed set of variants, tagged by ``kind``, and only
    supply ``_build``. ``build`` runs the recipe, then the recipe's own
    interceptor, then any interceptor registered for the runtime type of
    the value.

    Attributes:
        instance_id: Unique identifier of this recipe.
        lifecycle: Caching policy, or None to use the container default.
        interceptor: Interceptor owned by this recipe.
    """

    kind: ClassVar[InstanceKind]

    def __init__(
        self,
        name: Optional[str] = None,
        lifecycle: Optional[Lifecycle] = None,
        interceptor: Optional[InstanceInterceptor] = None,
    ) -> None:
        self.instance_id = uuid.uuid4().hex
        self._name = self._validate_name(name) if name is not None else None
        self.lifecycle = lifecycle
        self.interceptor: InstanceInterceptor = interceptor or NullInterceptor()

    @property
    def name(self) -> str:
        return self._name or DEFAULT_NAME

    @property
    def is_named(self) -> bool:
        return self._name is not None

    @property
    def concrete_type(self) -> Optional[type]:
        """Type this recipe is known to produce, if it declares one."""
        return None

    def named(self, name: str) -> "Instance":
        self._name = self._validate_name(name)
        return self

    @staticmethod
    def _validate_name(name: str) -> str:
        """Reject names that cannot be told apart from the default registration."""
        if not name:
            raise ValueError("Instance name must be a non-empty string")
        if name == DEFAULT_NAME:
            raise ValueError(f"Instance name '{DEFAULT_NAME}' is reserved for the default registration")
        return name

    def with_lifecycle(self, lifecycle: Lifecycle) -> "Instance":
        self.lifecycle = Lifecycle(lifecycle)
        return self

    def always_unique(self) -> "Instance":
        return self.with_lifecycle(Lifecycle.UNIQUE)

    def singleton(self) -> "Instance":
        return self.with_lifecycle(Lifecycle.SINGLETON)

    def intercept_with(self, interceptor: Any) -> "Instance":
        """Add an interceptor, applied after any already assigned to this recipe."""
        self.interceptor = compose([self.interceptor, as_interceptor(interceptor)])
        return self

    def build(self, contract: Any, creator: IInstanceCreator) -> Any:
        """Build a value for ``contract`` and pass it through the interceptors.

        Args:
            contract: The contract the value is requested for.
            creator: Resolves nested dependencies and finds interceptors.

        Returns:
            The fully intercepted value.

        Raises:
            ConstructionError: If the recipe's build logic fails.
            InterceptionError: If an interceptor fails.
        """
        try:
            value = self._build(contract, creator)
        except StrataError:
            raise
        except Exception as e:
            raise ConstructionError(contract, self.name, creator.resolution_path, str(e)) from e

        # Chain interceptors are chosen by the runtime type of the raw built value
        runtime_type = type(value)
        value = self._intercept(value, contract, creator)
        return self._intercept(value, contract, creator, runtime_type)

    def _intercept(
        self,
        value: Any,
        contract: Any,
        creator: IInstanceCreator,
        runtime_type: Optional[type] = None,
    ) -> Any:
        """Apply this recipe's interceptor, or with ``runtime_type`` the chain's interceptor for it."""
        interceptor: Any = self.interceptor
        try:
            if runtime_type is not None:
                interceptor = creator.find_interceptor(runtime_type)
            return interceptor.process(value)
        except StrataError:
            raise
        except Exception as e:
            raise InterceptionError(contract, self.name, creator.resolution_path, f"{interceptor!r}: {e}") from e

    @abstractmethod
    def _build(self, contract: Any, creator: IInstanceCreator) -> Any:
        """Produce the raw value for ``contract``.

        Args:
            contract: The contract the value is requested for.
            creator: Resolves nested dependencies.
        """

    def describe(self) -> str:
        return f"{self.kind} instance '{self.name}'"

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r}, lifecycle={self.lifecycle})"
