from typing import Any, Optional, Sequence

DEFAULT_NAME = "default"


def type_name(contract: Any) -> str:
    """Readable name for a contract, falling back to repr() for typing constructs."""
    return getattr(contract, "__name__", None) or repr(contract)


def format_path(path: Sequence[Any]) -> str:
    return " -> ".join(str(key) for key in path)


class StrataError(Exception):
    """Base exception for build pipeline errors.

    Attributes:
        path: Resolution path (root first) at the point of failure.
    """

    def __init__(self, message: str = "", path: Optional[Sequence[Any]] = None) -> None:
        self.path = list(path or [])
        if self.path:
            message += f" (resolution path: {format_path(self.path)})"
        super().__init__(message)


class UnresolvableContractError(StrataError):
    """Raised when no explicit argument and no registration match a contract.

    Attributes:
        contract: The requested contract.
        name: The requested name, or the default sentinel.
    """

    def __init__(self, contract: Any, name: Optional[str] = None, path: Optional[Sequence[Any]] = None) -> None:
        self.contract = contract
        self.name = name or DEFAULT_NAME
        super().__init__(f"No instance registered for {type_name(contract)} named '{self.name}'", path)


class ConstructionError(StrataError):
    """Raised when a recipe's own build logic fails.

    The underlying error is kept as ``__cause__``.

    Attributes:
        contract: The contract being built.
        name: Name of the recipe being built.
        reason: Description of the failure.
    """

    def __init__(
        self,
        contract: Any,
        name: Optional[str] = None,
        path: Optional[Sequence[Any]] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.contract = contract
        self.name = name or DEFAULT_NAME
        self.reason = reason
        message = f"Failed to build {type_name(contract)} named '{self.name}'"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message, path)


class InterceptionError(StrataError):
    """Raised when an interceptor fails while processing a built value.

    Attributes:
        contract: The contract whose value was being intercepted.
        name: Name of the recipe that produced the value.
        reason: Description of the failure.
    """

    def __init__(
        self,
        contract: Any,
        name: Optional[str] = None,
        path: Optional[Sequence[Any]] = None,
        reason: Optional[str] = None,
    ) -> None:
        self.contract = contract
        self.name = name or DEFAULT_NAME
        self.reason = reason
        message = f"Interceptor failed for {type_name(contract)} named '{self.name}'"
        if reason:
            message += f". Reason: {reason}"
        super().__init__(message, path)


class CircularDependencyError(StrataError):
    """Raised when a recipe is requested while it is already being built.

    Attributes:
        dependency_chain: Keys involved in the cycle, first and last being the same recipe.
    """

    def __init__(self, dependency_chain: Sequence[Any], path: Optional[Sequence[Any]] = None) -> None:
        self.dependency_chain = list(dependency_chain)
        super().__init__(f"Circular dependency detected: {format_path(self.dependency_chain)}", path)


class LifecycleError(StrataError):
    """Raised for invalid lifecycle configurations.

    This occurs when:
    - An unknown lifecycle value is supplied.
    - A registry-wide singleton is requested without a registry to own it.
    """
