"""
Domain layer - Core build pipeline abstractions.

This layer contains recipes, interceptors, value objects and errors.
It has no dependencies on other layers.
"""

from .enums import InstanceKind, Lifecycle
from .exceptions import (
    DEFAULT_NAME,
    CircularDependencyError,
    ConstructionError,
    InterceptionError,
    LifecycleError,
    StrataError,
    UnresolvableContractError,
)
from .instance import Instance
from .interceptors import CompoundInterceptor, FuncInterceptor, NullInterceptor, as_interceptor, compose
from .interfaces import IInstanceCreator, InstanceInterceptor, IRegistry
from .models import (
    ContainerSettings,
    ExplicitArguments,
    InstanceKey,
    ResolutionFrame,
    ResolutionPath,
)

__all__ = [
    "DEFAULT_NAME",
    # Enums
    "Lifecycle",
    "InstanceKind",
    # Exceptions
    "StrataError",
    "UnresolvableContractError",
    "ConstructionError",
    "InterceptionError",
    "CircularDependencyError",
    "LifecycleError",
    # Interfaces
    "IInstanceCreator",
    "IRegistry",
    "InstanceInterceptor",
    # Recipes and interceptors
    "Instance",
    "NullInterceptor",
    "FuncInterceptor",
    "CompoundInterceptor",
    "as_interceptor",
    "compose",
    # Models
    "InstanceKey",
    "ExplicitArguments",
    "ResolutionFrame",
    "ResolutionPath",
    "ContainerSettings",
]
