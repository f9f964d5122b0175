"""
strata-di: Object-graph build pipeline with contextual build sessions and interceptors.

Public API exports for the strata-di package.
"""

# Application exports
from strata_di.application.build_session import BuildSession
from strata_di.application.container import Container
from strata_di.application.instances import (
    ConstructorInstance,
    LambdaInstance,
    LazyInstance,
    ObjectInstance,
    ReferencedInstance,
)
from strata_di.application.interceptor_chain import InterceptorChain
from strata_di.application.registry import Registry

# Domain exports
from strata_di.domain.enums import Lifecycle
from strata_di.domain.exceptions import (
    DEFAULT_NAME,
    CircularDependencyError,
    ConstructionError,
    InterceptionError,
    LifecycleError,
    StrataError,
    UnresolvableContractError,
)
from strata_di.domain.instance import Instance
from strata_di.domain.interceptors import CompoundInterceptor, FuncInterceptor, NullInterceptor
from strata_di.domain.interfaces import IInstanceCreator, InstanceInterceptor
from strata_di.domain.models import ContainerSettings, ExplicitArguments, InstanceKey

__version__ = "0.1.0"

__all__ = [
    # Container and session
    "Container",
    "ContainerSettings",
    "BuildSession",
    "Registry",
    "InterceptorChain",
    "ExplicitArguments",
    "InstanceKey",
    "DEFAULT_NAME",
    # Recipes
    "Instance",
    "ObjectInstance",
    "LambdaInstance",
    "ConstructorInstance",
    "ReferencedInstance",
    "LazyInstance",
    "IInstanceCreator",
    # Interceptors
    "InstanceInterceptor",
    "NullInterceptor",
    "FuncInterceptor",
    "CompoundInterceptor",
    # Enums
    "Lifecycle",
    # Exceptions
    "StrataError",
    "UnresolvableContractError",
    "ConstructionError",
    "InterceptionError",
    "CircularDependencyError",
    "LifecycleError",
]
