"""
Application layer - Build pipeline orchestration.

This layer contains the recipes, sessions and registry that drive a build.
It depends only on the Domain layer.
"""

from .build_session import BuildSession
from .container import Container
from .instance_creator import InstanceCreator
from .instances import ConstructorInstance, LambdaInstance, LazyInstance, ObjectInstance, ReferencedInstance
from .interceptor_chain import InterceptorChain, InterceptorRule
from .lifecycle_manager import LifecycleManager
from .registry import Registry
from .resolver import ConstructorResolver

__all__ = [
    "Container",
    "BuildSession",
    "InstanceCreator",
    "InterceptorChain",
    "InterceptorRule",
    "LifecycleManager",
    "Registry",
    "ConstructorResolver",
    # Recipes
    "ObjectInstance",
    "LambdaInstance",
    "ConstructorInstance",
    "ReferencedInstance",
    "LazyInstance",
]
