"""
FastAPI integration module.

Provides helpers and utilities for integrating strata-di with FastAPI.
"""

from .integration import (
    ExplicitArgumentsMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "ExplicitArgumentsMiddleware",
]
