"""
Testing utilities module.

Provides helpers and utilities for testing applications using strata-di.
"""

from .utilities import MockSession, TestContainer, create_mock_container

__all__ = [
    "TestContainer",
    "create_mock_container",
    "MockSession",
]
