"""
Testing utilities module.

Provides helpers and utilities for testing applications wired with autoinject.
"""

from .utilities import OverrideScope, TestInjector, create_mock_injector

__all__ = [
    "TestInjector",
    "create_mock_injector",
    "OverrideScope",
]
