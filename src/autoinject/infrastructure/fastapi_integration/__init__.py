"""
FastAPI integration module.

Provides helpers and utilities for integrating autoinject with FastAPI.
"""

from .integration import (
    InjectorMiddleware,
    create_fastapi_dependency,
    create_request_dependency,
    inject_dependencies,
)

__all__ = [
    "create_fastapi_dependency",
    "create_request_dependency",
    "inject_dependencies",
    "InjectorMiddleware",
]
