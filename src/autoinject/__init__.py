"""
autoinject: Recursive dependency injector with auto-wiring from constructor type hints.

Public API exports for the autoinject package.
"""

import logging

# Application exports
from autoinject.application.injector import Injector, ScopedInjector

# Domain exports
from autoinject.domain.enums import TypeKind
from autoinject.domain.exceptions import (
    ArgumentError,
    ImplementationMismatch,
    InjectionError,
    InjectorException,
    NotFoundError,
    UnknownTypeError,
    ValidationError,
)
from autoinject.domain.models import ConstructorParameter, InjectorSettings

# Infrastructure exports
from autoinject.infrastructure.cache import InMemoryMetadataCache
from autoinject.infrastructure.proxy import LazyProxy, lazy_proxy
from autoinject.infrastructure.reflection import ReflectionMetadataProvider

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"

__all__ = [
    # Injector
    "Injector",
    "ScopedInjector",
    "InjectorSettings",
    # Collaborators
    "ReflectionMetadataProvider",
    "InMemoryMetadataCache",
    "ConstructorParameter",
    "LazyProxy",
    "lazy_proxy",
    # Enums
    "TypeKind",
    # Exceptions
    "InjectorException",
    "ArgumentError",
    "ValidationError",
    "NotFoundError",
    "UnknownTypeError",
    "InjectionError",
    "ImplementationMismatch",
]
