"""
Domain layer - Core types and rules.

This layer contains the type-name rules, value objects, error taxonomy and
collaborator interfaces of the injector.
It has no dependencies on other layers.
"""

from .enums import TypeKind
from .exceptions import (
    ArgumentError,
    ImplementationMismatch,
    InjectionError,
    InjectorException,
    NotFoundError,
    UnknownTypeError,
    ValidationError,
)
from .interfaces import IInjector, IMetadataCache, IMetadataProvider
from .models import (
    MISS,
    ConstructorParameter,
    InjectorSettings,
    RegistrySnapshot,
    TypeName,
    display_name,
    is_type_name,
    qualified_name,
    type_key,
)

__all__ = [
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
    # Interfaces
    "IInjector",
    "IMetadataCache",
    "IMetadataProvider",
    # Models
    "MISS",
    "TypeName",
    "ConstructorParameter",
    "InjectorSettings",
    "RegistrySnapshot",
    "display_name",
    "is_type_name",
    "qualified_name",
    "type_key",
]
