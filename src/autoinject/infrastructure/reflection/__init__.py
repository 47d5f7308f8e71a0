"""
Reflection module.

Provides the inspect-based metadata provider used by the injector.
"""

from .provider import ReflectionMetadataProvider

__all__ = [
    "ReflectionMetadataProvider",
]
