"""
Metadata cache module.

Provides the in-memory store used to memoize type introspection.
"""

from .memory import InMemoryMetadataCache

__all__ = [
    "InMemoryMetadataCache",
]
