"""
Infrastructure layer - Collaborators and integrations.

This layer contains the reflection-based metadata provider, the metadata
cache, lazy proxies and integrations with external frameworks and tools.
It depends on both Application and Domain layers.
"""

from . import cache, proxy, reflection

__all__ = [
    "cache",
    "proxy",
    "reflection",
]
