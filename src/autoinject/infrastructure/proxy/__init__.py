"""
Proxy module.

Provides lazy value-holder placeholders for ``Injector.proxy()``.
"""

from .lazy import LazyProxy, is_initialized, lazy_proxy

__all__ = [
    "LazyProxy",
    "is_initialized",
    "lazy_proxy",
]
