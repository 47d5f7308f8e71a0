"""
Application layer - Registration and resolution.

This layer contains the registry of overrides and the resolver that builds
object graphs from them.
It depends on the Domain layer; the default metadata provider is loaded
from the Infrastructure layer on demand.
"""

from .injector import Injector, ScopedInjector
from .registry import Registry
from .resolver import Resolver

__all__ = [
    "Injector",
    "Registry",
    "Resolver",
    "ScopedInjector",
]
