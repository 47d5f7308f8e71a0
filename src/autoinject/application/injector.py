from collections import ChainMap
from typing import Any, Dict, Iterable, Mapping, Optional, Type, TypeVar, overload

from autoinject.application.registry import Registry
from autoinject.application.resolver import Resolver
from autoinject.domain import IInjector, IMetadataProvider, InjectorSettings, TypeName, type_key

T = TypeVar("T")


class Injector(Registry, IInjector):
    """Main dependency injector.

    Combines the registry of overrides with the resolver that builds object
    graphs from constructor metadata. Everything not overridden is auto-wired
    from type hints.

    Attributes:
        _metadata: Constructor and type introspection backend.
        _resolver: Component building instances for ``make()``.

    Example:
        >>> injector = Injector()
        >>> injector.implement(Transport, SmtpTransport)
        >>> injector.share(Settings)
        >>> mailer = injector.make(Mailer)
    """

    def __init__(
        self,
        metadata: Optional[IMetadataProvider] = None,
        settings: Optional[InjectorSettings] = None,
    ) -> None:
        """Initialize the injector with empty registry tables.

        Args:
            metadata: Optional introspection backend; defaults to a
                ``ReflectionMetadataProvider`` with an in-memory cache.
            settings: Optional configuration; defaults to ``InjectorSettings()``.
        """
        super().__init__(settings)
        if metadata is None:
            from autoinject.infrastructure.reflection import ReflectionMetadataProvider

            metadata = ReflectionMetadataProvider()
        self._metadata: IMetadataProvider = metadata
        self._resolver = Resolver(self, metadata, owner=self)

    @property
    def metadata(self) -> IMetadataProvider:
        return self._metadata

    @overload
    def make(self, dependency_type: Type[T], custom_definition: Optional[Mapping[str, Any]] = None) -> T: ...

    @overload
    def make(self, dependency_type: str, custom_definition: Optional[Mapping[str, Any]] = None) -> Any: ...

    def make(self, dependency_type: Any, custom_definition: Optional[Mapping[str, Any]] = None) -> Any:
        """Provision an instance of a type with its whole dependency graph.

        Args:
            dependency_type: A class or its dotted name.
            custom_definition: One-shot definition used instead of the stored one.

        Returns:
            The provisioned instance.

        Raises:
            InjectionError: If the dependency graph cannot be built.
            ImplementationMismatch: If a bound implementation is not a subtype.

        Example:
            >>> app = injector.make(App)
            >>> client = injector.make("app.http.Client", {":timeout": 5})
        """
        return self._resolver.make(dependency_type, custom_definition)

    def create_scope(self, *scoped_types: TypeName) -> "ScopedInjector":
        """Create a child injector with its own instances of ``scoped_types``.

        Example:
            >>> scope = injector.create_scope(RequestContext)
            >>> scope.make(RequestContext) is scope.make(RequestContext)
            True
            >>> scope.make(RequestContext) is injector.create_scope(RequestContext).make(RequestContext)
            False
        """
        return ScopedInjector(self, scoped_types)


class ScopedInjector(Injector):
    """Child injector that shares selected types per scope.

    Registrations are copied from the parent when the scope is created. Scoped
    types, and types shared on the scope itself, are built once per scope.
    Every other shared type is read from and stored in the parent, so its
    instance is the same for the parent and all of its scopes.

    Attributes:
        _parent: The injector the scope was created from.
        _scoped: Shared instances owned by this scope.
    """

    def __init__(self, parent: Injector, scoped_types: Iterable[TypeName] = ()) -> None:
        super().__init__(metadata=parent.metadata, settings=parent.settings)
        self.restore(parent.snapshot())
        self._parent = parent
        self._scoped: Dict[str, Any] = {type_key(t): None for t in scoped_types}
        self._shared = ChainMap(self._scoped, parent._shared)

    @property
    def parent(self) -> Injector:
        return self._parent

    def store_shared(self, dependency_type: TypeName, instance: Any) -> None:
        key = type_key(dependency_type)
        if key in self._scoped:
            self._scoped[key] = instance
        else:
            self._parent.store_shared(dependency_type, instance)
