from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Type, TypeVar

from autoinject.domain.enums import TypeKind
from autoinject.domain.models import ConstructorParameter, TypeName

T = TypeVar("T")


class IMetadataCache(ABC):
    """Abstract key/value store used to memoize type introspection."""

    @abstractmethod
    def fetch(self, key: str) -> Any:
        """Return the stored value, or ``MISS`` when the key is absent.

        Args:
            key: The cache key.
        """

    @abstractmethod
    def store(self, key: str, value: Any) -> None:
        """Store a value under a key, replacing any previous value.

        Args:
            key: The cache key.
            value: The value to memoize.
        """


class IMetadataProvider(ABC):
    """Abstract interface for constructor and type introspection."""

    @abstractmethod
    def get_class(self, type_name: TypeName) -> Type:
        """Load the class for a type name.

        Raises:
            UnknownTypeError: If the type cannot be found.
        """

    @abstractmethod
    def get_constructor_parameters(self, type_name: TypeName) -> List[ConstructorParameter]:
        """Return the constructor parameters of a type in declaration order.

        Raises:
            UnknownTypeError: If the type cannot be found.
        """

    @abstractmethod
    def is_instantiable(self, type_name: TypeName) -> bool:
        """Check whether a type is concrete."""

    @abstractmethod
    def type_kind(self, type_name: TypeName) -> TypeKind:
        """Classify a type as concrete, interface or abstract."""

    @abstractmethod
    def is_subtype_of(self, type_name: TypeName, parent: TypeName) -> bool:
        """Check whether ``type_name`` is ``parent`` or derives from it."""

    @abstractmethod
    def is_instance_of(self, instance: Any, type_name: TypeName) -> bool:
        """Check whether an object is an instance of a type."""

    @abstractmethod
    def instantiate(self, type_name: TypeName, args: List[Any]) -> Any:
        """Create an instance from arguments given in constructor parameter order."""


class IInjector(ABC):
    """Abstract interface for the dependency injector operations."""

    @abstractmethod
    def make(self, dependency_type: TypeName, custom_definition: Optional[Dict[str, Any]] = None) -> Any:
        """Provision an instance of the requested type.

        Args:
            dependency_type: The type to provision.
            custom_definition: One-shot definition overriding any stored one.

        Raises:
            InjectionError: If the dependency graph cannot be built.
        """

    @abstractmethod
    def define(self, dependency_type: TypeName, definition: Dict[str, Any]) -> None:
        """Store an injection definition for a type.

        Raises:
            ValidationError: If a non-raw key holds something other than a type name.
        """

    @abstractmethod
    def implement(self, abstract_type: TypeName, concrete_type: TypeName) -> None:
        """Bind an interface or abstract type to a concrete type."""

    @abstractmethod
    def share(self, type_or_instance: Any) -> None:
        """Mark a type as shared, or share a pre-built instance."""

    @abstractmethod
    def delegate(self, dependency_type: TypeName, factory: Callable[[Type], Any]) -> None:
        """Hand construction of a type over to a factory.

        Raises:
            ArgumentError: If the factory is not callable.
        """

    @abstractmethod
    def proxy(self, dependency_type: TypeName, factory: Callable[[Type, Callable[[], Any]], Any]) -> None:
        """Wrap construction of a type in a lazy placeholder factory."""

    @abstractmethod
    def refresh(self, dependency_type: TypeName) -> None:
        """Drop the cached instance of a shared type so it is rebuilt on next use."""

    @abstractmethod
    def create_scope(self, *scoped_types: TypeName) -> "IInjector":
        """Create a child injector holding its own instances of ``scoped_types``.

        Registrations are inherited from this injector; other shared
        instances remain common to the parent and the child.
        """
