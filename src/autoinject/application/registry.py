import logging
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Dict, Iterator, Optional, Tuple

from autoinject.domain import (
    ArgumentError,
    InjectorSettings,
    NotFoundError,
    RegistrySnapshot,
    TypeName,
    ValidationError,
    display_name,
    is_type_name,
    type_key,
)

logger = logging.getLogger(__name__)

# Plain data values cannot be shared: they have no meaningful runtime type to key on.
_UNSHAREABLE = (bool, int, float, complex, bytes, bytearray, list, tuple, dict, set, frozenset)


class Registry:
    """In-memory tables of per-type overrides consulted by the resolver.

    Every table is keyed by the lower-cased dotted type name, so lookups are
    case-insensitive and a class and its dotted name address the same entry.

    Attributes:
        _settings: Injector configuration (raw definition prefix).
        _definitions: Injection definitions per type.
        _implementations: Concrete type bound to each interface or abstract type.
        _shared: Shared types; ``None`` until the instance is first built.
        _delegates: Factories that replace construction.
        _proxies: Lazy placeholder factories wrapping construction.
        _prepares: Callbacks run on freshly built instances.
        _param_definitions: Raw values injected by parameter name for any type.
    """

    def __init__(self, settings: Optional[InjectorSettings] = None) -> None:
        """Initialize the registry with empty tables.

        Args:
            settings: Optional configuration; defaults to ``InjectorSettings()``.
        """
        self._settings = settings or InjectorSettings()
        self._definitions: Dict[str, Dict[str, Any]] = {}
        self._implementations: Dict[str, TypeName] = {}
        self._shared: Dict[str, Any] = {}
        self._delegates: Dict[str, Callable[..., Any]] = {}
        self._proxies: Dict[str, Callable[..., Any]] = {}
        self._prepares: Dict[str, Callable[..., Any]] = {}
        self._param_definitions: Dict[str, Any] = {}

    @property
    def settings(self) -> InjectorSettings:
        return self._settings

    # Definitions

    def validate_definition(self, definition: Mapping) -> None:
        """Check that every non-raw key of a definition maps to a type name.

        Args:
            definition: Mapping of constructor parameter names to values.

        Raises:
            ArgumentError: If the definition is not a mapping.
            ValidationError: If a non-raw key holds something other than a type name.
        """
        if not isinstance(definition, Mapping):
            raise ArgumentError(
                f"An injection definition must be a mapping; {type(definition).__name__} given"
            )
        prefix = self._settings.raw_prefix
        for param_name, value in definition.items():
            if str(param_name).startswith(prefix):
                continue
            if not is_type_name(value):
                raise ValidationError(str(param_name), prefix)

    def define(self, dependency_type: TypeName, definition: Mapping) -> None:
        """Store the injection definition used whenever the type is made.

        Replaces any previous definition for the type.

        Args:
            dependency_type: The type being defined.
            definition: Mapping of parameter names to type names; keys carrying
                the raw prefix (``":name"``) hold literal values instead.

        Raises:
            ValidationError: If a non-raw key holds something other than a type name.

        Example:
            >>> injector.define(Mailer, {"transport": SmtpTransport, ":host": "localhost"})
        """
        self.validate_definition(definition)
        self._definitions[type_key(dependency_type)] = dict(definition)
        logger.debug("Defined %s with parameters %s", display_name(dependency_type), sorted(definition))

    def get_definition(self, dependency_type: TypeName) -> Dict[str, Any]:
        """Return the stored definition for a type.

        Raises:
            NotFoundError: If no definition was stored.
        """
        try:
            return self._definitions[type_key(dependency_type)]
        except KeyError:
            raise NotFoundError(f"No definition specified for {display_name(dependency_type)}") from None

    def is_defined(self, dependency_type: TypeName) -> bool:
        return type_key(dependency_type) in self._definitions

    def define_all(self, definitions: Any) -> int:
        """Store several definitions at once.

        Args:
            definitions: Mapping or iterable of ``(type, definition)`` pairs.

        Returns:
            The number of definitions stored.

        Raises:
            ArgumentError: If ``definitions`` is not a mapping or iterable of pairs.
        """
        added = 0
        for dependency_type, definition in self._pairs(definitions, "define_all"):
            self.define(dependency_type, definition)
            added += 1
        return added

    def clear_definition(self, dependency_type: TypeName) -> None:
        self._definitions.pop(type_key(dependency_type), None)

    def clear_all_definitions(self) -> None:
        self._definitions.clear()

    # Parameter definitions

    def define_param(self, param_name: str, value: Any) -> None:
        """Inject a raw value into every constructor parameter with this name.

        Only applies when the effective definition does not cover the parameter.
        """
        self._param_definitions[param_name] = value

    def is_param_defined(self, param_name: str) -> bool:
        return param_name in self._param_definitions

    def find_param_definition(self, param_name: str) -> Tuple[bool, Any]:
        if param_name in self._param_definitions:
            return True, self._param_definitions[param_name]
        return False, None

    def clear_param_definition(self, param_name: str) -> None:
        self._param_definitions.pop(param_name, None)

    # Implementations

    def implement(self, abstract_type: TypeName, concrete_type: TypeName) -> None:
        """Bind an interface or abstract type to the concrete type that provides it.

        The subtype relationship is checked when the binding is used, not here.

        Raises:
            ArgumentError: If ``concrete_type`` is not a type name.
        """
        if not is_type_name(concrete_type):
            raise ArgumentError(
                f"implement() expects a type name for the implementation of "
                f"{display_name(abstract_type)}; {type(concrete_type).__name__} given"
            )
        self._implementations[type_key(abstract_type)] = concrete_type
        logger.debug("Implemented %s with %s", display_name(abstract_type), display_name(concrete_type))

    def get_implementation(self, abstract_type: TypeName) -> TypeName:
        """Return the concrete type bound to an interface or abstract type.

        Raises:
            NotFoundError: If no implementation is bound.
        """
        try:
            return self._implementations[type_key(abstract_type)]
        except KeyError:
            raise NotFoundError(
                f"The non-concrete type {display_name(abstract_type)} has no assigned implementation"
            ) from None

    def is_implemented(self, abstract_type: TypeName) -> bool:
        return type_key(abstract_type) in self._implementations

    def implement_all(self, implementations: Any) -> int:
        """Bind several implementations at once.

        Args:
            implementations: Mapping or iterable of ``(abstract, concrete)`` pairs.

        Returns:
            The number of bindings stored.

        Raises:
            ArgumentError: If ``implementations`` is not a mapping or iterable of pairs.
        """
        added = 0
        for abstract_type, concrete_type in self._pairs(implementations, "implement_all"):
            self.implement(abstract_type, concrete_type)
            added += 1
        return added

    def clear_implementation(self, abstract_type: TypeName) -> None:
        self._implementations.pop(type_key(abstract_type), None)

    def clear_all_implementations(self) -> None:
        self._implementations.clear()

    # Shared instances

    def share(self, type_or_instance: Any) -> None:
        """Share a type or a pre-built instance.

        A type name marks the type shared: the next instance built for it is
        cached and returned by every later ``make()``. An object instance is
        cached directly under its runtime type.

        Args:
            type_or_instance: A class, a dotted type name or an object instance.

        Raises:
            ArgumentError: For ``None`` and plain data values.
        """
        if is_type_name(type_or_instance):
            self._shared[type_key(type_or_instance)] = None
            logger.debug("Shared %s", display_name(type_or_instance))
        elif type_or_instance is None or isinstance(type_or_instance, _UNSHAREABLE):
            raise ArgumentError(
                "share() requires a type name or an object instance; "
                f"{type(type_or_instance).__name__} given"
            )
        else:
            self._shared[type_key(type(type_or_instance))] = type_or_instance
            logger.debug("Shared instance of %s", display_name(type(type_or_instance)))

    def share_all(self, types_or_instances: Any) -> None:
        """Share every element of an iterable.

        Raises:
            ArgumentError: If the argument is not a non-string iterable.
        """
        if isinstance(types_or_instances, (str, bytes)) or not isinstance(types_or_instances, Iterable):
            raise ArgumentError(
                f"share_all() requires an iterable; {type(types_or_instances).__name__} given"
            )
        for type_or_instance in types_or_instances:
            self.share(type_or_instance)

    def is_shared(self, dependency_type: TypeName) -> bool:
        return type_key(dependency_type) in self._shared

    def find_shared(self, dependency_type: TypeName) -> Optional[Any]:
        """Return the cached shared instance, or ``None`` if none was built yet."""
        return self._shared.get(type_key(dependency_type))

    def store_shared(self, dependency_type: TypeName, instance: Any) -> None:
        """Cache an instance as the shared value of a type, marking it shared."""
        self._shared[type_key(dependency_type)] = instance

    def refresh(self, dependency_type: TypeName) -> None:
        """Drop the cached instance of a shared type so the next ``make()`` rebuilds it."""
        key = type_key(dependency_type)
        if self._shared.get(key) is not None:
            self._shared[key] = None
            logger.debug("Refreshed %s", display_name(dependency_type))

    def unshare(self, dependency_type: TypeName) -> None:
        self._shared.pop(type_key(dependency_type), None)

    # Delegates, proxies and prepares

    def delegate(self, dependency_type: TypeName, factory: Callable[..., Any]) -> None:
        """Replace construction of a type with a factory called with its class.

        Raises:
            ArgumentError: If ``factory`` is not callable.
        """
        self._ensure_callable(factory, "delegate")
        self._delegates[type_key(dependency_type)] = factory
        logger.debug("Delegated %s", display_name(dependency_type))

    def is_delegated(self, dependency_type: TypeName) -> bool:
        return type_key(dependency_type) in self._delegates

    def find_delegate(self, dependency_type: TypeName) -> Optional[Callable[..., Any]]:
        return self._delegates.get(type_key(dependency_type))

    def clear_delegate(self, dependency_type: TypeName) -> None:
        self._delegates.pop(type_key(dependency_type), None)

    def proxy(self, dependency_type: TypeName, factory: Callable[..., Any]) -> None:
        """Wrap construction of a type in a placeholder factory.

        The factory receives the class and a zero-argument callback performing
        the real construction, and returns the object handed to callers.

        Raises:
            ArgumentError: If ``factory`` is not callable.
        """
        self._ensure_callable(factory, "proxy")
        self._proxies[type_key(dependency_type)] = factory
        logger.debug("Proxied %s", display_name(dependency_type))

    def is_proxied(self, dependency_type: TypeName) -> bool:
        return type_key(dependency_type) in self._proxies

    def find_proxy(self, dependency_type: TypeName) -> Optional[Callable[..., Any]]:
        return self._proxies.get(type_key(dependency_type))

    def clear_proxy(self, dependency_type: TypeName) -> None:
        self._proxies.pop(type_key(dependency_type), None)

    def prepare(self, dependency_type: TypeName, callback: Callable[..., Any]) -> None:
        """Run ``callback(instance, injector)`` on every freshly built instance of a type.

        Raises:
            ArgumentError: If ``callback`` is not callable.
        """
        self._ensure_callable(callback, "prepare")
        self._prepares[type_key(dependency_type)] = callback

    def find_prepare(self, dependency_type: TypeName) -> Optional[Callable[..., Any]]:
        return self._prepares.get(type_key(dependency_type))

    def clear_prepare(self, dependency_type: TypeName) -> None:
        self._prepares.pop(type_key(dependency_type), None)

    # Snapshots

    def snapshot(self) -> RegistrySnapshot:
        """Return a copy of every registry table."""
        return RegistrySnapshot(
            definitions={key: dict(value) for key, value in self._definitions.items()},
            implementations=dict(self._implementations),
            shared=dict(self._shared),
            delegates=dict(self._delegates),
            proxies=dict(self._proxies),
            prepares=dict(self._prepares),
            param_definitions=dict(self._param_definitions),
        )

    def restore(self, snapshot: RegistrySnapshot) -> None:
        """Replace every registry table with the contents of a snapshot."""
        self._definitions = {key: dict(value) for key, value in snapshot.definitions.items()}
        self._implementations = dict(snapshot.implementations)
        self._shared = dict(snapshot.shared)
        self._delegates = dict(snapshot.delegates)
        self._proxies = dict(snapshot.proxies)
        self._prepares = dict(snapshot.prepares)
        self._param_definitions = dict(snapshot.param_definitions)

    def clear(self) -> None:
        """Remove every registration and cached instance."""
        self.restore(RegistrySnapshot())

    @staticmethod
    def _ensure_callable(value: Any, operation: str) -> None:
        if not callable(value):
            raise ArgumentError(f"{operation}() expects a callable; {type(value).__name__} given")

    @staticmethod
    def _pairs(entries: Any, operation: str) -> Iterator[Tuple[Any, Any]]:
        if isinstance(entries, Mapping):
            yield from entries.items()
            return
        if isinstance(entries, (str, bytes)) or not isinstance(entries, Iterable):
            raise ArgumentError(
                f"{operation}() expects a mapping or an iterable of pairs; {type(entries).__name__} given"
            )
        for entry in entries:
            try:
                key, value = entry
            except (TypeError, ValueError):
                raise ArgumentError(
                    f"{operation}() expects an iterable of pairs; found {entry!r}"
                ) from None
            yield key, value
