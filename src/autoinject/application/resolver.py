import logging
from typing import Any, List, Mapping, Optional, Type

from autoinject.application.registry import Registry
from autoinject.domain import (
    ConstructorParameter,
    IMetadataProvider,
    ImplementationMismatch,
    InjectionError,
    TypeName,
    UnknownTypeError,
    display_name,
    type_key,
)

logger = logging.getLogger(__name__)


class Resolver:
    """Builds object graphs from constructor metadata and registry overrides.

    For every ``make()`` call the registry is consulted in a fixed order:
    cached shared instance, delegate, then construction driven by the
    effective injection definition, optionally wrapped by a proxy factory.

    Attributes:
        _registry: Overrides consulted during resolution.
        _metadata: Constructor and type introspection backend.
        _owner: Object handed to prepare callbacks; the resolver itself by default.
    """

    def __init__(self, registry: Registry, metadata: IMetadataProvider, owner: Optional[Any] = None) -> None:
        self._registry = registry
        self._metadata = metadata
        self._owner = owner if owner is not None else self

    def make(self, dependency_type: TypeName, custom_definition: Optional[Mapping[str, Any]] = None) -> Any:
        """Provision an instance of a type with its whole dependency graph.

        Args:
            dependency_type: The type to provision.
            custom_definition: One-shot definition used instead of the stored one.

        Returns:
            The provisioned instance, or the placeholder returned by a proxy factory.

        Raises:
            InjectionError: If any node of the graph cannot be provisioned.
            ImplementationMismatch: If a bound implementation is not a subtype.
            ValidationError: If ``custom_definition`` is malformed.

        Example:
            >>> resolver.make(UserService)
            >>> resolver.make(Mailer, {":host": "smtp.example.com"})
        """
        shared = self._registry.find_shared(dependency_type)
        if shared is not None:
            return shared

        delegate = self._registry.find_delegate(dependency_type)
        if delegate is not None:
            instance = self._make_delegated(dependency_type, delegate)
        else:
            if custom_definition is not None:
                self._registry.validate_definition(custom_definition)
                definition = custom_definition
            elif self._registry.is_defined(dependency_type):
                definition = self._registry.get_definition(dependency_type)
            else:
                definition = {}

            proxy_factory = self._registry.find_proxy(dependency_type)
            if proxy_factory is not None:
                cls = self._load_class(dependency_type)
                logger.debug("Proxying construction of %s", display_name(dependency_type))
                instance = proxy_factory(cls, lambda: self._build(dependency_type, definition))
            else:
                instance = self._build(dependency_type, definition)

        if self._registry.is_shared(dependency_type):
            self._registry.store_shared(dependency_type, instance)

        return instance

    def _make_delegated(self, dependency_type: TypeName, delegate: Any) -> Any:
        name = display_name(dependency_type)
        cls = self._load_class(dependency_type)
        logger.debug("Delegating construction of %s", name)
        try:
            instance = delegate(cls)
        except Exception as e:
            raise InjectionError(
                f"Delegated function threw an exception while creating {name}",
                type_name=name,
            ) from e

        if not self._metadata.is_instance_of(instance, cls):
            raise InjectionError(
                f"Delegated function did not create an instance of {name}",
                type_name=name,
            )
        return self._prepare(dependency_type, instance)

    def _build(self, dependency_type: TypeName, definition: Mapping[str, Any]) -> Any:
        """Construct an instance eagerly, resolving every constructor argument."""
        params = self._constructor_parameters(dependency_type)

        if not self._metadata.is_instantiable(dependency_type):
            return self._prepare(dependency_type, self._build_non_concrete(dependency_type))

        if not params:
            return self._prepare(dependency_type, self._metadata.instantiate(dependency_type, []))

        args = self._build_arguments(display_name(dependency_type), params, definition)
        return self._prepare(dependency_type, self._metadata.instantiate(dependency_type, args))

    def _build_non_concrete(self, dependency_type: TypeName) -> Any:
        if self._registry.is_implemented(dependency_type):
            return self._build_implementation(dependency_type)

        name = display_name(dependency_type)
        kind = self._metadata.type_kind(dependency_type)
        raise InjectionError(
            f"Cannot instantiate {kind} {name} without an injection definition or implementation",
            type_name=name,
        )

    def _build_implementation(self, abstract_type: TypeName) -> Any:
        concrete_type = self._registry.get_implementation(abstract_type)
        self._load_class(concrete_type)

        if not self._metadata.is_subtype_of(concrete_type, abstract_type):
            abstract_name = display_name(abstract_type)
            concrete_name = display_name(concrete_type)
            raise ImplementationMismatch(
                f"Bad implementation: {concrete_name} does not implement {abstract_name}",
                abstract_type=abstract_name,
                concrete_type=concrete_name,
            )

        logger.debug("Building %s for %s", display_name(concrete_type), display_name(abstract_type))
        return self.make(concrete_type)

    def _build_arguments(
        self, name: str, params: List[ConstructorParameter], definition: Mapping[str, Any]
    ) -> List[Any]:
        """Resolve constructor arguments left to right.

        Failures are re-raised as the same error kind, naming the parameter of
        ``name.__init__`` being resolved; the inner error stays as ``__cause__``.
        """
        args: List[Any] = []
        for position, param in enumerate(params, start=1):
            try:
                args.append(self._build_argument(param, position, definition))
            except ImplementationMismatch as e:
                raise ImplementationMismatch(
                    f"{e.message} in {name}.__init__",
                    abstract_type=e.abstract_type,
                    concrete_type=e.concrete_type,
                    parameter_name=param.name,
                    position=position,
                    constructing=name,
                ) from e
            except InjectionError as e:
                raise InjectionError(
                    f"{e.message} in {name}.__init__",
                    type_name=e.type_name,
                    parameter_name=param.name,
                    position=position,
                    constructing=name,
                ) from e
        return args

    def _build_argument(self, param: ConstructorParameter, position: int, definition: Mapping[str, Any]) -> Any:
        if param.name in definition:
            return self.make(definition[param.name])

        raw_key = self._registry.settings.raw_prefix + param.name
        if raw_key in definition:
            return definition[raw_key]

        found, value = self._registry.find_param_definition(param.name)
        if found:
            return value

        if param.declared_type is not None:
            if self._metadata.is_instantiable(param.declared_type):
                return self.make(param.declared_type)
            return self._build_non_concrete_param(param, position)

        if param.has_default:
            return param.default

        if self._registry.settings.strict_parameters:
            raise InjectionError(
                f"No definition, type annotation or default value for parameter "
                f"'{param.name}' at argument {position}",
                parameter_name=param.name,
                position=position,
            )
        return None

    def _build_non_concrete_param(self, param: ConstructorParameter, position: int) -> Any:
        declared_type = param.declared_type
        if self._registry.find_shared(declared_type) is not None or self._registry.is_delegated(declared_type):
            return self.make(declared_type)

        if self._registry.is_implemented(declared_type):
            try:
                return self._build_implementation(declared_type)
            except ImplementationMismatch as e:
                raise ImplementationMismatch(
                    "Bad implementation definition encountered while attempting to provision "
                    f"non-concrete parameter '{param.name}' of type {declared_type} at argument {position}",
                    abstract_type=e.abstract_type,
                    concrete_type=e.concrete_type,
                    parameter_name=param.name,
                    position=position,
                ) from e

        raise InjectionError(
            "Injection definition/implementation required for non-concrete constructor "
            f"parameter '{param.name}' of type {declared_type} at argument {position}",
            type_name=declared_type,
            parameter_name=param.name,
            position=position,
        )

    def _prepare(self, dependency_type: TypeName, instance: Any) -> Any:
        callback = self._registry.find_prepare(dependency_type)
        if callback is not None:
            callback(instance, self._owner)
        return instance

    def _load_class(self, dependency_type: TypeName) -> Type:
        try:
            return self._metadata.get_class(dependency_type)
        except UnknownTypeError as e:
            raise _unknown_type(dependency_type) from e

    def _constructor_parameters(self, dependency_type: TypeName) -> List[ConstructorParameter]:
        try:
            return self._metadata.get_constructor_parameters(dependency_type)
        except UnknownTypeError as e:
            name = display_name(dependency_type)
            if type_key(e.type_name) == type_key(dependency_type):
                raise _unknown_type(dependency_type) from e
            raise InjectionError(f"Cannot read the constructor of {name}: {e}", type_name=name) from e


def _unknown_type(dependency_type: TypeName) -> InjectionError:
    name = display_name(dependency_type)
    return InjectionError(
        f"Instantiation failure: {name} doesn't exist and could not be imported",
        type_name=name,
    )

