import importlib
import inspect
import logging
from typing import Any, Dict, List, Optional, Type, get_type_hints

from autoinject.domain import (
    MISS,
    ConstructorParameter,
    IMetadataCache,
    IMetadataProvider,
    TypeKind,
    TypeName,
    UnknownTypeError,
    qualified_name,
    type_key,
)
from autoinject.infrastructure.cache import InMemoryMetadataCache

logger = logging.getLogger(__name__)

# Annotations from these modules are treated as "no declared type" so defaults apply.
_UNINJECTABLE_MODULES = frozenset({"builtins", "typing", "typing_extensions", "collections.abc"})


class ReflectionMetadataProvider(IMetadataProvider):
    """Introspects classes with ``inspect`` and ``typing.get_type_hints``.

    Type names are classes or dotted ``module.QualName`` strings. Every class
    the provider sees is remembered in the metadata cache, so classes that
    cannot be imported by path (for example classes defined inside a function)
    still resolve by name once they have been handed over once. Constructor
    parameters are memoized in the same cache.

    Attributes:
        _cache: Store for class lookups (``class.<name>``) and constructor
            parameters (``ctor.<name>``).
    """

    def __init__(self, cache: Optional[IMetadataCache] = None) -> None:
        """Initialize the provider.

        Args:
            cache: Optional metadata cache; defaults to an unbounded in-memory cache.
        """
        self._cache = cache if cache is not None else InMemoryMetadataCache()

    def register(self, *classes: Type) -> None:
        """Make classes resolvable by their dotted name.

        Example:
            >>> provider.register(UserService)
            >>> provider.get_class("app.services.UserService")
        """
        for cls in classes:
            self._remember(cls)

    def get_class(self, type_name: TypeName) -> Type:
        """Load the class for a type name.

        Args:
            type_name: A class or its dotted name (case-insensitive once seen).

        Returns:
            The class object.

        Raises:
            UnknownTypeError: If the name is neither known nor importable.
        """
        if inspect.isclass(type_name):
            self._remember(type_name)
            return type_name

        if not isinstance(type_name, str):
            raise UnknownTypeError(repr(type_name), "not a class or dotted type name")

        cached = self._cache.fetch(f"class.{type_key(type_name)}")
        if cached is not MISS:
            return cached

        cls = self._import(type_name)
        self._remember(cls)
        return cls

    def get_constructor_parameters(self, type_name: TypeName) -> List[ConstructorParameter]:
        """Return the constructor parameters of a type, memoized per class.

        ``*args`` and ``**kwargs`` parameters are not reported.

        Raises:
            UnknownTypeError: If the type cannot be found, or a postponed
                annotation of a parameter without default cannot be resolved.
        """
        cls = self.get_class(type_name)
        key = f"ctor.{type_key(cls)}"

        cached = self._cache.fetch(key)
        if cached is not MISS and cached[0] is cls:
            return list(cached[1])

        params = self._inspect_parameters(cls)
        self._cache.store(key, (cls, params))
        return list(params)

    def is_instantiable(self, type_name: TypeName) -> bool:
        return self.type_kind(type_name) is TypeKind.CONCRETE

    def type_kind(self, type_name: TypeName) -> TypeKind:
        """Classify a type.

        Returns:
            ``INTERFACE`` for ``typing.Protocol`` classes, ``ABSTRACT`` for
            classes with unimplemented abstract methods, ``CONCRETE`` otherwise.
        """
        cls = self.get_class(type_name)
        if cls.__dict__.get("_is_protocol", False):
            return TypeKind.INTERFACE
        if inspect.isabstract(cls):
            return TypeKind.ABSTRACT
        return TypeKind.CONCRETE

    def is_subtype_of(self, type_name: TypeName, parent: TypeName) -> bool:
        cls = self.get_class(type_name)
        parent_cls = self.get_class(parent)
        try:
            return issubclass(cls, parent_cls)
        except TypeError:
            # Protocols without @runtime_checkable only support nominal checks.
            return parent_cls in cls.__mro__

    def is_instance_of(self, instance: Any, type_name: TypeName) -> bool:
        cls = self.get_class(type_name)
        try:
            return isinstance(instance, cls)
        except TypeError:
            return cls in type(instance).__mro__

    def instantiate(self, type_name: TypeName, args: List[Any]) -> Any:
        """Call the constructor with arguments given in parameter order.

        Keyword-only parameters are passed by keyword, all others positionally.
        """
        cls = self.get_class(type_name)
        params = self.get_constructor_parameters(cls)

        positional: List[Any] = []
        keywords: Dict[str, Any] = {}
        for param, value in zip(params, args):
            if param.keyword_only:
                keywords[param.name] = value
            else:
                positional.append(value)

        return cls(*positional, **keywords)

    def _remember(self, cls: Type) -> None:
        key = f"class.{type_key(cls)}"
        if self._cache.fetch(key) is not cls:
            self._cache.store(key, cls)

    def _import(self, type_name: str) -> Type:
        parts = type_name.split(".")
        for split in range(len(parts) - 1, 0, -1):
            module_name = ".".join(parts[:split])
            try:
                target: Any = importlib.import_module(module_name)
            except ImportError:
                continue

            try:
                for attribute in parts[split:]:
                    target = getattr(target, attribute)
            except AttributeError:
                break

            if inspect.isclass(target):
                return target
            raise UnknownTypeError(type_name, f"{type(target).__name__} object is not a class")

        raise UnknownTypeError(type_name, "no such module or attribute")

    def _inspect_parameters(self, cls: Type) -> List[ConstructorParameter]:
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            return []

        try:
            type_hints = get_type_hints(cls.__init__)
        except (NameError, TypeError):
            # One unresolvable name fails the whole call; resolve parameter by parameter.
            type_hints = None

        params: List[ConstructorParameter] = []
        for param_name, param in signature.parameters.items():
            if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
                continue

            has_default = param.default is not inspect.Parameter.empty
            if type_hints is not None:
                annotation = type_hints.get(param_name, param.annotation)
            else:
                annotation = self._resolve_annotation(cls, param_name, param.annotation, has_default)

            params.append(
                ConstructorParameter(
                    name=param_name,
                    declared_type=self._declared_type(annotation),
                    has_default=has_default,
                    default=param.default if has_default else None,
                    keyword_only=param.kind is inspect.Parameter.KEYWORD_ONLY,
                )
            )
        return params

    def _resolve_annotation(self, cls: Type, param_name: str, annotation: Any, has_default: bool) -> Any:
        """Evaluate a single postponed annotation.

        The name is looked up in the globals of the constructor's module, then
        among classes this provider has already seen, relative to the module and
        to the scope the class was defined in.

        Raises:
            UnknownTypeError: If the annotation cannot be resolved and the
                parameter has no default value to fall back to.
        """
        if not isinstance(annotation, str):
            return annotation

        globalns = dict(getattr(cls.__init__, "__globals__", {}))
        try:
            return eval(annotation, globalns, {cls.__name__: cls})
        except (NameError, AttributeError, SyntaxError, TypeError):
            pass

        scope = cls.__qualname__.rpartition(".")[0]
        candidates = [annotation, f"{cls.__module__}.{annotation}"]
        if scope:
            candidates.append(f"{cls.__module__}.{scope}.{annotation}")
        for candidate in candidates:
            cached = self._cache.fetch(f"class.{type_key(candidate)}")
            if cached is not MISS:
                return cached

        if has_default:
            logger.debug(
                "Annotation %r of parameter '%s' of %s is unresolvable; using its default",
                annotation,
                param_name,
                qualified_name(cls),
            )
            return inspect.Parameter.empty

        raise UnknownTypeError(
            annotation,
            f"annotation of parameter '{param_name}' of {qualified_name(cls)} cannot be resolved",
        )

    def _declared_type(self, annotation: Any) -> Optional[str]:
        if annotation is inspect.Parameter.empty or not inspect.isclass(annotation):
            return None
        if annotation.__module__ in _UNINJECTABLE_MODULES:
            return None
        self._remember(annotation)
        return qualified_name(annotation)
