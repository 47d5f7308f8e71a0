import inspect
from typing import Any, Callable, Dict, Optional, Type, Union

from pydantic import BaseModel, ConfigDict, Field

TypeName = Union[str, Type]
"""A class object or its dotted ``module.QualName`` path."""


class _Miss:
    """Sentinel type returned by metadata caches on a miss."""

    _instance: Optional["_Miss"] = None

    def __new__(cls) -> "_Miss":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __bool__(self) -> bool:
        return False

    def __repr__(self) -> str:
        return "MISS"


MISS = _Miss()


def qualified_name(cls: Type) -> str:
    """Return the dotted ``module.QualName`` path of a class."""
    return f"{cls.__module__}.{cls.__qualname__}"


def type_key(type_name: TypeName) -> str:
    """Normalize a type name to the case-insensitive key used by every registry table.

    Args:
        type_name: A class or its dotted name.

    Returns:
        The lower-cased dotted name.
    """
    if inspect.isclass(type_name):
        return qualified_name(type_name).lower()
    return str(type_name).lower()


def display_name(type_name: TypeName) -> str:
    """Return a human-readable name for error messages."""
    if inspect.isclass(type_name):
        return qualified_name(type_name)
    return str(type_name)


def is_type_name(value: Any) -> bool:
    """Check whether a value can be used as a type name."""
    return isinstance(value, str) or inspect.isclass(value)


class ConstructorParameter(BaseModel):
    """Value object describing one constructor parameter.

    Attributes:
        name: The parameter name.
        declared_type: Dotted name of the annotated class, if the parameter has one.
        has_default: Whether the parameter declares a default value.
        default: The default value (``None`` when ``has_default`` is false).
        keyword_only: Whether the argument must be passed by keyword.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    name: str = Field(..., description="The constructor parameter name.")
    declared_type: Optional[str] = Field(default=None, description="Dotted name of the annotated class.")
    has_default: bool = Field(default=False, description="Whether a default value is available.")
    default: Any = Field(default=None, description="The default value, if any.")
    keyword_only: bool = Field(default=False, description="Whether the argument is keyword-only.")


class InjectorSettings(BaseModel):
    """Configuration for an injector instance.

    Attributes:
        raw_prefix: Prefix marking definition keys whose values are injected as-is.
        strict_parameters: Raise instead of passing ``None`` for parameters with
            no definition, no type annotation and no default value.
    """

    model_config = ConfigDict(frozen=True)

    raw_prefix: str = Field(default=":", min_length=1, description="Prefix for raw definition keys.")
    strict_parameters: bool = Field(
        default=False,
        description="Fail on untyped parameters without a default value.",
    )


class RegistrySnapshot(BaseModel):
    """Copy of every registry table, keyed by normalized type name.

    Used to restore a registry after temporary overrides.
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    definitions: Dict[str, Dict[str, Any]] = Field(default_factory=dict)
    implementations: Dict[str, Any] = Field(default_factory=dict)
    shared: Dict[str, Any] = Field(default_factory=dict)
    delegates: Dict[str, Callable[..., Any]] = Field(default_factory=dict)
    proxies: Dict[str, Callable[..., Any]] = Field(default_factory=dict)
    prepares: Dict[str, Callable[..., Any]] = Field(default_factory=dict)
    param_definitions: Dict[str, Any] = Field(default_factory=dict)
