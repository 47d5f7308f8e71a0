from typing import Optional


class InjectorException(Exception):
    """Base exception for injector-related errors."""


class ArgumentError(InjectorException, TypeError):
    """Raised when a registry operation receives a malformed argument.

    This occurs when:
    - A bulk operation is given something that is not an iterable of pairs.
    - A delegate, proxy factory or prepare callback is not callable.
    - ``share()`` is given neither a type name nor an object instance.
    """


class ValidationError(InjectorException, ValueError):
    """Raised when an injection definition is malformed.

    Attributes:
        parameter_name: The definition key holding the invalid value.
    """

    def __init__(self, parameter_name: str, raw_prefix: str = ":") -> None:
        self.parameter_name = parameter_name
        message = (
            f"Invalid injection definition for parameter '{parameter_name}'; raw parameter "
            f"names must be prefixed with '{raw_prefix}' ({raw_prefix}{parameter_name}) to "
            "differentiate them from provisionable type names."
        )
        super().__init__(message)


class NotFoundError(InjectorException, LookupError):
    """Raised when a definition or implementation was never registered."""


class UnknownTypeError(InjectorException, LookupError):
    """Raised by a metadata provider for a type name it cannot load.

    Attributes:
        type_name: The name that could not be loaded.
    """

    def __init__(self, type_name: str, reason: Optional[str] = None) -> None:
        self.type_name = type_name
        message = f"Type {type_name} could not be found"
        if reason:
            message += f": {reason}"
        super().__init__(message)


class InjectionError(InjectorException):
    """Raised when an instance cannot be provisioned.

    This occurs when:
    - The type cannot be loaded by the metadata provider.
    - An interface or abstract type has no implementation binding.
    - A delegate raised or returned an instance of the wrong type.
    - A non-concrete constructor parameter cannot be provisioned.

    Attributes:
        type_name: The type whose provisioning failed.
        parameter_name: The constructor parameter involved, if any.
        position: 1-based argument position of that parameter, if any.
        constructing: The type whose constructor was being built when the
            failure surfaced, if it was re-raised from parameter resolution.
    """

    def __init__(
        self,
        message: str,
        type_name: Optional[str] = None,
        parameter_name: Optional[str] = None,
        position: Optional[int] = None,
        constructing: Optional[str] = None,
    ) -> None:
        self.type_name = type_name
        self.parameter_name = parameter_name
        self.position = position
        self.constructing = constructing
        super().__init__(message)

    @property
    def message(self) -> str:
        return str(self.args[0]) if self.args else ""


class ImplementationMismatch(InjectionError):
    """Raised when a bound implementation is not a subtype of its abstract type.

    Detected lazily, when the binding is used by ``make()``.

    Attributes:
        abstract_type: The interface or abstract type that was bound.
        concrete_type: The type it was bound to.
    """

    def __init__(
        self,
        message: str,
        abstract_type: str,
        concrete_type: str,
        parameter_name: Optional[str] = None,
        position: Optional[int] = None,
        constructing: Optional[str] = None,
    ) -> None:
        self.abstract_type = abstract_type
        self.concrete_type = concrete_type
        super().__init__(
            message,
            type_name=abstract_type,
            parameter_name=parameter_name,
            position=position,
            constructing=constructing,
        )
