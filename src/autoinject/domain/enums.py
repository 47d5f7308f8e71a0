from enum import Enum


class TypeKind(str, Enum):
    """Describes how a type can be provisioned by the injector.

    Attributes:
        CONCRETE: A class that can be instantiated directly.
        INTERFACE: A ``typing.Protocol``; needs an implementation binding.
        ABSTRACT: An abstract base class; needs an implementation binding.
    """

    CONCRETE = "class"
    INTERFACE = "interface"
    ABSTRACT = "abstract"

    def __str__(self) -> str:
        return self.value
