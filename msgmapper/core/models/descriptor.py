from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any


class TypeKind(StrEnum):
    simple = "simple"
    open_generic = "open_generic"
    collection = "collection"
    union = "union"
    opaque = "opaque"
    interface = "interface"
    abstract = "abstract"
    concrete = "concrete"


@dataclass(frozen=True)
class PropertyDescriptor:
    name: str
    """
    Public name of the property, as exposed on instances.
    """

    type: Any
    """
    Declared type with Annotated metadata stripped and class type
    parameters substituted by the arguments bound in the subclass.
    """

    metadata: tuple[Any, ...] = field(default=(), compare=False)
    """
    Annotation objects found in Annotated[...] on the declaration.
    """

    declared_on: type | None = field(default=None, compare=False)
    """
    The class (in MRO order) that declares the property.
    """


@dataclass(frozen=True)
class TypeDescriptor:
    """
    Structural description of a type reached during discovery.

    A descriptor is computed once per type and never mutated. Its `kind`
    is the classification consulted by every later lookup, so callers
    never re-derive "is this an interface / a collection / simple" from
    reflection on the hot path.
    """
    type: Any
    name: str
    kind: TypeKind
    properties: tuple[PropertyDescriptor, ...] = field(default=(), compare=False)

    @property
    def is_simple(self) -> bool:
        return self.kind is TypeKind.simple

    @property
    def is_interface(self) -> bool:
        return self.kind is TypeKind.interface

    @property
    def is_collection(self) -> bool:
        return self.kind is TypeKind.collection

    def property_names(self) -> list[str]:
        return [p.name for p in self.properties]


@dataclass(frozen=True)
class ProxyMapping:
    interface: Any
    """
    The interface (class or bound generic alias) the proxy implements.
    """

    concrete: type
    """
    The synthesized class. Its full name is `name` plus the proxy suffix.
    """

    name: str
    """
    Canonical name of the interface.
    """
