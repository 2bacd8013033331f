import inspect
from typing import Any

from msgmapper.core.helpers.cache import ConcurrentCache
from msgmapper.core.helpers.naming import full_name
from msgmapper.core.helpers.types import classify, declared_properties, origin_class, zero_value
from msgmapper.core.mapping.registry import TypeRegistry
from msgmapper.core.mapping.synthesizer import resolve_diamonds
from msgmapper.core.models.descriptor import PropertyDescriptor, TypeKind

_MISSING = object()


class InstanceFactory:
    """
    Creates message instances for deserialization.

    Interfaces and abstract classes are swapped for their mapped concrete
    type. The parameterless constructor recorded at discovery is used when
    there is one; otherwise the object is allocated with `__new__`,
    `__init__` never runs, and every declared field without a class-level
    default is set to the zero value of its type.
    """

    def __init__(self, registry: TypeRegistry) -> None:
        self._registry = registry
        self._kinds: ConcurrentCache[Any, TypeKind] = ConcurrentCache()

    def kind_of(self, tp: Any) -> TypeKind:
        descriptor = self._registry.descriptor_for(tp)
        if descriptor is not None:
            return descriptor.kind
        return self._kinds.get_or_add(tp, classify)

    def create(self, tp: Any) -> Any:
        mapped = tp
        if self.kind_of(tp) in (TypeKind.interface, TypeKind.abstract):
            mapped = self._registry.resolve_concrete(tp)
            if mapped is None:
                raise ValueError(f"Could not find a concrete type mapped to {self._display(tp)}")

        constructor = self._registry.constructor_for(mapped)
        if constructor is not None:
            return constructor()

        cls = origin_class(mapped)
        if cls is None:
            raise TypeError(f"Cannot create an instance of {mapped!r}")

        instance = cls.__new__(cls)
        for prop in self._fields_of(mapped):
            member = inspect.getattr_static(cls, prop.name, _MISSING)
            # slots show up as member descriptors on the class and still need a value
            if member is _MISSING or inspect.ismemberdescriptor(member):
                object.__setattr__(instance, prop.name, zero_value(prop.type))
        return instance

    def _fields_of(self, tp: Any) -> tuple[PropertyDescriptor, ...]:
        descriptor = self._registry.descriptor_for(tp)
        if descriptor is not None:
            return descriptor.properties
        kept, _ = resolve_diamonds(declared_properties(tp))
        return tuple(kept)

    @staticmethod
    def _display(tp: Any) -> str:
        return full_name(tp) if isinstance(tp, type) else repr(tp)
