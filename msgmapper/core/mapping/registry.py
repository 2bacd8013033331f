import logging
from types import MappingProxyType
from typing import Any, Callable, Mapping

from msgmapper.core.helpers.naming import TypeNamer
from msgmapper.core.helpers.types import is_open_generic, locate_type
from msgmapper.core.models.descriptor import ProxyMapping, TypeDescriptor


class TypeRegistry:
    """
    Lookup tables filled once by the discovery pass.

    - interface -> synthesized concrete type
    - synthesized concrete type -> interface
    - canonical name -> type
    - type -> parameterless constructor (None when the type has none)
    - type -> TypeDescriptor

    Entries are only ever added, never replaced or removed. Both directions
    of a mapping are written together so the interface/concrete relation
    stays a bijection. After `freeze()` the tables are exposed as read-only
    views and further additions raise RuntimeError; reads need no locking.
    """

    def __init__(self, namer: TypeNamer, *, import_fallback: bool = True) -> None:
        self._namer = namer
        self._import_fallback = import_fallback
        self._interface_to_concrete: Mapping[Any, type] = {}
        self._concrete_to_interface: Mapping[type, Any] = {}
        self._name_to_type: Mapping[str, Any] = {}
        self._constructors: Mapping[Any, Callable[[], Any] | None] = {}
        self._descriptors: Mapping[Any, TypeDescriptor] = {}
        self._frozen = False
        self._logger = logging.getLogger("core.mapping.registry")

    @property
    def frozen(self) -> bool:
        return self._frozen

    def freeze(self) -> None:
        if self._frozen:
            return
        self._interface_to_concrete = MappingProxyType(dict(self._interface_to_concrete))
        self._concrete_to_interface = MappingProxyType(dict(self._concrete_to_interface))
        self._name_to_type = MappingProxyType(dict(self._name_to_type))
        self._constructors = MappingProxyType(dict(self._constructors))
        self._descriptors = MappingProxyType(dict(self._descriptors))
        self._frozen = True
        self._logger.debug(
            f"Registry frozen with {len(self._name_to_type)} types "
            f"and {len(self._interface_to_concrete)} proxies"
        )

    def add_mapping(self, interface: Any, concrete: type, name: str) -> ProxyMapping:
        self._ensure_writable()
        if interface in self._interface_to_concrete:
            raise RuntimeError(f"Interface {name} is already mapped to {self._interface_to_concrete[interface]!r}")
        if concrete in self._concrete_to_interface:
            raise RuntimeError(f"{concrete!r} already implements {self._concrete_to_interface[concrete]!r}")

        self._interface_to_concrete[interface] = concrete  # type: ignore[index]
        self._concrete_to_interface[concrete] = interface  # type: ignore[index]
        return ProxyMapping(interface=interface, concrete=concrete, name=name)

    def add_type(self, name: str, tp: Any) -> None:
        self._ensure_writable()
        if name in self._name_to_type:
            raise RuntimeError(f"Type name {name} is already registered for {self._name_to_type[name]!r}")
        self._name_to_type[name] = tp  # type: ignore[index]

    def add_constructor(self, tp: Any, constructor: Callable[[], Any] | None) -> None:
        self._ensure_writable()
        self._constructors[tp] = constructor  # type: ignore[index]

    def add_descriptor(self, descriptor: TypeDescriptor) -> None:
        self._ensure_writable()
        self._descriptors[descriptor.type] = descriptor  # type: ignore[index]

    def contains_name(self, name: str) -> bool:
        return name in self._name_to_type

    def type_for_name(self, name: str) -> Any | None:
        """The type registered under `name`, without suffix stripping or import fallback."""
        return self._name_to_type.get(name)

    def resolve_concrete(self, interface: Any) -> type | None:
        return self._get(self._interface_to_concrete, interface)

    def resolve_interface(self, concrete: Any) -> Any | None:
        if is_open_generic(concrete):
            return None
        return self._get(self._concrete_to_interface, concrete)

    def resolve_by_name(self, name: str) -> Any | None:
        """
        Resolve a type tag. The proxy suffix is stripped first, so a
        synthesized class name resolves to the interface it implements.
        Unknown names fall back to importing the dotted path; a miss
        returns None.
        """
        stripped = self._namer.strip_suffix(name)

        tp = self._name_to_type.get(stripped)
        if tp is not None:
            return tp

        if not self._import_fallback:
            return None

        tp = locate_type(stripped)
        if tp is None:
            self._logger.debug(f"Could not resolve type name {name}")
        return tp

    def constructor_for(self, tp: Any) -> Callable[[], Any] | None:
        return self._get(self._constructors, tp)

    def descriptor_for(self, tp: Any) -> TypeDescriptor | None:
        return self._get(self._descriptors, tp)

    def descriptors(self) -> list[TypeDescriptor]:
        return list(self._descriptors.values())

    def mappings(self) -> list[ProxyMapping]:
        return [
            ProxyMapping(interface=interface, concrete=concrete, name=self._namer.canonical_name(interface))
            for interface, concrete in self._interface_to_concrete.items()
        ]

    def _ensure_writable(self) -> None:
        if self._frozen:
            raise RuntimeError("Type registry is frozen once initialization has completed")

    @staticmethod
    def _get(table: Mapping[Any, Any], key: Any) -> Any | None:
        try:
            return table.get(key)
        except TypeError:
            # unhashable lookups (e.g. Annotated with dict metadata) never match
            return None
