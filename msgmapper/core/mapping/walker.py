import logging
from typing import Any, Iterable, get_args

from msgmapper.core.helpers.naming import TypeNamer
from msgmapper.core.helpers.types import (
    classify,
    collection_arguments,
    declared_properties,
    default_constructor,
    strip_annotated,
)
from msgmapper.core.mapping.registry import TypeRegistry
from msgmapper.core.mapping.synthesizer import ProxyTypeSynthesizer, resolve_diamonds
from msgmapper.core.models.descriptor import PropertyDescriptor, TypeDescriptor, TypeKind

_TERMINAL = (TypeKind.simple, TypeKind.open_generic, TypeKind.opaque)


class TypeGraphWalker:
    """
    Discovers every type reachable from a set of message types.

    Walking rules, applied to each visited type:
        1. simple types, open generics and opaque forms (Any, TypeVar,
           Literal, Callable...) stop the walk;
        2. unions and Annotated are transparent, their arguments are visited;
        3. collections are not registered, their element types and the type
           arguments of their generic bases are visited instead;
        4. anything else is registered once under its canonical name. The
           name check is what stops cycles (`parent: "INode"`);
        5. interfaces are handed to the synthesizer, other classes have
           their parameterless constructor recorded;
        6. every public field and property, inherited ones included, is
           visited in turn.
    """

    def __init__(
        self,
        registry: TypeRegistry,
        synthesizer: ProxyTypeSynthesizer,
        namer: TypeNamer,
    ) -> None:
        self._registry = registry
        self._synthesizer = synthesizer
        self._namer = namer
        self._logger = logging.getLogger("core.mapping.walker")

    def discover(self, root_types: Iterable[Any] | None) -> set[TypeDescriptor]:
        found: set[TypeDescriptor] = set()
        for tp in root_types or ():
            self._visit(tp, found)
        return found

    def _visit(self, tp: Any, found: set[TypeDescriptor]) -> None:
        if tp is None:
            return

        tp, _ = strip_annotated(tp)
        kind = classify(tp)

        if kind in _TERMINAL:
            return

        if kind is TypeKind.union:
            for arg in get_args(tp):
                self._visit(arg, found)
            return

        if kind is TypeKind.collection:
            for arg in collection_arguments(tp):
                self._visit(arg, found)
            return

        name = self._namer.canonical_name(tp)

        # already handled this type, prevents infinite recursion
        if self._registry.contains_name(name):
            existing = self._registry.type_for_name(name)
            if existing != tp:
                self._logger.debug(f"{name} already names {existing!r}, skipping {tp!r}")
            return

        self._logger.debug(f"Visiting {name} ({kind})")

        if kind is TypeKind.interface:
            properties = self._synthesizer.properties_of(tp)
            self._map_interface(tp, name, properties)
        else:
            properties, _ = resolve_diamonds(declared_properties(tp))
            self._registry.add_constructor(tp, default_constructor(tp))

        descriptor = TypeDescriptor(type=tp, name=name, kind=kind, properties=tuple(properties))
        self._registry.add_type(name, tp)
        self._registry.add_descriptor(descriptor)
        found.add(descriptor)

        for prop in properties:
            self._visit(prop.type, found)

    def _map_interface(self, interface: Any, name: str, properties: list[PropertyDescriptor]) -> None:
        concrete = self._synthesizer.synthesize(interface, properties)
        if concrete is None:
            return

        self._registry.add_mapping(interface, concrete, name)
        self._registry.add_constructor(concrete, concrete)
        self._registry.add_descriptor(
            TypeDescriptor(
                type=concrete,
                name=name + self._namer.suffix,
                kind=TypeKind.concrete,
                properties=tuple(properties),
            )
        )
