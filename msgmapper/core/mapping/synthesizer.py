import logging
import types
from typing import Annotated, Any, Iterable

from msgmapper.core.helpers.naming import TypeNamer
from msgmapper.core.helpers.types import (
    declared_properties,
    is_visible,
    method_members,
    origin_class,
    zero_value,
)
from msgmapper.core.mapping.metadata import MetadataReplicator
from msgmapper.core.models.descriptor import PropertyDescriptor


class ProxyProperty(property):
    """
    Read/write accessor generated for one interface property.

    The getter and setter only read and write the backing slot. The
    instance keeps what the accessor was generated from so serializers can
    inspect the declared type and the replicated metadata.
    """

    def __init__(self, name: str, field_name: str, declared_type: Any, metadata: tuple[Any, ...]) -> None:
        def fget(instance: Any) -> Any:
            return getattr(instance, field_name)

        def fset(instance: Any, value: Any) -> None:
            setattr(instance, field_name, value)

        fget.__name__ = fset.__name__ = name
        super().__init__(fget, fset, doc=f"{name}: {declared_type!r}")

        self.name = name
        self.field_name = field_name
        self.declared_type = declared_type
        self.metadata = metadata


def resolve_diamonds(
    properties: Iterable[PropertyDescriptor],
) -> tuple[list[PropertyDescriptor], list[PropertyDescriptor]]:
    """
    Keep the first declaration of every property name.

    Returns (kept, dropped). A name reached through several interfaces with
    the same type is the usual diamond; a name re-declared with another type
    is shadowed by the most-derived declaration.
    """
    kept: dict[str, PropertyDescriptor] = {}
    dropped: list[PropertyDescriptor] = []

    for prop in properties:
        if prop.name in kept:
            dropped.append(prop)
        else:
            kept[prop.name] = prop

    return list(kept.values()), dropped


class ProxyTypeSynthesizer:
    """
    Builds a concrete class for a message-shaped interface.

    The generated class:
        - subclasses the interface, so isinstance/issubclass checks hold;
        - has one `__slots__` entry and one read/write ProxyProperty per
          property found anywhere in the interface closure;
        - is callable without arguments, every slot starting at the zero
          value of its declared type;
        - is sealed: subclassing it raises TypeError;
        - is named after the interface's canonical name plus the suffix.

    Interfaces declaring anything else than properties are not synthesized.
    """

    def __init__(
        self,
        namer: TypeNamer,
        replicator: MetadataReplicator | None = None,
        *,
        field_prefix: str = "_field_",
        seal: bool = True,
    ) -> None:
        self._namer = namer
        self._replicator = replicator or MetadataReplicator()
        self._field_prefix = field_prefix
        self._seal = seal
        self._logger = logging.getLogger("core.mapping.synthesizer")

    def properties_of(self, interface: Any) -> list[PropertyDescriptor]:
        kept, dropped = resolve_diamonds(declared_properties(interface))

        by_name = {prop.name: prop for prop in kept}
        for prop in dropped:
            winner = by_name[prop.name]
            if winner.type != prop.type:
                self._logger.debug(
                    f"{self._name(interface)}.{prop.name}: {winner.type!r} declared on "
                    f"{winner.declared_on.__qualname__} shadows {prop.type!r} declared on "
                    f"{prop.declared_on.__qualname__}"
                )

        return kept

    def synthesize(self, interface: Any, properties: list[PropertyDescriptor] | None = None) -> type | None:
        name = self._name(interface)

        if not is_visible(interface):
            raise RuntimeError(
                f"We can only generate a concrete implementation for '{name}' if '{name}' is public."
            )

        methods = method_members(interface)
        if methods:
            self._logger.warning(
                f"Interface {name} contains methods ({', '.join(methods)}) and can therefore not be "
                f"mapped. Be aware that a non mapped interface can't be used to send messages."
            )
            return None

        if properties is None:
            properties = self.properties_of(interface)
        simple_name = self._namer.friendly_name(interface) + self._namer.suffix
        namespace = self._build_namespace(interface, simple_name, properties)

        proxy = types.new_class(
            simple_name,
            (interface,),
            exec_body=lambda ns: ns.update(namespace),
        )
        self._logger.debug(f"Generated {proxy.__module__}.{proxy.__qualname__} with {len(properties)} properties")
        return proxy

    def _name(self, interface: Any) -> str:
        return self._namer.canonical_name(interface)

    def _build_namespace(
        self,
        interface: Any,
        simple_name: str,
        properties: list[PropertyDescriptor],
    ) -> dict[str, Any]:
        cls = origin_class(interface)
        parent, _, _ = cls.__qualname__.rpartition(".")
        qualname = f"{parent}.{simple_name}" if parent else simple_name

        slots: list[str] = []
        zeros: list[tuple[str, Any]] = []
        accessors: list[tuple[str, str]] = []
        annotations: dict[str, Any] = {}
        namespace: dict[str, Any] = {}

        for prop in properties:
            field_name = self._field_prefix + prop.name
            metadata = self._replicator.metadata_for(interface, prop)

            namespace[prop.name] = ProxyProperty(prop.name, field_name, prop.type, metadata)
            annotations[prop.name] = Annotated[(prop.type, *metadata)] if metadata else prop.type
            slots.append(field_name)
            zeros.append((field_name, zero_value(prop.type)))
            accessors.append((prop.name, field_name))

        def __init__(self) -> None:
            for field_name, value in zeros:
                setattr(self, field_name, value)

        def __repr__(self) -> str:
            values = ", ".join(f"{n}={getattr(self, f, None)!r}" for n, f in accessors)
            return f"{type(self).__name__}({values})"

        namespace.update(
            __qualname__=qualname,
            __module__=cls.__module__,
            __doc__=f"Generated implementation of {self._name(interface)}.",
            __slots__=tuple(slots),
            __annotations__=annotations,
            __init__=__init__,
            __repr__=__repr__,
        )

        if self._seal:
            def __init_subclass__(subclass: type, **kwargs: Any) -> None:
                raise TypeError(f"{qualname} is sealed and cannot be subclassed")

            namespace["__init_subclass__"] = classmethod(__init_subclass__)

        return namespace
