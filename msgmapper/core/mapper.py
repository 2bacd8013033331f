import logging
from typing import Any, Callable, Iterable

from msgmapper.core.helpers.cache import ConcurrentCache
from msgmapper.core.helpers.naming import TypeNamer
from msgmapper.core.helpers.types import is_open_generic
from msgmapper.core.mapping.factory import InstanceFactory
from msgmapper.core.mapping.metadata import HintTable, MetadataReplicator
from msgmapper.core.mapping.registry import TypeRegistry
from msgmapper.core.mapping.synthesizer import ProxyTypeSynthesizer
from msgmapper.core.mapping.walker import TypeGraphWalker
from msgmapper.core.models.descriptor import ProxyMapping, TypeDescriptor, TypeKind
from msgmapper.core.ports.mapper import MessageMapperPort


class MessageMapper(MessageMapperPort):
    """
    Maps message interfaces to generated concrete classes.

    The mapper owns its registry: nothing is stored in module globals, so
    several mappers (one per bus instance, one per test) can coexist.

    Lifecycle:
        1. `initialize(message_types)` runs once at startup, single-threaded.
           It walks the type closure, synthesizes proxies and freezes the
           registry.
        2. After that, every other method is a read and may be called from
           any number of threads.
    """

    def __init__(
        self,
        *,
        suffix: str = "__impl",
        field_prefix: str = "_field_",
        key_value_namespace: str = "msgmapper",
        replicate_metadata: bool = True,
        seal_proxies: bool = True,
        import_fallback: bool = True,
        hints: HintTable | None = None,
    ) -> None:
        self._namer = TypeNamer(suffix=suffix, key_value_namespace=key_value_namespace)
        self._registry = TypeRegistry(self._namer, import_fallback=import_fallback)
        self._synthesizer = ProxyTypeSynthesizer(
            self._namer,
            MetadataReplicator(hints, enabled=replicate_metadata),
            field_prefix=field_prefix,
            seal=seal_proxies,
        )
        self._walker = TypeGraphWalker(self._registry, self._synthesizer, self._namer)
        self._factory = InstanceFactory(self._registry)
        self._tags: ConcurrentCache[Any, str] = ConcurrentCache()
        self._logger = logging.getLogger("core.mapper")

    @property
    def registry(self) -> TypeRegistry:
        return self._registry

    @property
    def initialized(self) -> bool:
        return self._registry.frozen

    def initialize(self, message_types: Iterable[Any] | None) -> None:
        if message_types is None:
            return

        roots = list(message_types)
        if not roots:
            return

        if self._registry.frozen:
            raise RuntimeError("MessageMapper is already initialized")

        discovered = self._walker.discover(roots)
        self._registry.freeze()

        self._logger.info(
            f"Initialized from {len(roots)} message types: {len(discovered)} types discovered, "
            f"{len(self._registry.mappings())} proxies generated"
        )

    def create_instance(self, tp: Any, action: Callable[[Any], None] | None = None) -> Any:
        instance = self._factory.create(tp)
        if action is not None:
            action(instance)
        return instance

    def get_mapped_type_for(self, tp_or_name: Any) -> Any | None:
        """
        - a name: the registered type, the proxy suffix being ignored;
        - an interface: its synthesized concrete class, or None;
        - a synthesized class: the interface it implements;
        - an open generic definition: None;
        - any other class: the class itself.
        """
        if isinstance(tp_or_name, str):
            return self._registry.resolve_by_name(tp_or_name)

        tp = tp_or_name
        if self._factory.kind_of(tp) is TypeKind.interface:
            return self._registry.resolve_concrete(tp)

        interface = self._registry.resolve_interface(tp)
        if interface is not None or is_open_generic(tp):
            return interface

        return tp

    def type_name(self, tp: Any) -> str:
        if not self._registry.frozen:
            return self._compute_type_name(tp)
        return self._tags.get_or_add(tp, self._compute_type_name)

    def descriptors(self) -> list[TypeDescriptor]:
        return self._registry.descriptors()

    def mappings(self) -> list[ProxyMapping]:
        return self._registry.mappings()

    def _compute_type_name(self, tp: Any) -> str:
        interface = self._registry.resolve_interface(tp)
        if interface is not None:
            return self._namer.proxy_name(interface)
        return self._namer.canonical_name(tp)
