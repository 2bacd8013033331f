import dataclasses
import inspect
import logging
from typing import Any, Mapping, Sequence

from msgmapper.core.helpers.types import is_frozen_dataclass, is_simple_type, zero_value
from msgmapper.core.models.descriptor import PropertyDescriptor

HintTable = Mapping[tuple[Any, str], Sequence[Any]]
"""
Declarative serialization hints: (interface, property name) -> metadata
objects appended verbatim to the generated property.
"""

_SKIP = object()


class MetadataReplicator:
    """
    Carries the `Annotated[...]` metadata of an interface property over to
    the property generated on its proxy.

    Each metadata object is rebuilt rather than shared: its constructor is
    called with arguments guessed from the original's attributes, matched
    case-insensitively by parameter name (public attributes first, then
    private ones), and any writable attribute whose value differs from its
    declared default is copied afterwards. Immutable literals are reused.

    The guessing is best effort. Objects whose constructor cannot be
    introspected are dropped; objects whose constructor rejects the guessed
    arguments are shared with the interface instead. For anything that must
    be exact, pass explicit hints keyed by (interface, property name).
    """

    def __init__(self, hints: HintTable | None = None, enabled: bool = True) -> None:
        self._hints = dict(hints or {})
        self._enabled = enabled
        self._logger = logging.getLogger("core.mapping.metadata")

    def metadata_for(self, interface: Any, prop: PropertyDescriptor) -> tuple[Any, ...]:
        collected: list[Any] = []

        for meta in prop.metadata:
            if not self._enabled:
                collected.append(meta)
                continue
            copy = self.replicate(meta)
            if copy is not _SKIP:
                collected.append(copy)

        collected.extend(self._hints.get((interface, prop.name), ()))
        if prop.declared_on is not None and prop.declared_on is not interface:
            collected.extend(self._hints.get((prop.declared_on, prop.name), ()))

        return tuple(collected)

    def replicate(self, meta: Any) -> Any:
        if meta is None or is_simple_type(type(meta)) or isinstance(meta, (tuple, frozenset)):
            return meta

        cls = type(meta)
        try:
            signature = inspect.signature(cls)
        except (TypeError, ValueError):
            self._logger.debug(f"Metadata {meta!r} has no introspectable constructor, dropped")
            return _SKIP

        args: list[Any] = []
        kwargs: dict[str, Any] = {}

        for param in signature.parameters.values():
            if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
                continue

            found, value = self._lookup(meta, param.name)
            if not found:
                if param.default is not param.empty:
                    if param.kind is param.POSITIONAL_ONLY:
                        args.append(param.default)
                    continue
                value = zero_value(param.annotation)

            if param.kind is param.POSITIONAL_ONLY:
                args.append(value)
            else:
                kwargs[param.name] = value

        try:
            copy = cls(*args, **kwargs)
        except (TypeError, ValueError) as ex:
            self._logger.warning(
                f"Could not rebuild metadata {meta!r} ({ex}), sharing the original instance"
            )
            return meta

        self._copy_writable(meta, copy)
        return copy

    def _lookup(self, meta: Any, name: str) -> tuple[bool, Any]:
        wanted = name.lower()
        names = _attribute_names(meta)

        for attr in sorted(names):
            if not attr.startswith("_") and attr.lower() == wanted:
                try:
                    return True, getattr(meta, attr)
                except AttributeError:
                    break

        for attr in sorted(names):
            if attr.startswith("_") and _unmangle(type(meta), attr).lower() == wanted:
                try:
                    return True, getattr(meta, attr)
                except AttributeError:
                    continue

        return False, None

    def _copy_writable(self, meta: Any, copy: Any) -> None:
        if is_frozen_dataclass(copy):
            return

        cls = type(meta)
        defaults = _declared_defaults(cls)

        for name in sorted(_attribute_names(meta)):
            if name.startswith("_") or not _is_writable(cls, meta, name):
                continue
            try:
                value = getattr(meta, name)
            except AttributeError:
                continue
            if value == defaults.get(name):
                continue
            if getattr(copy, name, _SKIP) == value:
                continue
            try:
                setattr(copy, name, value)
            except AttributeError as ex:
                self._logger.debug(f"Cannot copy {cls.__name__}.{name}: {ex}")


def _slots(klass: type) -> tuple[str, ...]:
    slots = vars(klass).get("__slots__", ())
    if isinstance(slots, str):
        return (slots,)
    return tuple(slots)


def _attribute_names(obj: Any) -> set[str]:
    names: set[str] = set(getattr(obj, "__dict__", {}))

    for klass in type(obj).__mro__:
        names.update(_slots(klass))
        names.update(name for name, member in vars(klass).items() if isinstance(member, property))

    if dataclasses.is_dataclass(obj):
        names.update(f.name for f in dataclasses.fields(obj))

    names.discard("__dict__")
    names.discard("__weakref__")
    return names


def _unmangle(cls: type, name: str) -> str:
    for klass in cls.__mro__:
        prefix = f"_{klass.__name__.lstrip('_')}__"
        if name.startswith(prefix):
            return name[len(prefix):]
    return name.lstrip("_")


def _is_writable(cls: type, obj: Any, name: str) -> bool:
    for klass in cls.__mro__:
        member = vars(klass).get(name)
        if isinstance(member, property):
            return member.fset is not None
    return name in getattr(obj, "__dict__", {}) or any(name in _slots(klass) for klass in cls.__mro__)


def _declared_defaults(cls: type) -> dict[str, Any]:
    defaults: dict[str, Any] = {}

    for klass in reversed(cls.__mro__):
        for name, member in vars(klass).items():
            if name.startswith("_") or isinstance(member, property) or callable(member):
                continue
            if inspect.ismemberdescriptor(member):
                continue
            defaults[name] = member

    if dataclasses.is_dataclass(cls):
        for f in dataclasses.fields(cls):
            if f.default is not dataclasses.MISSING:
                defaults[f.name] = f.default

    return defaults
