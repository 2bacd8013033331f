import re
from typing import Any, TypeVar, get_args, get_origin

from msgmapper.core.helpers.cache import ConcurrentCache
from msgmapper.core.helpers.types import origin_class, is_union
from msgmapper.core.models.pair import KeyValuePair

_NOT_IDENTIFIER = re.compile(r"\W+")


def full_name(cls: type) -> str:
    """`module.Qualified.Name`, or the bare qualname for builtins."""
    module = cls.__module__
    if module is None or module == "builtins":
        return cls.__qualname__
    return f"{module}.{cls.__qualname__}"


def is_key_value_pair(tp: Any) -> bool:
    return get_origin(tp) is KeyValuePair and len(get_args(tp)) == 2


class TypeNamer:
    """
    Computes the names used as wire-format type tags.

    - plain classes use their full name: `orders.messages.IOrder`
    - bound generics are flattened into a separator-free name qualified by
      the origin's module: `orders.messages.EnvelopeOfIOrderLine`
    - bound key/value pairs use the flattened name qualified by the
      key/value namespace instead: `msgmapper.KeyValuePairOfstrAndint`

    Names are memoized. The caches may be filled lazily from several
    threads once the mapper serves traffic.
    """

    def __init__(self, suffix: str = "__impl", key_value_namespace: str = "msgmapper") -> None:
        self._suffix = suffix
        self._key_value_namespace = key_value_namespace
        self._canonical: ConcurrentCache[Any, str] = ConcurrentCache()
        self._friendly: ConcurrentCache[Any, str] = ConcurrentCache()

    @property
    def suffix(self) -> str:
        return self._suffix

    def canonical_name(self, tp: Any) -> str:
        return self._canonical.get_or_add(tp, self._compute_canonical)

    def friendly_name(self, tp: Any) -> str:
        return self._friendly.get_or_add(tp, self._compute_friendly)

    def proxy_name(self, interface: Any) -> str:
        return self.canonical_name(interface) + self._suffix

    def strip_suffix(self, name: str) -> str:
        if name.endswith(self._suffix):
            return name[: -len(self._suffix)]
        return name

    def _compute_canonical(self, tp: Any) -> str:
        if is_key_value_pair(tp):
            return f"{self._key_value_namespace}.{self.friendly_name(tp)}"

        cls = origin_class(tp)
        if cls is not None and get_origin(tp) is not None and get_args(tp):
            module = cls.__module__
            if module is None or module == "builtins":
                return self.friendly_name(tp)
            return f"{module}.{self.friendly_name(tp)}"

        if isinstance(tp, type):
            return full_name(tp)

        return self.friendly_name(tp)

    def _compute_friendly(self, tp: Any) -> str:
        if tp is None or tp is type(None):
            return "None"

        if is_union(tp):
            return "Or".join(self.friendly_name(arg) for arg in get_args(tp))

        cls = origin_class(tp)
        if cls is not None and get_origin(tp) is not None and get_args(tp):
            args = [arg for arg in get_args(tp) if arg is not Ellipsis]
            return cls.__name__ + "Of" + "And".join(self.friendly_name(arg) for arg in args)

        if isinstance(tp, (type, TypeVar)):
            return tp.__name__

        return _NOT_IDENTIFIER.sub("", getattr(tp, "__name__", None) or repr(tp))
