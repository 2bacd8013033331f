import builtins
import collections.abc
import dataclasses
import importlib
import inspect
import logging
import sys
import types
import typing
from abc import ABC, ABCMeta
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, ClassVar, ForwardRef, Generic, Protocol, TypeVar, get_args, get_origin
from uuid import UUID

from msgmapper.core.models.descriptor import PropertyDescriptor, TypeKind

_logger = logging.getLogger("core.helpers.types")

SIMPLE_TYPES: tuple[type, ...] = (
    str,
    bytes,
    bytearray,
    bool,
    int,
    float,
    complex,
    Decimal,
    UUID,
    datetime,
    date,
    time,
    timedelta,
    type(None),
)
"""
Types a serializer can write as-is. Enumerations are simple as well.
"""

# Bases that carry no message members of their own.
_INTERFACE_ROOTS: tuple[type, ...] = (object, ABC, Generic, Protocol)  # type: ignore[assignment]

_OPAQUE_ORIGINS: tuple[Any, ...] = (
    typing.Literal,
    typing.ClassVar,
    typing.Final,
    collections.abc.Callable,
    type,
)

_PROTOCOL_INIT_PLACEHOLDER = "_no_init_or_replace_init"


def origin_class(tp: Any) -> type | None:
    """
    Return the class behind `tp`: the class itself, or the origin of a
    parameterized alias such as `list[int]` or `Envelope[IBar]`.
    """
    if isinstance(tp, type):
        return tp
    if is_union(tp):
        return None
    origin = get_origin(tp)
    if isinstance(origin, type):
        return origin
    return None


def strip_annotated(tp: Any) -> tuple[Any, tuple[Any, ...]]:
    if get_origin(tp) is Annotated:
        return tp.__origin__, tuple(tp.__metadata__)
    return tp, ()


def is_simple_type(tp: Any) -> bool:
    if not isinstance(tp, type):
        return False
    return tp in SIMPLE_TYPES or issubclass(tp, Enum)


def is_open_generic(tp: Any) -> bool:
    """True when `tp` still has unbound type parameters (`Envelope`, `list[T]`)."""
    return bool(getattr(tp, "__parameters__", ()))


def is_union(tp: Any) -> bool:
    return get_origin(tp) in (typing.Union, types.UnionType)


def is_collection_class(cls: type) -> bool:
    if is_simple_type(cls):
        return False
    if issubclass(cls, collections.abc.Collection):
        return True
    return cls.__module__ == "collections.abc" and issubclass(cls, collections.abc.Iterable)


def is_interface(tp: Any) -> bool:
    """
    A message-shaped interface is either a Protocol class, or an ABC whose
    own members are all abstract and whose bases are interfaces too.

    Dataclasses and classes defining their own __init__ are concrete even
    when they derive from a marker protocol.
    """
    cls = origin_class(tp)
    if cls is None or cls in _INTERFACE_ROOTS:
        return False

    namespace = vars(cls)
    if namespace.get("_is_protocol", False):
        return True

    if not isinstance(cls, ABCMeta):
        return False

    if "__dataclass_fields__" in namespace:
        return False

    init = namespace.get("__init__")
    if init is not None and getattr(init, "__name__", "") != _PROTOCOL_INIT_PLACEHOLDER:
        return False

    for base in cls.__bases__:
        if base not in _INTERFACE_ROOTS and not is_interface(base):
            return False

    for name, member in namespace.items():
        if name.startswith("_"):
            continue
        if not getattr(member, "__isabstractmethod__", False):
            return False

    return True


def interface_bases(tp: Any) -> list[type]:
    """The interface itself followed by every interface it extends, MRO order."""
    cls = origin_class(tp)
    if cls is None:
        return []
    return [klass for klass in cls.__mro__ if klass not in _INTERFACE_ROOTS and is_interface(klass)]


def method_members(tp: Any) -> list[str]:
    """
    Names of members that are not property accessors, across the
    interface closure. Annotation-only attributes are properties.
    """
    methods: list[str] = []
    for klass in interface_bases(tp):
        for name, member in vars(klass).items():
            if name.startswith("_") or isinstance(member, property):
                continue
            if callable(member) or isinstance(member, (staticmethod, classmethod)):
                methods.append(f"{klass.__qualname__}.{name}")
    return methods


def is_visible(tp: Any) -> bool:
    """
    A type is externally visible when it can be reached again by its
    qualified name: not defined in a function body, no private segment.
    """
    cls = origin_class(tp)
    if cls is None:
        return False

    qualname = cls.__qualname__
    if "<locals>" in qualname:
        return False

    parts = qualname.split(".")
    if any(part.startswith("_") for part in parts):
        return False

    obj: Any = sys.modules.get(cls.__module__)
    for part in parts:
        if obj is None:
            return False
        obj = getattr(obj, part, None)

    return obj is cls


def classify(tp: Any) -> TypeKind:
    tp, _ = strip_annotated(tp)

    if tp is None:
        return TypeKind.simple

    if tp is Any or tp is object or isinstance(tp, (TypeVar, str, ForwardRef)):
        return TypeKind.opaque

    if is_union(tp):
        return TypeKind.union

    origin = get_origin(tp)
    if origin is not None:
        if origin in _OPAQUE_ORIGINS or not isinstance(origin, type):
            return TypeKind.opaque
        cls = origin
    elif isinstance(tp, type):
        cls = tp
    else:
        return TypeKind.opaque

    if is_simple_type(cls):
        return TypeKind.simple
    if is_open_generic(tp):
        return TypeKind.open_generic
    if is_collection_class(cls):
        return TypeKind.collection
    if is_interface(cls):
        return TypeKind.interface
    if inspect.isabstract(cls):
        return TypeKind.abstract
    return TypeKind.concrete


def substitute(tp: Any, env: dict[Any, Any]) -> Any:
    """Replace type parameters in `tp` by the arguments bound in `env`."""
    if not env:
        return tp
    if isinstance(tp, TypeVar):
        return env.get(tp, tp)

    params = getattr(tp, "__parameters__", ())
    if params and not isinstance(tp, type):
        try:
            return tp[tuple(env.get(p, p) for p in params)]
        except TypeError:
            return tp
    return tp


def generic_bindings(tp: Any) -> dict[type, dict[Any, Any]]:
    """
    Map every generic class in the hierarchy of `tp` to the arguments its
    type parameters are bound to, following `__orig_bases__`.
    """
    cls = origin_class(tp)
    if cls is None:
        return {}

    root: dict[Any, Any] = {}
    if not isinstance(tp, type):
        root = dict(zip(getattr(cls, "__parameters__", ()), get_args(tp)))

    envs: dict[type, dict[Any, Any]] = {cls: root}

    def visit(klass: type, env: dict[Any, Any]) -> None:
        for base in vars(klass).get("__orig_bases__", ()):
            base_origin = get_origin(base)
            if not isinstance(base_origin, type) or base_origin in _INTERFACE_ROOTS:
                continue
            if base_origin in envs:
                continue
            params = getattr(base_origin, "__parameters__", ())
            args = tuple(substitute(arg, env) for arg in get_args(base))
            local = dict(zip(params, args))
            envs[base_origin] = local
            visit(base_origin, local)

    visit(cls, root)
    return envs


def _own_annotations(obj: Any) -> dict[str, Any]:
    try:
        return inspect.get_annotations(obj, eval_str=True)
    except NameError as ex:
        # names only importable under TYPE_CHECKING; keep them as strings
        _logger.debug(f"Unresolved annotation on {obj!r}: {ex}")
        return inspect.get_annotations(obj)


def _is_class_var(declared: Any) -> bool:
    if declared is ClassVar or get_origin(declared) is ClassVar:
        return True
    return isinstance(declared, str) and declared.startswith(("ClassVar", "typing.ClassVar"))


def _describe(name: str, declared: Any, env: dict[Any, Any], owner: type) -> PropertyDescriptor:
    base, metadata = strip_annotated(substitute(declared, env))
    return PropertyDescriptor(name=name, type=base, metadata=metadata, declared_on=owner)


def declared_properties(tp: Any) -> list[PropertyDescriptor]:
    """
    Public fields and properties of `tp` and all its bases, most-derived
    first. Names may repeat when several classes declare them; callers
    decide which declaration wins.
    """
    cls = origin_class(tp)
    if cls is None:
        return []

    envs = generic_bindings(tp)
    found: list[PropertyDescriptor] = []

    for klass in cls.__mro__:
        if klass in _INTERFACE_ROOTS:
            continue
        env = envs.get(klass, {})

        for name, declared in _own_annotations(klass).items():
            if name.startswith("_") or _is_class_var(declared):
                continue
            found.append(_describe(name, declared, env, klass))

        for name, member in vars(klass).items():
            if name.startswith("_") or not isinstance(member, property) or member.fget is None:
                continue
            declared = _own_annotations(member.fget).get("return", Any)
            found.append(_describe(name, declared, env, klass))

    return found


def collection_arguments(tp: Any) -> list[Any]:
    """
    Element types of a collection: its own type arguments plus the
    arguments of every generic base it derives from, minus itself.
    """
    cls = origin_class(tp)
    args: list[Any] = list(get_args(tp)) if get_origin(tp) is not None else []

    if cls is not None:
        for klass in cls.__mro__:
            for base in vars(klass).get("__orig_bases__", ()):
                args.extend(get_args(base))

    return [arg for arg in args if arg is not Ellipsis and arg is not tp and arg is not cls]


def default_constructor(tp: Any) -> Any | None:
    """
    Return something callable with no arguments that builds `tp`, or None
    when every way of calling it needs arguments.
    """
    cls = origin_class(tp)
    if cls is None or inspect.isabstract(cls):
        return None

    try:
        signature = inspect.signature(cls)
    except (TypeError, ValueError):
        return None

    for param in signature.parameters.values():
        if param.kind in (param.VAR_POSITIONAL, param.VAR_KEYWORD):
            continue
        if param.default is param.empty:
            return None

    return tp


def zero_value(tp: Any) -> Any:
    """
    Language-default value for a declared type: 0-like for numbers, the
    first member for enumerations, else None.
    """
    tp, _ = strip_annotated(tp)
    if isinstance(tp, type) and issubclass(tp, Enum):
        return next(iter(tp), None)
    if tp in (bool, int, float, complex, Decimal):
        return tp()
    if tp is UUID:
        return UUID(int=0)
    if tp is timedelta:
        return timedelta(0)
    if tp in (datetime, date, time):
        return tp.min
    return None


def is_frozen_dataclass(obj: Any) -> bool:
    params = getattr(type(obj), "__dataclass_params__", None)
    return dataclasses.is_dataclass(obj) and bool(params and params.frozen)


def locate_type(name: str) -> type | None:
    """
    Resolve a dotted name (`package.module.Outer.Inner`) by importing the
    longest importable module prefix and walking the remaining attributes.
    Returns None when nothing matches.
    """
    parts = name.split(".")

    for i in range(len(parts) - 1, 0, -1):
        module_name = ".".join(parts[:i])
        try:
            obj: Any = importlib.import_module(module_name)
        except (ImportError, ValueError, TypeError):
            # not a module name, e.g. a relative or empty prefix
            continue
        except Exception as ex:
            _logger.debug(f"Importing {module_name} while resolving {name} failed: {ex!r}")
            continue

        for attr in parts[i:]:
            obj = getattr(obj, attr, None)
            if obj is None:
                break

        if isinstance(obj, type):
            return obj

    obj = getattr(builtins, name, None)
    return obj if isinstance(obj, type) else None
