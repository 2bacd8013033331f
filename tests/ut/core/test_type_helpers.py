from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any, Callable, Literal, Optional
from uuid import UUID

import pytest

from msgmapper.core.helpers.types import (
    classify,
    collection_arguments,
    declared_properties,
    default_constructor,
    generic_bindings,
    is_interface,
    is_open_generic,
    is_visible,
    locate_type,
    method_members,
    substitute,
    zero_value,
)
from msgmapper.core.models.descriptor import TypeKind
from msgmapper.core.models.markers import IMessage
from tests.fake.messages import (
    T,
    BaseEvent,
    Currency,
    Envelope,
    IBar,
    ICalculator,
    IDocument,
    IMyMessage,
    IOrder,
    IOrderLine,
    IProduct,
    IShipment,
    IWrapper,
    Money,
    OrderLines,
    OrderShipped,
    Receipt,
    WireName,
    _IHidden,
)


@pytest.mark.ut
@pytest.mark.parametrize(
    "tp, kind",
    [
        (int, TypeKind.simple),
        (str, TypeKind.simple),
        (Decimal, TypeKind.simple),
        (Currency, TypeKind.simple),
        (None, TypeKind.simple),
        (Annotated[int, "doc"], TypeKind.simple),
        (Any, TypeKind.opaque),
        (object, TypeKind.opaque),
        (T, TypeKind.opaque),
        (Literal["a", "b"], TypeKind.opaque),
        (Callable[[int], int], TypeKind.opaque),
        (int | None, TypeKind.union),
        (Optional[IOrder], TypeKind.union),
        (list[int], TypeKind.collection),
        (dict[str, IOrder], TypeKind.collection),
        (OrderLines, TypeKind.collection),
        (Envelope, TypeKind.open_generic),
        (IWrapper, TypeKind.open_generic),
        (Envelope[IOrderLine], TypeKind.concrete),
        (IWrapper[IBar], TypeKind.interface),
        (IOrder, TypeKind.interface),
        (IShipment, TypeKind.interface),
        (BaseEvent, TypeKind.abstract),
        (Money, TypeKind.concrete),
        (OrderShipped, TypeKind.concrete),
    ],
)
def test_classify(tp, kind):
    assert classify(tp) is kind


@pytest.mark.ut
def test_is_interface_rejects_dataclass_deriving_from_marker():
    assert is_interface(IOrder)
    assert is_interface(IMessage)
    assert not is_interface(OrderShipped)
    assert not is_interface(Money)
    assert not is_interface(BaseEvent)


@pytest.mark.ut
def test_is_open_generic():
    assert is_open_generic(Envelope)
    assert is_open_generic(list[T])
    assert not is_open_generic(Envelope[int])
    assert not is_open_generic(IOrder)


@pytest.mark.ut
def test_method_members_lists_non_property_members():
    assert method_members(ICalculator) == ["ICalculator.compute"]
    assert method_members(IOrder) == []
    assert method_members(IShipment) == []


@pytest.mark.ut
def test_is_visible():
    class ILocal(IMessage):
        value: int

    assert is_visible(IOrder)
    assert is_visible(IWrapper[IBar])
    assert not is_visible(_IHidden)
    assert not is_visible(ILocal)
    assert not is_visible(int | None)


@pytest.mark.ut
def test_declared_properties_most_derived_first():
    props = declared_properties(IDocument)

    assert [p.name for p in props] == ["title", "version", "created_at"]
    assert props[2].type is datetime
    assert props[2].declared_on.__name__ == "IAudited"


@pytest.mark.ut
def test_declared_properties_keep_diamond_duplicates():
    props = declared_properties(IProduct)

    assert [p.name for p in props] == ["price", "name", "name"]


@pytest.mark.ut
def test_declared_properties_strip_annotated_metadata():
    sku = declared_properties(IOrderLine)[0]

    assert sku.name == "sku"
    assert sku.type is str
    assert sku.metadata == (WireName("sku", required=True),)


@pytest.mark.ut
def test_declared_properties_of_abstract_properties():
    props = {p.name: p for p in declared_properties(IShipment)}

    assert props["tracking"].type is str
    assert props["weight"].type is float
    assert props["weight"].metadata == (WireName("w"),)


@pytest.mark.ut
def test_declared_properties_substitute_bound_parameters():
    original = declared_properties(IMyMessage)[0]
    bound = declared_properties(IWrapper[IOrderLine])[0]

    assert original.name == "original"
    assert original.type is IBar
    assert bound.type is IOrderLine


@pytest.mark.ut
def test_generic_bindings_follow_orig_bases():
    envs = generic_bindings(IMyMessage)

    assert envs[IMyMessage] == {}
    assert envs[IWrapper] == {T: IBar}


@pytest.mark.ut
def test_substitute():
    assert substitute(T, {T: int}) is int
    assert substitute(list[T], {T: int}) == list[int]
    assert substitute(list[T], {}) == list[T]
    assert substitute(str, {T: int}) is str


@pytest.mark.ut
def test_collection_arguments():
    assert collection_arguments(dict[str, IProduct]) == [str, IProduct]
    assert collection_arguments(list[int]) == [int]
    assert collection_arguments(OrderLines) == [IOrderLine]
    assert collection_arguments(tuple[int, ...]) == [int]


@pytest.mark.ut
def test_default_constructor():
    assert default_constructor(Receipt) is Receipt
    assert default_constructor(Envelope[IOrderLine]) == Envelope[IOrderLine]
    assert default_constructor(Money) is None
    assert default_constructor(BaseEvent) is None


@pytest.mark.ut
@pytest.mark.parametrize(
    "tp, expected",
    [
        (int, 0),
        (bool, False),
        (float, 0.0),
        (Decimal, Decimal(0)),
        (UUID, UUID(int=0)),
        (Annotated[int, "doc"], 0),
        (Currency, Currency.EUR),
        (Annotated[Currency, "doc"], Currency.EUR),
        (str, None),
        (IOrder, None),
        (int | None, None),
    ],
)
def test_zero_value(tp, expected):
    assert zero_value(tp) == expected


@pytest.mark.ut
def test_zero_value_of_datetime_is_min():
    assert zero_value(datetime) == datetime.min


@pytest.mark.ut
def test_locate_type():
    assert locate_type("decimal.Decimal") is Decimal
    assert locate_type("tests.fake.messages.IOrder") is IOrder
    assert locate_type("int") is int
    assert locate_type("no.such.Type") is None
    assert locate_type("tests.fake.messages.T") is None
