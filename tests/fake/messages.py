from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Generic, Protocol, TypeVar
from uuid import UUID

from msgmapper.core.models.markers import ICommand, IEvent, IMessage
from msgmapper.core.models.pair import KeyValuePair

T = TypeVar("T")


class Currency(Enum):
    EUR = "EUR"
    USD = "USD"


@dataclass(frozen=True)
class WireName:
    name: str
    required: bool = False


class Range:
    def __init__(self, minimum: int, maximum: int = 100) -> None:
        self._minimum = minimum
        self._maximum = maximum
        self.strict = False

    @property
    def minimum(self) -> int:
        return self._minimum


class Strict:
    def __init__(self, code: str) -> None:
        if code is None:
            raise ValueError("code is required")
        self.label = code


STRICT_SCORE = Range(1, 5)
STRICT_SCORE.strict = True


class IOrderLine(IMessage):
    sku: Annotated[str, WireName("sku", required=True)]
    quantity: int
    price: Decimal


class IOrder(ICommand):
    id: UUID
    total: Decimal
    item: IOrderLine


class INode(IMessage):
    name: str
    parent: "INode | None"
    children: "list[INode]"


class INamed(IMessage):
    name: str


class ILabelled(IMessage):
    name: str


class IProduct(INamed, ILabelled):
    price: Decimal


class IAudited(IMessage):
    created_at: datetime


class IVersioned(IAudited):
    version: int


class IDocument(IVersioned):
    title: str


class IRenamed(INamed):
    name: int


class IRated(IEvent):
    score: Annotated[int, STRICT_SCORE]
    comment: Annotated[str, Strict("c")]


class IShipment(ABC):
    @property
    @abstractmethod
    def tracking(self) -> str:
        ...

    @property
    @abstractmethod
    def weight(self) -> Annotated[float, WireName("w")]:
        ...


class ICalculator(IMessage, Protocol):
    value: int

    def compute(self) -> int:
        ...


class _IHidden(IMessage):
    secret: str


class IExposesHidden(IMessage):
    hidden: _IHidden


class IHasOriginal(IMessage, Protocol):
    original: object


class IWrapper(IHasOriginal, Protocol[T]):
    original: T


class IBar(IMessage):
    yeah: str


class IMyMessage(IWrapper[IBar], Protocol):
    pass


class IRelay(IMessage):
    wrapped: IWrapper[IOrderLine]


@dataclass
class Envelope(Generic[T]):
    body: T | None = None
    headers: dict[str, str] = field(default_factory=dict)


class IEnvelopedOrder(IMessage):
    envelope: Envelope[IOrderLine]


class IPriceList(IMessage):
    currency: Currency
    entries: list[KeyValuePair[str, Decimal]]


class OrderLines(list[IOrderLine]):
    pass


class IBatch(IMessage):
    lines: OrderLines
    tags: set[str]
    lookup: dict[str, IProduct]


class Money:
    amount: Decimal
    currency: Currency

    def __init__(self, amount: Decimal, currency: Currency) -> None:
        self.amount = amount
        self.currency = currency


@dataclass
class Receipt:
    number: int = 0
    paid: Money | None = None


class BaseEvent(ABC):
    occurred_at: datetime

    def describe(self) -> str:
        return f"{type(self).__name__} at {self.occurred_at}"

    @abstractmethod
    def kind(self) -> str:
        ...


@dataclass
class OrderShipped(IEvent):
    order_id: UUID | None = None
    receipt: Receipt | None = None
