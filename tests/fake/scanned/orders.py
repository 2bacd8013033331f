from dataclasses import dataclass
from uuid import UUID

from msgmapper.core.models.markers import ICommand, IEvent


class IPlaceOrder(ICommand):
    order_id: UUID
    quantity: int


@dataclass
class OrderPlaced(IEvent):
    order_id: UUID | None = None


class OrderRepository:
    def get(self, order_id: UUID) -> None:
        return None
