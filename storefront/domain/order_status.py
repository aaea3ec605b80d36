# storefront/domain/order_status.py
from enum import Enum

from storefront.exceptions import InvalidStatusError


class OrderStatus(str, Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    ON_THE_WAY = "on_the_way"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"

    @classmethod
    def values(cls) -> list[str]:
        return [s.value for s in cls]

    @classmethod
    def parse(cls, value) -> "OrderStatus":
        try:
            return cls(value)
        except ValueError:
            raise InvalidStatusError(value, cls.values())

    @property
    def is_terminal(self) -> bool:
        return self in (OrderStatus.DELIVERED, OrderStatus.CANCELLED)


# fulfilment progression
_PROGRESSION = [
    OrderStatus.PENDING,
    OrderStatus.CONFIRMED,
    OrderStatus.PREPARING,
    OrderStatus.ON_THE_WAY,
    OrderStatus.DELIVERED,
]


def can_transition(current: OrderStatus, new: OrderStatus, forward_only: bool = True) -> bool:
    """
    forward_only=False accepts any recognized status from any other.
    forward_only=True freezes terminal states, always allows cancelling
    and otherwise only lets an order move ahead (skipping steps is fine).
    """
    if not forward_only or current == new:
        return True
    if current.is_terminal:
        return False
    if new == OrderStatus.CANCELLED:
        return True
    return _PROGRESSION.index(new) > _PROGRESSION.index(current)
