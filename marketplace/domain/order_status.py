from enum import Enum

from marketplace.domain.errors import InvalidTransition


# pending -> shipped -> delivered, cancelled z pending albo shipped
class OrderStatus(str, Enum):
    PENDING = "pending"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.SHIPPED, OrderStatus.CANCELLED}),
    OrderStatus.SHIPPED: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def is_terminal(status: OrderStatus) -> bool:
    return not TRANSITIONS[status]


def next_status(current: str, requested: str) -> OrderStatus:
    """
    Validates a status change and returns the target status.

    Raises InvalidTransition for unknown labels, for moves out of a terminal
    state and for any move not listed in TRANSITIONS.
    """
    try:
        source = OrderStatus(current)
        target = OrderStatus(requested)
    except ValueError:
        raise InvalidTransition(current, requested, "unknown order status")

    if is_terminal(source):
        raise InvalidTransition(current, requested, f"order is already {source.value}")

    if target not in TRANSITIONS[source]:
        raise InvalidTransition(current, requested)

    return target
