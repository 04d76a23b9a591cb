"""
Order lifecycle state machine.

PENDING -> PAID / PROCESSING -> SHIPPED -> DELIVERED, with CANCELLED
reachable from any non-terminal state. Every order starts in PENDING.

The transition table is always available for inspection; it is enforced only
when strict mode is requested (STRICT_STATUS_TRANSITIONS). The permissive
baseline lets an administrator set any status.
"""
from enum import Enum
from typing import Dict, FrozenSet


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    PROCESSING = "PROCESSING"
    SHIPPED = "SHIPPED"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


INITIAL_STATUS = OrderStatus.PENDING

TERMINAL_STATUSES: FrozenSet[OrderStatus] = frozenset({
    OrderStatus.DELIVERED,
    OrderStatus.CANCELLED,
})

# Current status -> statuses it may move to under strict mode
ALLOWED_TRANSITIONS: Dict[OrderStatus, FrozenSet[OrderStatus]] = {
    OrderStatus.PENDING: frozenset({
        OrderStatus.PAID,
        OrderStatus.PROCESSING,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.PAID: frozenset({
        OrderStatus.PROCESSING,
        OrderStatus.SHIPPED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.PROCESSING: frozenset({
        OrderStatus.SHIPPED,
        OrderStatus.CANCELLED,
    }),
    OrderStatus.SHIPPED: frozenset({
        OrderStatus.DELIVERED,
    }),
    OrderStatus.DELIVERED: frozenset(),
    OrderStatus.CANCELLED: frozenset(),
}


def is_terminal(status: OrderStatus) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: OrderStatus, target: OrderStatus, strict: bool = False) -> bool:
    """
    Return True if an administrator may move an order from current to target.

    Setting the same status again is always accepted (it is a no-op).
    """
    if current == target:
        return True
    if not strict:
        return True
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())
