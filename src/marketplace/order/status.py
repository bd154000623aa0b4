"""Order lifecycle state machine.

An order moves through a fixed delivery lifecycle:

    PENDING → CONFIRMED → PREPARING → READY → PICKED_UP → DELIVERED

and can be CANCELLED from any non-terminal state. DELIVERED and CANCELLED
are terminal. Requesting the status an order already has is always accepted
as a no-op so that retried requests are safe.

The functions here only decide. Persisting the outcome (with a conditional
write keyed on the previous status) is the caller's job, see
``marketplace.order.update``.
"""

from datetime import UTC, datetime
from enum import Enum

import structlog
from protean.fields import Boolean, DateTime, String

from marketplace.domain import marketplace
from marketplace.exceptions import InvalidTransitionError, UnknownStateError

logger = structlog.get_logger(__name__)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    PICKED_UP = "picked_up"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class PaymentStatus(Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: frozenset({OrderStatus.CONFIRMED, OrderStatus.CANCELLED}),
    OrderStatus.CONFIRMED: frozenset({OrderStatus.PREPARING, OrderStatus.CANCELLED}),
    OrderStatus.PREPARING: frozenset({OrderStatus.READY, OrderStatus.CANCELLED}),
    OrderStatus.READY: frozenset({OrderStatus.PICKED_UP, OrderStatus.CANCELLED}),
    OrderStatus.PICKED_UP: frozenset({OrderStatus.DELIVERED, OrderStatus.CANCELLED}),
    OrderStatus.DELIVERED: frozenset(),  # Terminal
    OrderStatus.CANCELLED: frozenset(),  # Terminal
}

TERMINAL_STATES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)

# Orders a rider is actively working on
ACTIVE_DELIVERY_STATES = frozenset({OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.PICKED_UP})


@marketplace.value_object
class StatusChange:
    """Outcome of an accepted transition request.

    ``changed`` is False when the request asked for the status the order
    already had; callers should skip the write in that case.
    """

    previous = String(required=True, choices=OrderStatus)
    status = String(required=True, choices=OrderStatus)
    updated_at = DateTime(required=True)
    changed = Boolean(default=True)


def coerce_status(value) -> OrderStatus:
    """Return ``value`` as an ``OrderStatus``, accepting members or their string values."""
    if isinstance(value, OrderStatus):
        return value
    try:
        return OrderStatus(value)
    except ValueError:
        raise UnknownStateError(value) from None


def allowed_transitions(current) -> frozenset:
    """Statuses reachable in one step from ``current`` (excluding the same-state no-op)."""
    return _VALID_TRANSITIONS[coerce_status(current)]


def is_terminal(status) -> bool:
    return coerce_status(status) in TERMINAL_STATES


def can_transition(current, requested) -> bool:
    """Non-raising form of ``transition`` for legal status pairs.

    Unknown status values still raise ``UnknownStateError``.
    """
    current, requested = coerce_status(current), coerce_status(requested)
    return current == requested or requested in _VALID_TRANSITIONS[current]


def transition(current, requested, now=None) -> StatusChange:
    """Validate a status change and return its outcome.

    Raises:
        UnknownStateError: either value is not an order status.
        InvalidTransitionError: ``requested`` is not reachable from ``current``.
    """
    current, requested = coerce_status(current), coerce_status(requested)
    now = now or datetime.now(UTC)

    if current == requested:
        return StatusChange(
            previous=current.value,
            status=requested.value,
            updated_at=now,
            changed=False,
        )

    if requested not in _VALID_TRANSITIONS[current]:
        raise InvalidTransitionError(current, requested)

    logger.debug("Order status transition accepted", previous=current.value, status=requested.value)
    return StatusChange(previous=current.value, status=requested.value, updated_at=now)
