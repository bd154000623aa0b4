"""Order snapshot: the record the calling application loads, passes in, and persists.

A snapshot is immutable. Every helper that changes an order returns a new
snapshot; ``total_amount`` is fixed at checkout and carried over untouched.
"""

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Integer, String

from marketplace.domain import marketplace
from marketplace.order.status import OrderStatus, PaymentStatus, transition

# Statuses in which an order must have a rider
_RIDER_REQUIRED = frozenset(
    {OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.PICKED_UP, OrderStatus.DELIVERED}
)

_SNAPSHOT_FIELDS = (
    "order_id",
    "status",
    "total_amount",
    "vendor_id",
    "customer_id",
    "rider_id",
    "created_at",
    "updated_at",
    "estimated_delivery_time",
    "payment_status",
)


@marketplace.value_object
class OrderSnapshot:
    """One customer's purchase from one vendor, as last read from storage.

    The rider is attached when work on the order begins (the claim moves a
    confirmed order to preparing) and stays attached through delivery. A
    cancelled order may still name the rider that held it.
    An empty ``rider_id`` counts as no rider.

    A rider on a pending or confirmed record is not rejected here: such a
    record can only come from storage written outside these rules, and
    ``can_claim`` must still be able to refuse it.
    """

    order_id = String(required=True, max_length=255)
    status = String(required=True, choices=OrderStatus)
    total_amount = Integer(required=True, min_value=0)
    vendor_id = String(required=True, max_length=255)
    customer_id = String(required=True, max_length=255)
    rider_id = String(max_length=255)
    created_at = DateTime()
    updated_at = DateTime()
    estimated_delivery_time = DateTime()
    payment_status = String(choices=PaymentStatus, default=PaymentStatus.PENDING.value)

    @invariant.post
    def rider_assignment_matches_status(self):
        try:
            status = OrderStatus(self.status)
        except ValueError:
            return  # reported by the field validation
        if status in _RIDER_REQUIRED and not self.rider_id:
            raise ValidationError({"rider_id": [f"A rider is required once an order is {status.value}"]})

    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_assigned(self) -> bool:
        return bool(self.rider_id)


def evolve(order, **changes):
    """Return a copy of ``order`` with ``changes`` applied."""
    values = {name: getattr(order, name) for name in _SNAPSHOT_FIELDS}
    values.update(changes)
    return OrderSnapshot(**values)


def advance(order, requested, now=None):
    """Apply a status transition to a snapshot.

    Returns ``order`` itself for a same-state request. Raises
    ``InvalidTransitionError`` / ``UnknownStateError`` like ``transition``.
    """
    change = transition(order.status, requested, now=now)
    if not change.changed:
        return order
    return evolve(order, status=change.status, updated_at=change.updated_at)
