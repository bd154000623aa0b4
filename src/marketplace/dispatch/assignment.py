"""Rider assignment: which rider may take which order.

Invariants:
    * an order is claimed by at most one rider, once, moving from confirmed
      and unassigned to preparing with that rider attached;
    * a rider works on at most one order at a time.

``can_claim`` and ``apply_claim`` define the logical rule. They cannot stop
two riders from claiming the same order at the same moment; that needs the
single conditional write returned by ``claim_update``, where zero affected
rows means another rider got there first.
"""

import structlog
from protean.fields import Boolean, List, String

from marketplace.domain import marketplace
from marketplace.exceptions import ClaimNotAllowedError
from marketplace.order.snapshot import evolve
from marketplace.order.status import ACTIVE_DELIVERY_STATES, OrderStatus, coerce_status, transition
from marketplace.order.update import ConditionalUpdate

logger = structlog.get_logger(__name__)


@marketplace.value_object
class RiderSnapshot:
    rider_id = String(required=True, max_length=255)
    is_available = Boolean(default=False)
    current_order_statuses = List(content_type=String, default=list)

    @property
    def has_active_delivery(self) -> bool:
        return any(coerce_status(status) in ACTIVE_DELIVERY_STATES for status in self.current_order_statuses or [])


def can_claim(order, rider) -> bool:
    """Whether ``rider`` may take ``order``. A refusal means "try another order"."""
    if order.status != OrderStatus.CONFIRMED.value:
        reason = "order_not_confirmed"
    elif order.rider_id:
        reason = "order_already_assigned"
    elif not rider.is_available:
        reason = "rider_unavailable"
    elif rider.has_active_delivery:
        reason = "rider_busy"
    else:
        return True

    logger.debug("Claim refused", order_id=order.order_id, rider_id=rider.rider_id, reason=reason)
    return False


def apply_claim(order, rider, now=None):
    """Attach ``rider`` to ``order`` and start preparation.

    Raises:
        ClaimNotAllowedError: ``can_claim(order, rider)`` is false.
    """
    if not can_claim(order, rider):
        raise ClaimNotAllowedError(order.order_id, rider.rider_id)

    change = transition(order.status, OrderStatus.PREPARING, now=now)
    return evolve(order, status=change.status, rider_id=rider.rider_id, updated_at=change.updated_at)


def claim_update(order, rider, now=None) -> ConditionalUpdate:
    """The conditional write that performs the claim atomically.

    Expects the stored order to still be confirmed with no rider; writes
    preparing and the rider's id.
    """
    claimed = apply_claim(order, rider, now=now)
    return ConditionalUpdate(
        order_id=order.order_id,
        expected_status=OrderStatus.CONFIRMED.value,
        require_unassigned=True,
        status=claimed.status,
        rider_id=claimed.rider_id,
        updated_at=claimed.updated_at,
    )


def is_assigned_rider(order, rider_id) -> bool:
    """Whether ``rider_id`` is the rider driving ``order`` through pickup and delivery."""
    return bool(order.rider_id) and order.rider_id == str(rider_id)
