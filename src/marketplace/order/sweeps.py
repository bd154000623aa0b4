"""Periodic order sweeps: selection of orders a scheduled job should move.

Designed to be triggered by an external scheduler (cron, K8s CronJob). The
sweeps only decide: they return the conditional updates to apply, and each
update fails harmlessly if the order changed in the meantime.

* Overdue preparation: a ``preparing`` order whose estimated delivery time
  has passed is marked ``ready``.
* Stale pending: a ``pending`` order nobody confirmed within ``max_age`` is
  cancelled.
"""

from datetime import timedelta

import structlog

from marketplace.order.status import OrderStatus
from marketplace.order.update import transition_update

logger = structlog.get_logger(__name__)

DEFAULT_PENDING_MAX_AGE = timedelta(minutes=30)


def overdue_preparing(orders, now):
    """Updates moving overdue ``preparing`` orders to ``ready``."""
    updates = [
        transition_update(order, OrderStatus.READY, now=now)
        for order in orders
        if order.status == OrderStatus.PREPARING.value
        and order.estimated_delivery_time is not None
        and order.estimated_delivery_time < now
    ]
    logger.info("Overdue preparation sweep complete", as_of=now.isoformat(), overdue_count=len(updates))
    return updates


def stale_pending(orders, now, max_age=DEFAULT_PENDING_MAX_AGE):
    """Updates cancelling ``pending`` orders created more than ``max_age`` before ``now``."""
    cutoff = now - max_age
    updates = [
        transition_update(order, OrderStatus.CANCELLED, now=now)
        for order in orders
        if order.status == OrderStatus.PENDING.value and order.created_at is not None and order.created_at <= cutoff
    ]
    logger.info(
        "Stale pending sweep complete",
        cutoff=cutoff.isoformat(),
        cancelled_count=len(updates),
    )
    return updates
