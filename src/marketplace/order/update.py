"""Conditional (compare-and-swap) writes for order records.

Concurrent requests against one order are only safe when the write is
conditional on what was read: "set status to X only if status is still Y".
A ``ConditionalUpdate`` carries both halves so the persistence layer can
render it as ``UPDATE orders SET ... WHERE id = ? AND status = ? [AND
rider_id ...]`` and treat zero affected rows as a lost race.
"""

from collections.abc import Mapping

from protean.fields import Boolean, DateTime, String

from marketplace.domain import marketplace
from marketplace.order.snapshot import advance
from marketplace.order.status import OrderStatus


@marketplace.value_object
class ConditionalUpdate:
    order_id = String(required=True, max_length=255)

    # Expected stored values
    expected_status = String(required=True, choices=OrderStatus)
    expected_rider_id = String(max_length=255)
    require_unassigned = Boolean(default=False)

    # New values
    status = String(required=True, choices=OrderStatus)
    rider_id = String(max_length=255)
    updated_at = DateTime(required=True)

    def as_filter(self) -> dict:
        """Column values the stored record must still have.

        ``rider_id: None`` means the column must be NULL.
        """
        conditions = {"id": self.order_id, "status": self.expected_status}
        if self.require_unassigned:
            conditions["rider_id"] = None
        elif self.expected_rider_id:
            conditions["rider_id"] = self.expected_rider_id
        return conditions

    def as_changes(self) -> dict:
        changes = {"status": self.status, "updated_at": self.updated_at}
        if self.rider_id:
            changes["rider_id"] = self.rider_id
        return changes

    def matches(self, record) -> bool:
        """Whether a stored record (mapping or snapshot) still satisfies ``as_filter``."""
        for column, expected in self.as_filter().items():
            if isinstance(record, Mapping):
                actual = record.get(column)
            else:
                actual = getattr(record, "order_id" if column == "id" else column, None)
            if not actual and expected is None:
                continue
            if str(getattr(actual, "value", actual)) != str(expected):
                return False
        return True


def transition_update(order, requested, now=None):
    """Describe the conditional write that moves ``order`` to ``requested``.

    Returns ``None`` for a same-state request (nothing to write). Invalid
    requests raise like ``transition``, and a request whose result would not
    be a valid snapshot raises ``ValidationError``: moving to preparing needs a
    rider, so it goes through ``claim_update`` instead.
    """
    updated = advance(order, requested, now=now)
    if updated is order:
        return None
    return ConditionalUpdate(
        order_id=order.order_id,
        expected_status=order.status,
        expected_rider_id=order.rider_id or None,
        status=updated.status,
        updated_at=updated.updated_at,
    )
