"""Loyalty points: earning a point per order and redeeming points for a discount.

A customer earns one point per order. Once they hold at least
``points_threshold`` points they may redeem exactly that many for a
percentage off the subtotal of their next order. Fees and VAT are not
discounted.
"""

from decimal import Decimal

from protean.fields import Integer, ValueObject

from marketplace.checkout.pricing import Totals, round_half_up
from marketplace.domain import marketplace


@marketplace.value_object
class LoyaltyPolicy:
    points_per_order = Integer(default=1, min_value=0)
    points_threshold = Integer(default=10, min_value=1)
    discount_percentage = Integer(default=50, min_value=0, max_value=100)


@marketplace.value_object
class Redemption:
    """Checkout totals after an optional points redemption."""

    totals = ValueObject(Totals, required=True)
    points_redeemed = Integer(default=0, min_value=0)


def can_redeem(available_points, policy) -> bool:
    return (available_points or 0) >= policy.points_threshold


def redeem(totals, available_points, policy) -> Redemption:
    """Apply the points discount to ``totals`` if the customer has enough points.

    Without enough points the totals come back unchanged and no points are
    spent.
    """
    if not can_redeem(available_points, policy):
        return Redemption(totals=totals, points_redeemed=0)

    discount = round_half_up(Decimal(totals.subtotal) * policy.discount_percentage / 100)
    discounted = Totals(
        item_count=totals.item_count,
        subtotal=totals.subtotal,
        service_fee=totals.service_fee,
        vat=totals.vat,
        delivery_fee=totals.delivery_fee,
        discount=totals.discount + discount,
        total=totals.total - discount,
        vendor_id=totals.vendor_id,
    )
    return Redemption(totals=discounted, points_redeemed=policy.points_threshold)


def award_points(current_points, policy) -> int:
    """Balance after earning the points for one order."""
    return (current_points or 0) + policy.points_per_order
