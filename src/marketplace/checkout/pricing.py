"""Checkout pricing: the price breakdown of a cart at checkout time.

All money is integer amounts in the currency's smallest accounted unit.
Line prices may carry fractions; they are multiplied out with ``Decimal`` and
the subtotal is rounded half-up once, after all multiplications, so per-line
rounding never compounds. VAT is rounded half-up from the rounded subtotal.

    subtotal    = round(Σ unit_price × quantity)
    service_fee = min(base + per_item × item_count, cap)
    vat         = round(subtotal × vat_rate)
    total       = subtotal + service_fee + vat + delivery_fee - discount
"""

from decimal import ROUND_HALF_UP, Decimal

from protean.fields import Float, Integer, String

from marketplace.cart.lines import partition_by_vendor
from marketplace.domain import marketplace
from marketplace.exceptions import EmptyCartError


@marketplace.value_object
class FeeConfig:
    """Platform fee policy, read-only at checkout.

    Defaults are the marketplace's published rates: a 200 base service fee
    plus 50 per item capped at 500, a flat 500 delivery fee and 7.5% VAT.
    """

    base_service_fee = Integer(default=200, min_value=0)
    per_item_service_fee = Integer(default=50, min_value=0)
    service_fee_cap = Integer(default=500, min_value=0)
    delivery_fee = Integer(default=500, min_value=0)
    vat_rate = Float(default=0.075, min_value=0.0, max_value=1.0)


@marketplace.value_object
class Totals:
    item_count = Integer(required=True, min_value=1)
    subtotal = Integer(required=True, min_value=0)
    service_fee = Integer(required=True, min_value=0)
    vat = Integer(required=True, min_value=0)
    delivery_fee = Integer(required=True, min_value=0)
    discount = Integer(default=0, min_value=0)
    total = Integer(required=True, min_value=0)
    vendor_id = String(max_length=255)


def to_decimal(value) -> Decimal:
    """Exact decimal form of an int, float or numeric string (floats via ``str``)."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def round_half_up(value) -> int:
    return int(to_decimal(value).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def service_fee_for(item_count, fee_config) -> int:
    return min(
        fee_config.base_service_fee + fee_config.per_item_service_fee * item_count,
        fee_config.service_fee_cap,
    )


def compute(lines, fee_config, vendor_id=None) -> Totals:
    """Derive the price breakdown for one order's cart lines.

    ``lines`` must belong to a single order (one vendor); partition
    multi-vendor carts first or use ``compute_per_vendor``.

    Raises:
        EmptyCartError: ``lines`` is empty.
    """
    lines = list(lines)
    if not lines:
        raise EmptyCartError()

    item_count = sum(line.quantity for line in lines)
    subtotal = round_half_up(sum((to_decimal(line.unit_price) * line.quantity for line in lines), Decimal(0)))
    service_fee = service_fee_for(item_count, fee_config)
    vat = round_half_up(Decimal(subtotal) * to_decimal(fee_config.vat_rate))
    delivery_fee = fee_config.delivery_fee

    return Totals(
        item_count=item_count,
        subtotal=subtotal,
        service_fee=service_fee,
        vat=vat,
        delivery_fee=delivery_fee,
        total=subtotal + service_fee + vat + delivery_fee,
        vendor_id=vendor_id,
    )


def compute_per_vendor(lines, fee_config) -> dict:
    """Price each vendor's share of a cart as its own order.

    Every vendor sub-cart carries its own service fee and delivery fee, since
    each becomes a separate order delivered separately.
    """
    return {
        vendor_id: compute(vendor_lines, fee_config, vendor_id=vendor_id)
        for vendor_id, vendor_lines in partition_by_vendor(lines).items()
    }
