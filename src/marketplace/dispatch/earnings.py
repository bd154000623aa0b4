"""Rider earnings for a delivered order: the delivery fee plus a share of the service fee."""

from marketplace.checkout.pricing import round_half_up, to_decimal

DEFAULT_SERVICE_FEE_SHARE = 0.1


def rider_earnings(delivery_fee, service_fee, service_fee_share=DEFAULT_SERVICE_FEE_SHARE) -> int:
    return round_half_up(to_decimal(delivery_fee) + to_decimal(service_fee) * to_decimal(service_fee_share))
