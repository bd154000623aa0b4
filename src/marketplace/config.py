"""Fee, delivery and loyalty policy read from the domain configuration.

Policies live under the ``[custom]`` table of ``domain.toml``::

    [custom.fees]
    delivery_fee = 500

Keys left out of the file fall back to the value object defaults, and
keyword overrides win over both.
"""

from marketplace.checkout.delivery import DeliveryFeeSchedule
from marketplace.checkout.loyalty import LoyaltyPolicy
from marketplace.checkout.pricing import FeeConfig
from marketplace.domain import marketplace


def _section(name) -> dict:
    custom = marketplace.config.get("custom") or {}
    return dict(custom.get(name) or {})


def fee_config(**overrides) -> FeeConfig:
    return FeeConfig(**{**_section("fees"), **overrides})


def delivery_schedule(**overrides) -> DeliveryFeeSchedule:
    return DeliveryFeeSchedule(**{**_section("delivery"), **overrides})


def loyalty_policy(**overrides) -> LoyaltyPolicy:
    return LoyaltyPolicy(**{**_section("loyalty"), **overrides})
