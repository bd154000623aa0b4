"""Delivery quotes: distance-tiered delivery fee and delivery-time estimate.

    fee = base + min(d, threshold) × near_rate + max(d - threshold, 0) × far_rate

clamped to ``[minimum_fee, maximum_fee]`` and rounded half-up. The time
estimate is food preparation time plus travel time, rounded up to whole
minutes; travel time comes from the routing service's duration when known,
otherwise from the average rider speed.
"""

import math

from protean.fields import Float, Integer

from marketplace.checkout.pricing import FeeConfig, round_half_up, to_decimal
from marketplace.domain import marketplace


@marketplace.value_object
class DeliveryFeeSchedule:
    base_fee = Integer(default=1000, min_value=0)
    minimum_fee = Integer(default=1000, min_value=0)
    maximum_fee = Integer(default=4000, min_value=0)
    near_rate_per_km = Integer(default=150, min_value=0)
    far_rate_per_km = Integer(default=210, min_value=0)
    distance_threshold_km = Float(default=5.0, min_value=0.0)
    average_speed_km_per_min = Float(default=0.5, min_value=0.01)
    preparation_minutes = Integer(default=15, min_value=0)


def delivery_fee_for_distance(distance_km, schedule) -> int:
    if distance_km <= 0:
        return schedule.minimum_fee

    distance = to_decimal(distance_km)
    threshold = to_decimal(schedule.distance_threshold_km)
    near = min(distance, threshold)
    far = max(distance - threshold, 0)

    fee = schedule.base_fee + near * schedule.near_rate_per_km + far * schedule.far_rate_per_km
    return min(max(round_half_up(fee), schedule.minimum_fee), schedule.maximum_fee)


def is_beyond_threshold(distance_km, schedule) -> bool:
    return distance_km > schedule.distance_threshold_km


def estimated_delivery_minutes(distance_km, schedule, route_duration_seconds=None) -> int:
    if distance_km <= 0:
        return schedule.preparation_minutes

    if route_duration_seconds and route_duration_seconds > 0:
        travel_minutes = route_duration_seconds / 60
    else:
        travel_minutes = distance_km / schedule.average_speed_km_per_min

    return math.ceil(schedule.preparation_minutes + travel_minutes)


def fee_config_for_distance(distance_km, fee_config, schedule) -> FeeConfig:
    """A copy of ``fee_config`` whose flat delivery fee is priced by distance."""
    return FeeConfig(
        base_service_fee=fee_config.base_service_fee,
        per_item_service_fee=fee_config.per_item_service_fee,
        service_fee_cap=fee_config.service_fee_cap,
        delivery_fee=delivery_fee_for_distance(distance_km, schedule),
        vat_rate=fee_config.vat_rate,
    )
