from datetime import UTC, datetime

import pytest
from marketplace.checkout.pricing import FeeConfig
from marketplace.dispatch.assignment import RiderSnapshot
from marketplace.order.snapshot import OrderSnapshot

NOW = datetime(2025, 3, 14, 12, 0, tzinfo=UTC)


@pytest.fixture()
def now():
    return NOW


@pytest.fixture()
def make_order():
    def _make_order(status="confirmed", rider_id=None, **overrides):
        values = {
            "order_id": "ord-001",
            "status": status,
            "total_amount": 2950,
            "vendor_id": "vendor-001",
            "customer_id": "cust-001",
            "rider_id": rider_id,
            "created_at": NOW,
            "updated_at": NOW,
        }
        values.update(overrides)
        return OrderSnapshot(**values)

    return _make_order


@pytest.fixture()
def make_rider():
    def _make_rider(rider_id="rider-001", is_available=True, current_order_statuses=None):
        return RiderSnapshot(
            rider_id=rider_id,
            is_available=is_available,
            current_order_statuses=current_order_statuses or [],
        )

    return _make_rider


@pytest.fixture()
def fee_config():
    return FeeConfig(
        base_service_fee=200,
        per_item_service_fee=50,
        service_fee_cap=500,
        delivery_fee=500,
        vat_rate=0.075,
    )
