"""Tests for rider claims."""

from datetime import UTC, datetime

import pytest
from marketplace.dispatch.assignment import (
    RiderSnapshot,
    apply_claim,
    can_claim,
    claim_update,
    is_assigned_rider,
)
from marketplace.dispatch.earnings import rider_earnings
from marketplace.exceptions import ClaimNotAllowedError
from protean.exceptions import ValidationError


class TestCanClaim:
    def test_available_rider_on_unassigned_confirmed_order(self, make_order, make_rider):
        assert can_claim(make_order(status="confirmed"), make_rider()) is True

    def test_order_already_assigned(self, make_order, make_rider):
        order = make_order(status="confirmed", rider_id="r1")
        assert can_claim(order, make_rider()) is False

    def test_empty_rider_counts_as_unassigned(self, make_order, make_rider):
        assert can_claim(make_order(status="confirmed", rider_id=""), make_rider()) is True

    @pytest.mark.parametrize("status", ["pending", "cancelled"])
    def test_order_not_confirmed(self, make_order, make_rider, status):
        assert can_claim(make_order(status=status), make_rider()) is False

    def test_ready_order_with_rider_is_not_claimable(self, make_order, make_rider):
        assert can_claim(make_order(status="ready", rider_id="r1"), make_rider()) is False

    def test_unavailable_rider(self, make_order, make_rider):
        assert can_claim(make_order(), make_rider(is_available=False)) is False

    @pytest.mark.parametrize("status", ["preparing", "ready", "picked_up"])
    def test_rider_busy_with_another_order(self, make_order, make_rider, status):
        rider = make_rider(current_order_statuses=[status])
        assert can_claim(make_order(), rider) is False

    @pytest.mark.parametrize("status", ["delivered", "cancelled"])
    def test_finished_orders_do_not_block(self, make_order, make_rider, status):
        rider = make_rider(current_order_statuses=[status])
        assert can_claim(make_order(), rider) is True


class TestApplyClaim:
    def test_attaches_rider_and_starts_preparation(self, make_order, make_rider):
        now = datetime(2025, 3, 14, 12, 10, tzinfo=UTC)
        order = make_order(total_amount=2950)

        claimed = apply_claim(order, make_rider(rider_id="rider-042"), now=now)

        assert claimed.rider_id == "rider-042"
        assert claimed.status == "preparing"
        assert claimed.updated_at == now
        assert claimed.total_amount == 2950
        assert order.rider_id is None

    def test_refused_claim_raises(self, make_order, make_rider):
        with pytest.raises(ClaimNotAllowedError) as exc_info:
            apply_claim(make_order(status="pending"), make_rider())
        assert "rider_id" in exc_info.value.messages

    def test_second_claim_on_same_snapshot_lineage_fails(self, make_order, make_rider):
        claimed = apply_claim(make_order(), make_rider(rider_id="rider-001"))
        with pytest.raises(ClaimNotAllowedError):
            apply_claim(claimed, make_rider(rider_id="rider-002"))


class TestClaimUpdate:
    def test_conditional_write(self, make_order, make_rider, now):
        update = claim_update(make_order(), make_rider(rider_id="rider-042"), now=now)

        assert update.as_filter() == {"id": "ord-001", "status": "confirmed", "rider_id": None}
        assert update.as_changes() == {"status": "preparing", "updated_at": now, "rider_id": "rider-042"}

    def test_only_first_of_racing_riders_wins(self, make_order, make_rider, now):
        stored = {"id": "ord-001", "status": "confirmed", "rider_id": None}
        order = make_order()

        # Both riders read the same unassigned order before either writes
        first = claim_update(order, make_rider(rider_id="rider-001"), now=now)
        second = claim_update(order, make_rider(rider_id="rider-002"), now=now)

        winners = []
        for update in (first, second):
            if update.matches(stored):
                stored.update(update.as_changes())
                winners.append(update.rider_id)

        assert winners == ["rider-001"]
        assert stored["rider_id"] == "rider-001"
        assert stored["status"] == "preparing"

    def test_refused_claim_has_no_write(self, make_order, make_rider):
        with pytest.raises(ClaimNotAllowedError):
            claim_update(make_order(), make_rider(is_available=False))


class TestAssignedRider:
    def test_assigned_rider(self, make_order):
        order = make_order(status="ready", rider_id="rider-001")
        assert is_assigned_rider(order, "rider-001") is True
        assert is_assigned_rider(order, "rider-002") is False

    def test_unassigned_order(self, make_order):
        assert is_assigned_rider(make_order(), "rider-001") is False
        assert is_assigned_rider(make_order(rider_id=""), "") is False


class TestRiderSnapshot:
    def test_defaults(self):
        rider = RiderSnapshot(rider_id="rider-001")
        assert rider.is_available is False
        assert rider.has_active_delivery is False

    def test_rider_id_required(self):
        with pytest.raises(ValidationError):
            RiderSnapshot(is_available=True)


class TestEarnings:
    def test_delivery_fee_plus_service_fee_share(self):
        assert rider_earnings(delivery_fee=500, service_fee=300) == 530

    def test_rounds_half_up(self):
        assert rider_earnings(delivery_fee=500, service_fee=255) == 526  # 525.5

    def test_custom_share(self):
        assert rider_earnings(delivery_fee=1000, service_fee=400, service_fee_share=0.25) == 1100
