"""Shared BDD fixtures and step definitions for the marketplace core."""

import pytest
from pytest_bdd import given, parsers, then


@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps — Orders
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a "{status}" order'), target_fixture="order")
def order_in_status(make_order, status):
    return make_order(status=status)


@given(parsers.cfparse('a "{status}" order held by rider "{rider_id}"'), target_fixture="order")
def order_held_by_rider(make_order, status, rider_id):
    return make_order(status=status, rider_id=rider_id)


# ---------------------------------------------------------------------------
# Then steps — Orders
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse('the order is held by rider "{rider_id}"'))
def order_is_held_by(order, rider_id):
    assert order.rider_id == rider_id
