from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from sportbook.core.errors import InvalidIntervalError
from sportbook.services import pricing


START = datetime(2030, 6, 3, 10, 0, tzinfo=timezone.utc)


def test_duration_in_hours():
    assert pricing.compute_duration_hours("10:00", "12:00") == 2.0
    assert pricing.compute_duration_hours("09:15", "10:45") == 1.5


def test_duration_rejects_end_before_start():
    with pytest.raises(InvalidIntervalError):
        pricing.compute_duration_hours("12:00", "10:00")
    with pytest.raises(InvalidIntervalError):
        pricing.compute_duration_hours("10:00", "10:00")


def test_duration_rolls_over_midnight_when_allowed():
    assert pricing.compute_duration_hours("23:00", "01:00", allow_rollover=True) == 2.0
    assert pricing.interval_minutes("22:30", "00:30", allow_rollover=True) == (1350, 1470)


def test_malformed_time_is_invalid_interval():
    with pytest.raises(InvalidIntervalError):
        pricing.to_minutes("25:99x")


def test_price_is_rounded_to_cents():
    assert pricing.compute_price(2.0, 40.0) == Decimal("80.00")
    assert pricing.compute_price(1.5, 30.0) == Decimal("45.00")
    assert pricing.compute_price(0.5, Decimal("33.33")) == Decimal("16.67")


@pytest.mark.parametrize(
    "hours_before, percentage",
    [
        (25, 100),
        (24.01, 100),
        (24, 50),
        (12, 50),
        (11.99, 0),
        (0, 0),
        (-1, 0),
    ],
)
def test_refund_brackets(hours_before, percentage):
    refund = pricing.compute_refund(START, Decimal("80.00"), START - timedelta(hours=hours_before))

    assert refund.percentage == percentage
    assert refund.amount == (Decimal("80.00") * percentage / 100).quantize(Decimal("0.01"))
    assert refund.eligible is (percentage > 0)


def test_partial_refund_rounds_half_up():
    refund = pricing.compute_refund(START, Decimal("45.25"), START - timedelta(hours=13))

    assert refund.amount == Decimal("22.63")
    assert refund.reason == "Cancelled 12-24 hours before start"
