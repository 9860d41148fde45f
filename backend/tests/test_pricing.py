from datetime import date
from types import SimpleNamespace

import pytest

from villa_admin.services.pricing import (
    calculate_price,
    calculate_remaining,
    count_nights,
    payment_status_for,
    snapshot_for,
)
from villa_admin.utils.numbers import percentage, round_half_up


def test_tax_and_total_for_three_nights():
    snapshot = calculate_price(villa_price=10000, package_price=2000, nights=3)

    assert snapshot.subtotal == 36000
    assert snapshot.taxes == 6480
    assert snapshot.total == 42480


def test_safari_total_is_taxed_with_the_stay():
    snapshot = calculate_price(villa_price=10000, package_price=0, nights=1, safari_total=5000)

    assert snapshot.subtotal == 15000
    assert snapshot.taxes == 2700
    assert snapshot.total == 17700


def test_snapshot_is_frozen():
    snapshot = calculate_price(villa_price=10000, package_price=0, nights=1)
    with pytest.raises(AttributeError):
        snapshot.total = 0


def test_snapshot_booking_fields():
    villa = SimpleNamespace(name="Glass Cottage", base_price=15000)
    package = SimpleNamespace(name="Breakfast Package", price=500)

    fields = snapshot_for(villa, package, date(2024, 1, 1), date(2024, 1, 3)).as_booking_fields()

    assert fields["villa_name"] == "Glass Cottage"
    assert fields["package_name"] == "Breakfast Package"
    assert fields["subtotal"] == 31000
    assert fields["total_amount"] == 31000 + 5580
    assert "nights" not in fields
    assert "total" not in fields


def test_count_nights_never_negative():
    assert count_nights(date(2024, 1, 5), date(2024, 1, 1)) == 0
    assert count_nights(date(2024, 1, 1), date(2024, 1, 5)) == 4


@pytest.mark.parametrize("total, advance, expected", [
    (42480, 0, 42480),
    (42480, 10000, 32480),
    (42480, 42480, 0),
    (1000, 5000, 0),
])
def test_remaining_amount(total, advance, expected):
    assert calculate_remaining(total, advance) == expected


def test_payment_status_follows_advance():
    assert payment_status_for(1000, 0) == "pending"
    assert payment_status_for(1000, 400) == "advance_paid"
    assert payment_status_for(1000, 1000) == "paid"
    assert payment_status_for(1000, 0, "advance_paid") == "pending"
    assert payment_status_for(1000, 400, "refunded") == "refunded"


def test_round_half_up_matches_calculator_rounding():
    assert round_half_up(2.5) == 3
    assert round_half_up(21.4) == 21
    assert round_half_up(-2.5) == -2
    assert round_half_up(1.005, 1) == 1.0


def test_percentage():
    assert percentage(3, 14) == 21
    assert percentage(1, 0) == 0
