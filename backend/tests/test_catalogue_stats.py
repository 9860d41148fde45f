from datetime import date, timedelta

from villa_admin.services import booking_service, package_service, villa_service
from villa_admin.services.package_service import popularity_score

TODAY = date(2030, 1, 1)
MID_MONTH = date(2030, 1, 15)


def _book(db, guest, villa_id="hornbill-villa", days_ahead=10, nights=2, **extra):
    check_in = TODAY + timedelta(days=days_ahead)
    data = dict(guest)
    data.update({
        "villa_id": villa_id,
        "check_in": check_in,
        "check_out": check_in + timedelta(days=nights),
        "guests": 2,
    })
    data.update(extra)
    booking, _ = booking_service.create_booking(db, data, today=TODAY)
    return booking


# =================================================
# VILLA STATS
# =================================================
def test_villa_stats_monthly_occupancy(seeded_db, guest):
    # 3 nights out of 4 units x 31 days
    _book(seeded_db, guest, nights=3)

    stats = villa_service.get_villa_stats(seeded_db, "hornbill-villa", today=MID_MONTH)

    assert stats["total_bookings"] == 1
    assert stats["occupancy_rate"] == 2.42
    assert stats["total_revenue"] == 0
    assert stats["avg_booking_value"] == 0


def test_villa_stats_revenue_counts_paid_bookings_only(seeded_db, guest):
    paid = _book(seeded_db, guest)
    _book(seeded_db, guest, days_ahead=20)
    booking_service.update_payment_status(seeded_db, paid.id, "paid")

    stats = villa_service.get_villa_stats(seeded_db, "hornbill-villa", today=MID_MONTH)

    assert stats["total_bookings"] == 2
    assert stats["total_revenue"] == 42480
    assert stats["avg_booking_value"] == 42480


def test_cancelled_stays_do_not_count_towards_occupancy(seeded_db, guest):
    booking = _book(seeded_db, guest, nights=3)
    booking_service.update_booking_status(seeded_db, booking.id, "cancelled")

    stats = villa_service.get_villa_stats(seeded_db, "hornbill-villa", today=MID_MONTH)

    assert stats["occupancy_rate"] == 0


# =================================================
# SEASONAL PRICING
# =================================================
def test_price_without_rules_is_base_price(seeded_db):
    assert villa_service.get_villa_price_for_date(seeded_db, "hornbill-villa", date(2030, 12, 25)) == 18000


def test_highest_matching_rule_wins(seeded_db):
    villa_service.create_pricing_rule(seeded_db, {
        "villa_id": None,
        "name": "Year end",
        "start_date": date(2030, 12, 20),
        "end_date": date(2030, 12, 31),
        "price_modifier": 1.2,
    })
    villa_service.create_pricing_rule(seeded_db, {
        "villa_id": "hornbill-villa",
        "name": "Hornbill peak",
        "start_date": date(2030, 12, 24),
        "end_date": date(2030, 12, 26),
        "price_modifier": 1.5,
    })

    assert villa_service.get_villa_price_for_date(seeded_db, "hornbill-villa", date(2030, 12, 25)) == 27000
    assert villa_service.get_villa_price_for_date(seeded_db, "hornbill-villa", date(2030, 12, 21)) == 21600
    assert villa_service.get_villa_price_for_date(seeded_db, "hornbill-villa", date(2030, 12, 19)) == 18000


def test_inactive_rules_are_ignored(seeded_db):
    villa_service.create_pricing_rule(seeded_db, {
        "villa_id": "hornbill-villa",
        "name": "Paused",
        "start_date": date(2030, 6, 1),
        "end_date": date(2030, 6, 30),
        "price_modifier": 2.0,
        "is_active": False,
    })

    assert villa_service.get_villa_price_for_date(seeded_db, "hornbill-villa", date(2030, 6, 10)) == 18000


# =================================================
# PACKAGE STATS
# =================================================
def test_popularity_score():
    assert popularity_score(0) == 0
    assert popularity_score(1) == 72
    assert popularity_score(10) == 90
    assert popularity_score(40) == 95


def test_package_stats_skip_cancelled_bookings(seeded_db, guest):
    _book(seeded_db, guest, package_id="breakfast-package")
    cancelled = _book(seeded_db, guest, days_ahead=20, package_id="breakfast-package")
    booking_service.update_booking_status(seeded_db, cancelled.id, "cancelled")

    stats = package_service.get_package_stats(seeded_db, "breakfast-package")

    assert stats["total_bookings"] == 1
    assert stats["total_revenue"] == 500
    assert stats["popularity"] == 72


def test_package_stats_for_unbooked_package(seeded_db):
    stats = package_service.get_package_stats(seeded_db, "breakfast-package")

    assert stats == {
        "package_id": "breakfast-package",
        "total_bookings": 0,
        "total_revenue": 0.0,
        "popularity": 0,
    }
