from datetime import date, datetime, timedelta

import pytest

from villa_admin.models.booking import BookingActivity, BookingHold
from villa_admin.models.safari import SafariQuery
from villa_admin.models.villa import Villa
from villa_admin.services import booking_service, package_service, safari_service, villa_service
from villa_admin.services.booking_service import check_transition
from villa_admin.utils.errors import (
    DeletionBlockedError,
    InvalidTransitionError,
    NotConfiguredError,
    UnavailableError,
    ValidationFailed,
)

TODAY = date(2030, 1, 1)


def _data(guest, villa_id="hornbill-villa", days_ahead=10, nights=2, **extra):
    check_in = TODAY + timedelta(days=days_ahead)
    data = dict(guest)
    data.update({
        "villa_id": villa_id,
        "package_id": None,
        "check_in": check_in,
        "check_out": check_in + timedelta(days=nights),
        "guests": 2,
    })
    data.update(extra)
    return data


# =================================================
# TRANSITIONS
# =================================================
@pytest.mark.parametrize("current, new", [
    ("pending", "confirmed"),
    ("confirmed", "checked_in"),
    ("checked_in", "checked_out"),
    ("checked_out", "completed"),
    ("confirmed", "pending"),
    ("pending", "pending"),
])
def test_lifecycle_moves_are_allowed(current, new):
    assert check_transition(current, new) is False


@pytest.mark.parametrize("current, new", [
    ("pending", "checked_out"),
    ("completed", "pending"),
    ("cancelled", "confirmed"),
])
def test_unusual_moves_need_force(current, new):
    with pytest.raises(InvalidTransitionError):
        check_transition(current, new)
    assert check_transition(current, new, force=True) is True


# =================================================
# CREATE
# =================================================
def test_create_booking_snapshots_prices(seeded_db, guest):
    data = _data(guest, package_id="breakfast-package")

    booking, warning = booking_service.create_booking(seeded_db, data, today=TODAY)

    assert warning is None
    assert booking.booking_id.startswith("VM")
    assert booking.villa_name == "Hornbill Villa"
    assert booking.subtotal == 2 * (18000 + 500)
    assert booking.taxes == 6660
    assert booking.total_amount == 37000 + 6660
    assert booking.remaining_amount == booking.total_amount
    assert booking.payment_status == "pending"
    assert booking_service.get_booking_unit(seeded_db, booking) is not None


def test_snapshot_survives_price_change(seeded_db, guest):
    booking, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)

    villa_service.update_villa_pricing(seeded_db, "hornbill-villa", 50000)

    assert booking_service.get_booking(seeded_db, booking.booking_id).villa_price == 18000


def test_create_booking_rejects_past_dates_for_guests(seeded_db, guest):
    with pytest.raises(ValidationFailed) as err:
        booking_service.create_booking(seeded_db, _data(guest, days_ahead=-1), today=TODAY)

    assert "past" in err.value.message


def test_admin_can_book_past_dates(seeded_db, guest):
    booking, _ = booking_service.create_booking(
        seeded_db, _data(guest, days_ahead=-3), admin=True, today=TODAY
    )
    assert booking.check_in == TODAY - timedelta(days=3)


def test_stay_longer_than_thirty_days_is_rejected(seeded_db, guest):
    with pytest.raises(ValidationFailed):
        booking_service.create_booking(seeded_db, _data(guest, nights=31), today=TODAY)


def test_guest_count_limited_by_villa(seeded_db, guest):
    with pytest.raises(ValidationFailed):
        booking_service.create_booking(seeded_db, _data(guest, guests=7), today=TODAY)


def test_missing_fields_rejected(seeded_db, guest):
    data = _data(guest)
    data["email"] = ""
    with pytest.raises(ValidationFailed) as err:
        booking_service.create_booking(seeded_db, data, today=TODAY)

    assert err.value.message == "Missing required booking information"


def test_fully_booked_villa_is_unavailable(seeded_db, guest):
    for _ in range(4):
        booking_service.create_booking(seeded_db, _data(guest), today=TODAY)

    with pytest.raises(UnavailableError) as err:
        booking_service.create_booking(seeded_db, _data(guest), today=TODAY)

    assert err.value.message == "Villa is no longer available for selected dates"


def test_inactive_villa_only_bookable_by_admin(seeded_db, guest):
    villa_service.toggle_villa_status(seeded_db, "hornbill-villa")

    with pytest.raises(UnavailableError):
        booking_service.create_booking(seeded_db, _data(guest), today=TODAY)

    booking, _ = booking_service.create_booking(seeded_db, _data(guest), admin=True, today=TODAY)
    assert booking.status == "pending"


def test_advance_sets_payment_status(seeded_db, guest):
    booking, _ = booking_service.create_booking(
        seeded_db, _data(guest, advance_amount=10000), admin=True, today=TODAY
    )

    assert booking.payment_status == "advance_paid"
    assert booking.remaining_amount == booking.total_amount - 10000


def test_advance_above_total_is_rejected(seeded_db, guest):
    with pytest.raises(ValidationFailed):
        booking_service.create_booking(
            seeded_db, _data(guest, advance_amount=10 ** 7), admin=True, today=TODAY
        )


def test_safari_requests_are_priced_and_recorded(seeded_db, guest):
    safari_service.create_safari_option(seeded_db, {"name": "Jeep Safari", "price_per_person": 1500})
    data = _data(guest, safari_requests=[
        {"safari_option_id": "jeep-safari", "number_of_persons": 2},
    ])

    booking, _ = booking_service.create_booking(seeded_db, data, today=TODAY)

    assert booking.safari_total == 3000
    assert booking.subtotal == 2 * 18000 + booking.safari_total
    query = seeded_db.query(SafariQuery).filter(SafariQuery.booking_id == booking.booking_id).one()
    assert query.preferred_date == booking.check_in
    assert query.status == "pending"


def test_booking_clears_session_hold(seeded_db, guest):
    data = _data(guest, session_id="sess-1")
    booking_service.create_booking_hold(
        seeded_db, "sess-1", data["villa_id"], data["check_in"], data["check_out"],
        now=datetime(2030, 1, 1, 9, 0),
    )

    booking_service.create_booking(seeded_db, data, today=TODAY)

    assert seeded_db.query(BookingHold).count() == 0


def test_writes_need_a_database(guest):
    with pytest.raises(NotConfiguredError):
        booking_service.create_booking(None, _data(guest), today=TODAY)


# =================================================
# UPDATE
# =================================================
def test_changing_dates_reprices_and_keeps_remaining_consistent(seeded_db, guest):
    booking, _ = booking_service.create_booking(
        seeded_db, _data(guest, advance_amount=5000), admin=True, today=TODAY
    )

    booking, _ = booking_service.update_booking(
        seeded_db, booking.id, {"check_out": booking.check_in + timedelta(days=4)}
    )

    assert booking.subtotal == 4 * 18000
    assert booking.remaining_amount == max(0, booking.total_amount - booking.advance_amount)


def test_changing_advance_updates_remaining(seeded_db, guest):
    booking, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)

    booking, _ = booking_service.update_booking(seeded_db, booking.booking_id, {"advance_amount": booking.total_amount})

    assert booking.remaining_amount == 0
    assert booking.payment_status == "paid"


def test_confirming_marks_pending_payment_paid(seeded_db, guest):
    booking, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)

    booking, _ = booking_service.update_booking_status(seeded_db, booking.id, "confirmed")

    assert booking.payment_status == "paid"
    assert booking.remaining_amount == 0


def test_confirmed_booking_stays_paid_after_unrelated_edit(seeded_db, guest):
    booking, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)
    booking_service.update_booking_status(seeded_db, booking.id, "confirmed")

    booking, _ = booking_service.update_booking(seeded_db, booking.id, {"admin_notes": "Late arrival"})

    assert booking.payment_status == "paid"
    assert booking.advance_amount == booking.total_amount
    assert booking.remaining_amount == 0


def test_payment_marked_paid_settles_the_advance(seeded_db, guest):
    booking, _ = booking_service.create_booking(
        seeded_db, _data(guest, advance_amount=5000), admin=True, today=TODAY
    )

    booking = booking_service.update_payment_status(seeded_db, booking.id, "paid", payment_id="pay_123")

    assert booking.payment_id == "pay_123"
    assert booking.advance_amount == booking.total_amount
    assert booking.remaining_amount == 0

    booking, _ = booking_service.update_booking(seeded_db, booking.id, {"admin_notes": "Paid at desk"})

    assert booking.payment_status == "paid"
    assert booking.remaining_amount == 0
    assert booking_service.get_booking_stats(seeded_db)["total_revenue"] == booking.total_amount


def test_repricing_a_paid_booking_leaves_the_difference_due(seeded_db, guest):
    booking, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)
    booking = booking_service.update_payment_status(seeded_db, booking.id, "paid")
    paid = booking.total_amount

    booking, _ = booking_service.update_booking(
        seeded_db, booking.id, {"check_out": booking.check_in + timedelta(days=3)}
    )

    assert booking.payment_status == "advance_paid"
    assert booking.remaining_amount == booking.total_amount - paid


def test_refund_status_is_recorded_as_is(seeded_db, guest):
    booking, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)

    booking = booking_service.update_payment_status(seeded_db, booking.id, "refunded")
    booking, _ = booking_service.update_booking(seeded_db, booking.id, {"admin_notes": "Refunded"})

    assert booking.payment_status == "refunded"
    assert booking.remaining_amount == booking.total_amount


def test_invalid_status_change_is_refused_without_force(seeded_db, guest):
    booking, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)

    with pytest.raises(InvalidTransitionError):
        booking_service.update_booking_status(seeded_db, booking.id, "completed")

    booking, _ = booking_service.update_booking_status(seeded_db, booking.id, "completed", force=True)
    assert booking.status == "completed"


def test_cancelling_releases_the_unit(seeded_db, guest):
    booking, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)
    assert booking_service.get_booking_unit(seeded_db, booking) is not None

    booking, _ = booking_service.update_booking_status(seeded_db, booking.id, "cancelled")

    assert booking_service.get_booking_unit(seeded_db, booking) is None


def test_bulk_status_reports_skipped_bookings(seeded_db, guest):
    first, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)
    second, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)
    booking_service.update_booking_status(seeded_db, second.id, "cancelled")

    result = booking_service.bulk_update_booking_status(
        seeded_db, [first.booking_id, second.booking_id, "VM-missing"], "confirmed"
    )

    assert result["updated"] == [first.booking_id]
    assert {s["booking_id"] for s in result["skipped"]} == {second.booking_id, "VM-missing"}


def test_activity_log_records_changes(seeded_db, guest):
    booking, _ = booking_service.create_booking(seeded_db, _data(guest), today=TODAY)
    booking_service.update_booking_status(seeded_db, booking.id, "confirmed", performed_by="ops@resort.com")

    activities = (
        seeded_db.query(BookingActivity)
        .filter(BookingActivity.booking_id == booking.id)
        .order_by(BookingActivity.id)
        .all()
    )

    assert [a.activity_type for a in activities] == ["created", "status_changed"]
    assert activities[1].performed_by == "ops@resort.com"


# =================================================
# DELETION GUARDS
# =================================================
def test_villa_with_bookings_cannot_be_deleted(seeded_db, guest):
    booking_service.create_booking(seeded_db, _data(guest), today=TODAY)

    with pytest.raises(DeletionBlockedError) as err:
        villa_service.delete_villa(seeded_db, "hornbill-villa")

    assert err.value.message.startswith("Cannot delete villa")
    assert seeded_db.query(Villa).filter(Villa.id == "hornbill-villa").first() is not None


def test_package_with_bookings_cannot_be_deleted(seeded_db, guest):
    booking_service.create_booking(seeded_db, _data(guest, package_id="breakfast-package"), today=TODAY)

    with pytest.raises(DeletionBlockedError) as err:
        package_service.delete_package(seeded_db, "breakfast-package")

    assert err.value.message.startswith("Cannot delete package")
    assert package_service.get_package(seeded_db, "breakfast-package") is not None


def test_villa_without_bookings_is_deleted_with_units(seeded_db):
    villa_service.delete_villa(seeded_db, "kingfisher-villa")

    assert seeded_db.query(Villa).filter(Villa.id == "kingfisher-villa").first() is None


# =================================================
# HOLDS
# =================================================
def test_expired_holds_are_cleaned_up(seeded_db):
    now = datetime(2030, 1, 1, 12, 0)
    booking_service.create_booking_hold(
        seeded_db, "sess-a", "glass-cottage", date(2030, 1, 5), date(2030, 1, 6), now=now
    )
    booking_service.create_booking_hold(
        seeded_db, "sess-b", "glass-cottage", date(2030, 1, 5), date(2030, 1, 6), now=now + timedelta(minutes=30)
    )

    removed = booking_service.cleanup_expired_holds(seeded_db, now=now + timedelta(minutes=20))

    assert removed == 1
    assert seeded_db.query(BookingHold).one().session_id == "sess-b"
