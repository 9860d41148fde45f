from datetime import date, timedelta

import pytest

from villa_admin.models.booking import Booking, BookingUnit
from villa_admin.models.inventory import VillaUnit
from villa_admin.services import booking_service, inventory_service
from villa_admin.services.inventory_service import (
    AvailabilitySummary,
    allocate_unit,
    generate_unit_number,
    ranges_overlap,
)
from villa_admin.services.occupancy_service import occupancy_rate
from villa_admin.utils.errors import DeletionBlockedError, UnavailableError


# =================================================
# PURE HELPERS
# =================================================
def test_overlapping_stays_collide():
    assert ranges_overlap(date(2024, 1, 1), date(2024, 1, 5), date(2024, 1, 4), date(2024, 1, 8))


def test_checkout_day_is_free():
    assert not ranges_overlap(date(2024, 1, 1), date(2024, 1, 5), date(2024, 1, 5), date(2024, 1, 8))


def test_enclosing_stay_collides():
    assert ranges_overlap(date(2024, 1, 3), date(2024, 1, 4), date(2024, 1, 1), date(2024, 1, 8))


def test_available_units_never_negative():
    summary = AvailabilitySummary("hornbill-villa", total_units=4, occupied_units=6)

    assert summary.available_units == 0
    assert not summary.is_available


def test_occupancy_rate_rounds_to_whole_percent():
    assert occupancy_rate(3, 14) == 21
    assert occupancy_rate(0, 0) == 0


def test_unit_number_is_stable_and_in_range():
    first = generate_unit_number("VM1700000000000ABCDE", 14)

    assert first == generate_unit_number("VM1700000000000ABCDE", 14)
    assert 1 <= first <= 14
    assert generate_unit_number("anything", 0) == 1


def test_allocate_unit_never_hands_out_a_taken_unit():
    candidates = list(range(1, 5))
    taken = set()

    for ref in ("VM1", "VM2", "VM3", "VM4"):
        unit = allocate_unit(candidates, taken, ref)
        assert unit not in taken
        taken.add(unit)

    assert taken == set(candidates)
    assert allocate_unit(candidates, taken, "VM5") is None


# =================================================
# DATABASE
# =================================================
def _booking(db, villa_id, check_in, check_out, status="confirmed", ref=None):
    booking = Booking(
        booking_id=ref or f"VM-{villa_id}-{check_in.isoformat()}-{status}",
        guest_name="Test Guest",
        email="guest@mail.com",
        phone="9876543210",
        check_in=check_in,
        check_out=check_out,
        guests=2,
        villa_id=villa_id,
        villa_name=villa_id,
        villa_price=18000,
        total_amount=21240,
        status=status,
        payment_status="pending",
    )
    db.add(booking)
    db.commit()
    return booking


def test_total_units_falls_back_to_constant(db):
    assert inventory_service.total_units_for_villa(db, "glass-cottage") == 14
    assert inventory_service.total_units_for_villa(db, "unknown-villa") == 1


def test_total_units_counts_in_service_rows(seeded_db):
    unit = seeded_db.query(VillaUnit).filter(VillaUnit.villa_id == "hornbill-villa").first()
    inventory_service.update_unit_status(seeded_db, unit.id, "maintenance")

    assert inventory_service.total_units_for_villa(seeded_db, "hornbill-villa") == 3


def test_cancelled_bookings_do_not_take_capacity(seeded_db):
    check_in, check_out = date(2030, 3, 1), date(2030, 3, 4)
    _booking(seeded_db, "hornbill-villa", check_in, check_out)
    _booking(seeded_db, "hornbill-villa", check_in, check_out, status="cancelled")

    summary = inventory_service.get_available_units(seeded_db, "hornbill-villa", check_in, check_out)

    assert summary.occupied_units == 1
    assert summary.available_units == 3


def test_assign_unit_skips_blocked_and_assigned_units(seeded_db):
    check_in, check_out = date(2030, 3, 1), date(2030, 3, 3)
    units = (
        seeded_db.query(VillaUnit)
        .filter(VillaUnit.villa_id == "kingfisher-villa")
        .order_by(VillaUnit.unit_number)
        .all()
    )
    inventory_service.block_unit(seeded_db, units[0].id, check_in)

    assigned = set()
    for i in range(3):
        booking = _booking(seeded_db, "kingfisher-villa", check_in, check_out, ref=f"VMK{i}")
        assigned.add(inventory_service.assign_unit(seeded_db, booking).villa_inventory_id)

    assert units[0].id not in assigned
    assert len(assigned) == 3

    extra = _booking(seeded_db, "kingfisher-villa", check_in, check_out, ref="VMK9")
    with pytest.raises(UnavailableError):
        inventory_service.assign_unit(seeded_db, extra)


def test_explicit_unit_must_be_free(seeded_db):
    check_in, check_out = date(2030, 4, 1), date(2030, 4, 3)
    unit = seeded_db.query(VillaUnit).filter(VillaUnit.villa_id == "hornbill-villa").first()

    first = _booking(seeded_db, "hornbill-villa", check_in, check_out, ref="VMH1")
    inventory_service.assign_unit(seeded_db, first, unit.id)

    second = _booking(seeded_db, "hornbill-villa", check_in, check_out, ref="VMH2")
    with pytest.raises(UnavailableError):
        inventory_service.assign_unit(seeded_db, second, unit.id)


def test_reassigning_replaces_previous_unit(seeded_db):
    check_in, check_out = date(2030, 5, 1), date(2030, 5, 2)
    booking = _booking(seeded_db, "hornbill-villa", check_in, check_out, ref="VMR1")

    inventory_service.assign_unit(seeded_db, booking)
    inventory_service.assign_unit(seeded_db, booking)

    assert seeded_db.query(BookingUnit).filter(BookingUnit.booking_id == booking.id).count() == 1


def test_unit_with_upcoming_booking_cannot_be_deleted(seeded_db):
    today = date(2030, 6, 1)
    booking = _booking(seeded_db, "hornbill-villa", today + timedelta(days=3), today + timedelta(days=5), ref="VMD1")
    unit_id = inventory_service.assign_unit(seeded_db, booking).villa_inventory_id

    with pytest.raises(DeletionBlockedError):
        inventory_service.delete_unit(seeded_db, unit_id, today=today)

    booking_service.update_booking_status(seeded_db, booking.id, "cancelled")
    inventory_service.delete_unit(seeded_db, unit_id, today=today)

    assert seeded_db.query(VillaUnit).filter(VillaUnit.id == unit_id).first() is None


def test_block_unit_updates_existing_block(seeded_db):
    unit = seeded_db.query(VillaUnit).first()
    day = date(2030, 7, 1)

    inventory_service.block_unit(seeded_db, unit.id, day, "maintenance")
    inventory_service.block_unit(seeded_db, unit.id, day, "owner_use", "family visit")

    blocks = inventory_service.get_blocks(seeded_db, unit.villa_id)
    assert len(blocks) == 1
    assert blocks[0].block_type == "owner_use"

    assert inventory_service.unblock_unit(seeded_db, unit.id, day)
    assert not inventory_service.unblock_unit(seeded_db, unit.id, day)


def test_demo_units_without_database():
    units = inventory_service.get_villa_units(None, "glass-cottage")

    assert len(units) == 14
    assert units[0]["unit_number"] == "GC-01"
