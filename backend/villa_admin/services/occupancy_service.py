"""
Occupancy read models: who is in which room on a given night, and
aggregated rates per villa and across the resort.

A booking occupies the nights check_in <= night < check_out. Rooms come
from inventory rows when a villa has them, otherwise from generated labels.
Persisted unit assignments win; bookings without one are placed with the
same allocator used at assignment time.
"""
import calendar
import logging
from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy.orm import Session

from villa_admin.models.booking import Booking, BookingUnit
from villa_admin.models.inventory import InventoryBlock, VillaUnit
from villa_admin.services import inventory_service
from villa_admin.services.villa_service import get_all_villas
from villa_admin.utils.numbers import percentage

logger = logging.getLogger(__name__)

NOT_STAYING = ("cancelled", "no_show")


def occupancy_rate(occupied: int, total: int) -> int:
    return percentage(occupied, total)


def _villa_refs(db: Optional[Session]):
    villas = get_all_villas(db)
    refs = []
    for villa in villas:
        if isinstance(villa, dict):
            refs.append((villa["id"], villa["name"], villa["status"]))
        else:
            refs.append((villa.id, villa.name, villa.status))
    return [r for r in refs if r[2] == "active"]


def _active_bookings(db: Optional[Session], start: date, end: date) -> List[Booking]:
    """Bookings holding at least one night in [start, end)."""
    if db is None:
        return []
    return (
        db.query(Booking)
        .filter(
            Booking.status.notin_(NOT_STAYING),
            Booking.payment_status != "failed",
            Booking.check_in < end,
            Booking.check_out > start,
        )
        .order_by(Booking.check_in, Booking.booking_id)
        .all()
    )


def _rooms(db: Optional[Session], villa_id: str) -> List[dict]:
    units = inventory_service.get_villa_units(db, villa_id) if db is not None else []
    if units:
        return [
            {"unit_id": u.id, "unit_number": u.unit_number, "unit_status": u.status}
            for u in units
        ]

    total = inventory_service.default_unit_count(villa_id)
    return [
        {
            "unit_id": None,
            "unit_number": inventory_service.unit_label(villa_id, i),
            "unit_status": "available",
        }
        for i in range(1, total + 1)
    ]


def _assignments(db: Optional[Session], booking_ids: List[int]) -> Dict[int, int]:
    if db is None or not booking_ids:
        return {}
    rows = (
        db.query(BookingUnit.booking_id, BookingUnit.villa_inventory_id)
        .filter(BookingUnit.booking_id.in_(booking_ids))
        .all()
    )
    return {booking_id: unit_id for booking_id, unit_id in rows}


def _blocked_units(db: Optional[Session], day: date) -> set:
    if db is None:
        return set()
    return {
        row.villa_inventory_id
        for row in db.query(InventoryBlock.villa_inventory_id)
        .filter(InventoryBlock.block_date == day)
        .all()
    }


def _booking_row(booking: Booking, unit_number: Optional[str]) -> dict:
    return {
        "booking_id": booking.booking_id,
        "guest_name": booking.guest_name,
        "email": booking.email,
        "phone": booking.phone,
        "guests": booking.guests,
        "check_in": booking.check_in,
        "check_out": booking.check_out,
        "status": booking.status,
        "unit_number": unit_number,
    }


def villa_day_occupancy(
    villa_id: str,
    villa_name: str,
    day: date,
    rooms: List[dict],
    bookings: List[Booking],
    assignments: Dict[int, int],
    blocked: set,
) -> dict:
    """Room-wise picture of one villa on one night."""
    staying = [b for b in bookings if b.villa_id == villa_id and b.check_in <= day < b.check_out]

    out_of_service = {
        r["unit_number"] for r in rooms
        if r["unit_status"] != "available" or (r["unit_id"] is not None and r["unit_id"] in blocked)
    }
    by_unit_id = {r["unit_id"]: r["unit_number"] for r in rooms if r["unit_id"] is not None}

    placed = {}
    taken = set(out_of_service)
    pending = []
    for booking in staying:
        unit_id = assignments.get(booking.id)
        if unit_id in by_unit_id:
            label = by_unit_id[unit_id]
            placed[booking.booking_id] = label
            taken.add(label)
        else:
            pending.append(booking)

    labels = [r["unit_number"] for r in rooms]
    for booking in pending:
        label = inventory_service.allocate_unit(labels, taken, booking.booking_id)
        placed[booking.booking_id] = label
        if label:
            taken.add(label)

    occupant = {}
    for booking in staying:
        if placed.get(booking.booking_id):
            occupant[placed[booking.booking_id]] = booking

    room_rows = []
    for room in rooms:
        label = room["unit_number"]
        booking = occupant.get(label)
        if booking:
            status = "occupied"
        elif label in out_of_service:
            status = "maintenance"
        else:
            status = "available"
        room_rows.append({
            "unit_number": label,
            "status": status,
            "guest_name": booking.guest_name if booking else None,
            "booking_id": booking.booking_id if booking else None,
        })

    total_units = len([r for r in rooms if r["unit_status"] == "available"])
    occupied = len(staying)

    return {
        "villa_id": villa_id,
        "villa_name": villa_name,
        "date": day,
        "total_units": total_units,
        "occupied_units": occupied,
        "available_units": max(0, total_units - occupied),
        "occupancy_rate": occupancy_rate(occupied, total_units),
        "rooms": room_rows,
        "bookings": [_booking_row(b, placed.get(b.booking_id)) for b in staying],
    }


def get_occupancy_for_date(db: Optional[Session], day: date) -> List[dict]:
    villas = _villa_refs(db)
    bookings = _active_bookings(db, day, day + timedelta(days=1))
    assignments = _assignments(db, [b.id for b in bookings])
    blocked = _blocked_units(db, day)

    return [
        villa_day_occupancy(villa_id, name, day, _rooms(db, villa_id), bookings, assignments, blocked)
        for villa_id, name, _ in villas
    ]


def summarize(villa_rows: List[dict]) -> dict:
    total = sum(v["total_units"] for v in villa_rows)
    occupied = sum(v["occupied_units"] for v in villa_rows)
    return {
        "total_units": total,
        "occupied_units": occupied,
        "available_units": max(0, total - occupied),
        "occupancy_rate": occupancy_rate(occupied, total),
    }


def get_overall_stats(db: Optional[Session], day: date) -> dict:
    villas = get_occupancy_for_date(db, day)
    stats = summarize(villas)
    stats["date"] = day
    stats["villas"] = [
        {k: v[k] for k in ("villa_id", "villa_name", "total_units", "occupied_units", "occupancy_rate")}
        for v in villas
    ]
    return stats


def get_occupancy_for_range(db: Optional[Session], start: date, end: date) -> List[dict]:
    """Daily summaries for start..end inclusive, from a single booking query."""
    if end < start:
        return []

    villas = _villa_refs(db)
    bookings = _active_bookings(db, start, end + timedelta(days=1))
    totals = {villa_id: len([r for r in _rooms(db, villa_id) if r["unit_status"] == "available"])
              for villa_id, _, _ in villas}

    days = []
    day = start
    while day <= end:
        villa_rows = []
        for villa_id, name, _ in villas:
            occupied = len([
                b for b in bookings
                if b.villa_id == villa_id and b.check_in <= day < b.check_out
            ])
            villa_rows.append({
                "villa_id": villa_id,
                "villa_name": name,
                "total_units": totals[villa_id],
                "occupied_units": occupied,
                "occupancy_rate": occupancy_rate(occupied, totals[villa_id]),
            })
        summary = summarize(villa_rows)
        summary.update({"date": day, "villas": villa_rows})
        days.append(summary)
        day += timedelta(days=1)
    return days


def get_weekly_occupancy(db: Optional[Session], start: date) -> List[dict]:
    return get_occupancy_for_range(db, start, start + timedelta(days=6))


def get_monthly_occupancy(db: Optional[Session], year: int, month: int) -> List[dict]:
    days_in_month = calendar.monthrange(year, month)[1]
    return get_occupancy_for_range(db, date(year, month, 1), date(year, month, days_in_month))


def get_availability_calendar(db: Optional[Session], villa_id: str, year: int, month: int) -> List[dict]:
    days_in_month = calendar.monthrange(year, month)[1]
    start, end = date(year, month, 1), date(year, month, days_in_month)

    rooms = _rooms(db, villa_id)
    total = len([r for r in rooms if r["unit_status"] == "available"])
    bookings = [b for b in _active_bookings(db, start, end + timedelta(days=1)) if b.villa_id == villa_id]

    blocked_by_day = {}
    if db is not None:
        rows = (
            db.query(InventoryBlock.block_date, InventoryBlock.villa_inventory_id)
            .join(VillaUnit, VillaUnit.id == InventoryBlock.villa_inventory_id)
            .filter(
                VillaUnit.villa_id == villa_id,
                VillaUnit.status == "available",
                InventoryBlock.block_date >= start,
                InventoryBlock.block_date <= end,
            )
            .all()
        )
        for block_date, unit_id in rows:
            blocked_by_day.setdefault(block_date, set()).add(unit_id)

    calendar_days = []
    for offset in range(days_in_month):
        day = start + timedelta(days=offset)
        occupied = len([b for b in bookings if b.check_in <= day < b.check_out])
        blocked = len(blocked_by_day.get(day, ()))
        calendar_days.append({
            "date": day,
            "total_units": total,
            "occupied_units": occupied,
            "blocked_units": blocked,
            "available_units": max(0, total - occupied - blocked),
        })
    return calendar_days
