import logging
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Hashable, List, Optional, Sequence

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from villa_admin.core.constants import DEFAULT_UNIT_COUNT, UNIT_PREFIXES, VILLA_INVENTORY
from villa_admin.models.booking import Booking, BookingUnit
from villa_admin.models.inventory import InventoryBlock, VillaUnit
from villa_admin.models.villa import Villa
from villa_admin.services import demo_data
from villa_admin.utils.errors import (
    DeletionBlockedError,
    NotFoundError,
    UnavailableError,
    ValidationFailed,
    handle_db_error,
    require_db,
)

logger = logging.getLogger(__name__)

# Bookings in these states no longer hold a unit.
RELEASED_STATUSES = ("cancelled", "no_show", "checked_out", "completed")


# =================================================
# OVERLAP & COUNTING
# =================================================
def ranges_overlap(check_in: date, check_out: date, other_in: date, other_out: date) -> bool:
    """
    Half-open [check_in, check_out) overlap: a stay ending on the day another
    begins does not collide with it.
    """
    return (
        (check_in <= other_in < check_out)
        or (check_in < other_out <= check_out)
        or (other_in <= check_in and other_out >= check_out)
    )


def overlap_clause(check_in: date, check_out: date, start_col=Booking.check_in, end_col=Booking.check_out):
    return or_(
        and_(start_col >= check_in, start_col < check_out),
        and_(end_col > check_in, end_col <= check_out),
        and_(start_col <= check_in, end_col >= check_out),
    )


def holding_booking_clause():
    """Bookings that still take up capacity."""
    return and_(
        Booking.status != "cancelled",
        Booking.payment_status != "failed",
    )


@dataclass
class AvailabilitySummary:
    villa_id: str
    total_units: int
    occupied_units: int

    @property
    def available_units(self) -> int:
        return max(0, self.total_units - self.occupied_units)

    @property
    def is_available(self) -> bool:
        return self.available_units > 0

    def to_dict(self):
        return {
            "villa_id": self.villa_id,
            "total_units": self.total_units,
            "occupied_units": self.occupied_units,
            "available_units": self.available_units,
        }


def default_unit_count(villa_id: str) -> int:
    inventory = VILLA_INVENTORY.get(villa_id)
    return inventory["total_units"] if inventory else DEFAULT_UNIT_COUNT


def total_units_for_villa(db: Optional[Session], villa_id: str) -> int:
    if db is None:
        return default_unit_count(villa_id)

    has_rows = db.query(VillaUnit.id).filter(VillaUnit.villa_id == villa_id).first()
    if not has_rows:
        return default_unit_count(villa_id)

    return (
        db.query(VillaUnit)
        .filter(VillaUnit.villa_id == villa_id, VillaUnit.status == "available")
        .count()
    )


def get_available_units(
    db: Session,
    villa_id: str,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[int] = None,
) -> AvailabilitySummary:
    total = total_units_for_villa(db, villa_id)
    if db is None:
        return AvailabilitySummary(villa_id, total, 0)

    query = db.query(Booking).filter(
        Booking.villa_id == villa_id,
        holding_booking_clause(),
        overlap_clause(check_in, check_out),
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)

    return AvailabilitySummary(villa_id, total, query.count())


# =================================================
# UNIT LABELS & ASSIGNMENT
# =================================================
def unit_prefix(villa_id: str) -> str:
    return UNIT_PREFIXES.get(villa_id, villa_id[:2].upper())


def unit_label(villa_id: str, number: int) -> str:
    return f"{unit_prefix(villa_id)}-{number:02d}"


def generate_unit_number(booking_id: str, total_units: int) -> int:
    """
    Stable 1-based unit number for a booking reference
    (31-multiplier string hash wrapped to a signed 32-bit int).
    """
    if total_units <= 0:
        return 1

    value = 0
    for char in booking_id or "":
        value = (value * 31 + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000

    return abs(value) % total_units + 1


def allocate_unit(candidates: Sequence[Hashable], taken: set, booking_id: str):
    """
    Pick a unit for a booking: start at the booking's hashed slot and walk
    forward to the first candidate nobody else holds. Returns None when every
    candidate is taken.
    """
    if not candidates:
        return None

    start = generate_unit_number(booking_id, len(candidates)) - 1
    for offset in range(len(candidates)):
        candidate = candidates[(start + offset) % len(candidates)]
        if candidate not in taken:
            return candidate
    return None


def _nights(check_in: date, check_out: date) -> List[date]:
    return [check_in + timedelta(days=i) for i in range((check_out - check_in).days)]


def get_free_units(
    db: Session,
    villa_id: str,
    check_in: date,
    check_out: date,
    exclude_booking_id: Optional[int] = None,
) -> List[VillaUnit]:
    """Units that are in service, unblocked and unassigned for every night of the stay."""
    require_db(db)

    units = (
        db.query(VillaUnit)
        .filter(VillaUnit.villa_id == villa_id, VillaUnit.status == "available")
        .order_by(VillaUnit.unit_number)
        .all()
    )
    if not units:
        return []

    unit_ids = [u.id for u in units]
    nights = _nights(check_in, check_out)

    blocked = {
        row.villa_inventory_id
        for row in db.query(InventoryBlock.villa_inventory_id)
        .filter(
            InventoryBlock.villa_inventory_id.in_(unit_ids),
            InventoryBlock.block_date.in_(nights),
        )
        .all()
    } if nights else set()

    assigned_query = (
        db.query(BookingUnit.villa_inventory_id)
        .join(Booking, Booking.id == BookingUnit.booking_id)
        .filter(
            BookingUnit.villa_inventory_id.in_(unit_ids),
            Booking.status.notin_(RELEASED_STATUSES),
            overlap_clause(check_in, check_out, BookingUnit.check_in, BookingUnit.check_out),
        )
    )
    if exclude_booking_id is not None:
        assigned_query = assigned_query.filter(BookingUnit.booking_id != exclude_booking_id)
    assigned = {row.villa_inventory_id for row in assigned_query.all()}

    return [u for u in units if u.id not in blocked and u.id not in assigned]


def assign_unit(db: Session, booking: Booking, unit_id: Optional[int] = None) -> BookingUnit:
    """
    Persist which physical unit a booking occupies. Without an explicit unit
    the allocator picks one; an existing assignment is replaced.
    """
    require_db(db)

    free_units = get_free_units(db, booking.villa_id, booking.check_in, booking.check_out, booking.id)
    free_ids = {u.id for u in free_units}

    if unit_id is not None:
        if unit_id not in free_ids:
            raise UnavailableError("Selected unit is not available for these dates")
        chosen = unit_id
    else:
        candidates = [
            u.id for u in db.query(VillaUnit)
            .filter(VillaUnit.villa_id == booking.villa_id, VillaUnit.status == "available")
            .order_by(VillaUnit.unit_number)
            .all()
        ]
        taken = {c for c in candidates if c not in free_ids}
        chosen = allocate_unit(candidates, taken, booking.booking_id)
        if chosen is None:
            raise UnavailableError("No free unit available for these dates")

    try:
        db.query(BookingUnit).filter(BookingUnit.booking_id == booking.id).delete()
        assignment = BookingUnit(
            booking_id=booking.id,
            villa_inventory_id=chosen,
            check_in=booking.check_in,
            check_out=booking.check_out,
        )
        db.add(assignment)
        db.commit()
        db.refresh(assignment)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    logger.info("Booking %s assigned to unit %s", booking.booking_id, chosen)
    return assignment


# =================================================
# UNIT CRUD
# =================================================
def get_villa_units(db: Optional[Session], villa_id: str):
    if db is None:
        return demo_data.demo_units(villa_id)

    return (
        db.query(VillaUnit)
        .filter(VillaUnit.villa_id == villa_id)
        .order_by(VillaUnit.unit_number)
        .all()
    )


def get_unit(db: Session, unit_id: int) -> VillaUnit:
    require_db(db)
    unit = db.query(VillaUnit).filter(VillaUnit.id == unit_id).first()
    if not unit:
        raise NotFoundError("Unit not found")
    return unit


def create_unit(db: Session, data: dict) -> VillaUnit:
    require_db(db)

    if not db.query(Villa).filter(Villa.id == data["villa_id"]).first():
        raise ValidationFailed("Villa not found")

    unit = VillaUnit(**data)
    try:
        db.add(unit)
        db.commit()
        db.refresh(unit)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return unit


def update_unit(db: Session, unit_id: int, data: dict) -> VillaUnit:
    unit = get_unit(db, unit_id)
    for field, value in data.items():
        setattr(unit, field, value)

    try:
        db.commit()
        db.refresh(unit)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return unit


def update_unit_status(db: Session, unit_id: int, status: str, notes: Optional[str] = None) -> VillaUnit:
    data = {"status": status}
    if notes is not None:
        data["notes"] = notes
    return update_unit(db, unit_id, data)


def has_active_assignments(db: Session, unit_id: int, today: Optional[date] = None) -> bool:
    today = today or date.today()
    return (
        db.query(BookingUnit.id)
        .join(Booking, Booking.id == BookingUnit.booking_id)
        .filter(
            BookingUnit.villa_inventory_id == unit_id,
            BookingUnit.check_out >= today,
            Booking.status.notin_(RELEASED_STATUSES),
        )
        .first()
        is not None
    )


def delete_unit(db: Session, unit_id: int, today: Optional[date] = None) -> None:
    unit = get_unit(db, unit_id)

    if has_active_assignments(db, unit_id, today):
        raise DeletionBlockedError("Cannot delete unit with active bookings")

    try:
        db.query(BookingUnit).filter(BookingUnit.villa_inventory_id == unit_id).delete()
        db.delete(unit)
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)


# =================================================
# BLOCKS
# =================================================
def block_unit(db: Session, unit_id: int, block_date: date, block_type: str = "maintenance", notes: str = None) -> InventoryBlock:
    get_unit(db, unit_id)

    block = (
        db.query(InventoryBlock)
        .filter(InventoryBlock.villa_inventory_id == unit_id, InventoryBlock.block_date == block_date)
        .first()
    )
    if block:
        block.block_type = block_type
        block.notes = notes
    else:
        block = InventoryBlock(
            villa_inventory_id=unit_id,
            block_date=block_date,
            block_type=block_type,
            notes=notes,
        )
        db.add(block)

    try:
        db.commit()
        db.refresh(block)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return block


def unblock_unit(db: Session, unit_id: int, block_date: date) -> bool:
    require_db(db)
    removed = (
        db.query(InventoryBlock)
        .filter(InventoryBlock.villa_inventory_id == unit_id, InventoryBlock.block_date == block_date)
        .delete()
    )
    db.commit()
    return removed > 0


def get_blocks(db: Session, villa_id: Optional[str] = None, start: Optional[date] = None, end: Optional[date] = None):
    if db is None:
        return []

    query = db.query(InventoryBlock).join(VillaUnit, VillaUnit.id == InventoryBlock.villa_inventory_id)
    if villa_id:
        query = query.filter(VillaUnit.villa_id == villa_id)
    if start:
        query = query.filter(InventoryBlock.block_date >= start)
    if end:
        query = query.filter(InventoryBlock.block_date <= end)

    return query.order_by(InventoryBlock.block_date, InventoryBlock.villa_inventory_id).all()


def get_villa_inventory(db: Optional[Session]):
    """Unit counts per villa, by status."""
    villas = list(VILLA_INVENTORY.keys())
    if db is not None:
        villas = [v.id for v in db.query(Villa).order_by(Villa.name).all()] or villas

    summary = []
    for villa_id in villas:
        units = get_villa_units(db, villa_id)
        statuses = [u["status"] if isinstance(u, dict) else u.status for u in units]
        summary.append({
            "villa_id": villa_id,
            "total_units": len(units) or default_unit_count(villa_id),
            "available": statuses.count("available") if units else default_unit_count(villa_id),
            "maintenance": statuses.count("maintenance"),
            "out_of_order": statuses.count("out_of_order"),
        })
    return summary
