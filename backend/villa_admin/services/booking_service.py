import logging
import secrets
import string
import time as time_module
from datetime import date, datetime, time, timedelta
from types import SimpleNamespace
from typing import Iterable, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from villa_admin.core.constants import (
    ADMIN_MAX_GUESTS,
    BOOKING_HOLD_MINUTES,
    BOOKING_TRANSITIONS,
)
from villa_admin.models.booking import Booking, BookingActivity, BookingHold, BookingUnit
from villa_admin.models.inventory import VillaUnit
from villa_admin.models.safari import SafariOption, SafariQuery
from villa_admin.services import inventory_service
from villa_admin.services.package_service import get_package
from villa_admin.services.pricing import (
    PriceSnapshot,
    calculate_remaining,
    payment_status_for,
    snapshot_for,
)
from villa_admin.services.villa_service import get_active_villas, get_villa
from villa_admin.utils.errors import (
    InvalidTransitionError,
    NotFoundError,
    ServiceError,
    UnavailableError,
    ValidationFailed,
    handle_db_error,
    require_db,
)
from villa_admin.utils.numbers import round_half_up
from villa_admin.utils.validation import (
    validate_advance,
    validate_guest_count,
    validate_stay_dates,
)

logger = logging.getLogger(__name__)

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
ASSIGNMENT_FAILED_WARNING = "Booking updated but room assignment failed"
PRICE_FIELDS = ("villa_id", "package_id", "check_in", "check_out")


# =================================================
# HELPERS
# =================================================
def generate_booking_reference() -> str:
    suffix = "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(5))
    return f"VM{int(time_module.time() * 1000)}{suffix}"


def log_activity(db: Session, booking: Booking, activity_type: str, description: str, performed_by: str = "system"):
    db.add(BookingActivity(
        booking_id=booking.id,
        activity_type=activity_type,
        description=description,
        performed_by=performed_by,
    ))


def mark_fully_paid(booking: Booking) -> None:
    """Settle the whole total as advance so remaining stays total - advance."""
    booking.payment_status = "paid"
    booking.advance_amount = booking.total_amount or 0
    booking.remaining_amount = 0


def _raise_if(errors: List[str]):
    if errors:
        raise ValidationFailed("; ".join(errors))


def _villa_has_units(db: Session, villa_id: str) -> bool:
    return db.query(VillaUnit.id).filter(VillaUnit.villa_id == villa_id).first() is not None


def _safari_lines(db: Session, requests: Iterable[dict]) -> Tuple[list, float]:
    lines, total = [], 0.0
    for request in requests or []:
        option = db.query(SafariOption).filter(SafariOption.id == request["safari_option_id"]).first()
        if not option:
            raise ValidationFailed(f"Safari option {request['safari_option_id']} not found")

        persons = request.get("number_of_persons") or 1
        line = {
            "safari_option_id": option.id,
            "safari_name": option.name,
            "preferred_date": request.get("preferred_date").isoformat() if request.get("preferred_date") else None,
            "preferred_timing": request.get("preferred_timing"),
            "number_of_persons": persons,
            "price": (option.price_per_person or 0) * persons,
        }
        total += line["price"]
        lines.append(line)
    return lines, total


def check_transition(current: str, new: str, force: bool = False) -> bool:
    """
    Validate a status change. Returns True when the move is outside the
    normal lifecycle and was only let through by force.
    """
    if current == new:
        return False
    if new in BOOKING_TRANSITIONS.get(current, ()):
        return False
    if not force:
        raise InvalidTransitionError(f"Cannot change booking status from {current} to {new}")
    return True


def quote_price(
    db: Optional[Session],
    villa_id: str,
    package_id: Optional[str],
    check_in: date,
    check_out: date,
) -> PriceSnapshot:
    _raise_if(validate_stay_dates(check_in, check_out, allow_past=True))

    villa = get_villa(db, villa_id)
    package = get_package(db, package_id) if package_id else None

    # Demo catalogue entries are plain dicts.
    if isinstance(villa, dict):
        villa = SimpleNamespace(**villa)
        package = SimpleNamespace(**package) if package else None

    return snapshot_for(villa, package, check_in, check_out)


# =================================================
# CREATE
# =================================================
def create_booking(
    db: Session,
    data: dict,
    admin: bool = False,
    performed_by: str = "guest",
    today: Optional[date] = None,
) -> Tuple[Booking, Optional[str]]:
    """
    Create a booking with a price snapshot. Returns the booking and an
    optional warning when the room could not be assigned.
    """
    require_db(db)

    for field in ("guest_name", "email", "phone", "villa_id", "check_in", "check_out", "guests"):
        if not data.get(field):
            raise ValidationFailed("Missing required booking information")

    villa = get_villa(db, data["villa_id"])
    package = get_package(db, data["package_id"]) if data.get("package_id") else None

    if not admin:
        if villa.status != "active":
            raise UnavailableError("Villa is not available for booking")
        if package is not None and not package.is_active:
            raise ValidationFailed("Selected package is not available")

    check_in, check_out = data["check_in"], data["check_out"]
    errors = validate_stay_dates(check_in, check_out, allow_past=admin, today=today)
    errors += validate_guest_count(data["guests"], ADMIN_MAX_GUESTS if admin else villa.max_guests)
    _raise_if(errors)

    availability = inventory_service.get_available_units(db, villa.id, check_in, check_out)
    if not availability.is_available:
        raise UnavailableError()

    safari_lines, safari_total = _safari_lines(db, data.get("safari_requests"))
    snapshot = snapshot_for(villa, package, check_in, check_out, safari_total)

    advance = data.get("advance_amount") or 0
    _raise_if(validate_advance(advance, snapshot.total))

    booking = Booking(
        booking_id=generate_booking_reference(),
        guest_name=data["guest_name"],
        email=data["email"],
        phone=data["phone"],
        check_in=check_in,
        check_out=check_out,
        guests=data["guests"],
        villa_id=villa.id,
        package_id=package.id if package else None,
        safari_requests=safari_lines,
        advance_amount=advance,
        remaining_amount=calculate_remaining(snapshot.total, advance),
        status=data.get("status") or "pending",
        payment_status=payment_status_for(snapshot.total, advance),
        payment_id=data.get("payment_id"),
        special_requests=data.get("special_requests"),
        admin_notes=data.get("admin_notes"),
        booking_source=data.get("booking_source") or "website",
        session_id=data.get("session_id"),
        **snapshot.as_booking_fields(),
    )

    try:
        db.add(booking)
        db.flush()

        for line in safari_lines:
            db.add(SafariQuery(
                booking_id=booking.booking_id,
                guest_name=booking.guest_name,
                email=booking.email,
                phone=booking.phone,
                safari_option_id=line["safari_option_id"],
                safari_name=line["safari_name"],
                preferred_date=date.fromisoformat(line["preferred_date"]) if line["preferred_date"] else check_in,
                preferred_timing=line["preferred_timing"],
                number_of_persons=line["number_of_persons"],
                status="pending",
            ))

        log_activity(db, booking, "created", f"Booking created for {villa.name}", performed_by)

        if booking.session_id:
            db.query(BookingHold).filter(BookingHold.session_id == booking.session_id).delete()

        db.commit()
        db.refresh(booking)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    logger.info("Booking %s created for %s (%s)", booking.booking_id, villa.id, booking.booking_source)

    warning = None
    if _villa_has_units(db, villa.id):
        warning = _try_assign(db, booking, "Booking created but room assignment failed")
    return booking, warning


def _try_assign(db: Session, booking: Booking, warning: str = ASSIGNMENT_FAILED_WARNING) -> Optional[str]:
    try:
        inventory_service.assign_unit(db, booking)
    except ServiceError as exc:
        logger.error("Room assignment failed for %s: %s", booking.booking_id, exc.message)
        return warning
    return None


# =================================================
# READ
# =================================================
def booking_query(
    db: Session,
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    villa_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
):
    require_db(db)
    query = db.query(Booking)

    if status and status != "all":
        query = query.filter(Booking.status == status)
    if payment_status and payment_status != "all":
        query = query.filter(Booking.payment_status == payment_status)
    if villa_id and villa_id != "all":
        query = query.filter(Booking.villa_id == villa_id)

    # A full window means "stays inside it"; a single bound filters on creation time.
    if date_from and date_to:
        query = query.filter(Booking.check_in >= date_from, Booking.check_out <= date_to)
    elif date_from:
        query = query.filter(Booking.created_at >= datetime.combine(date_from, time.min))
    elif date_to:
        query = query.filter(Booking.created_at <= datetime.combine(date_to, time.max))

    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(
            Booking.guest_name.ilike(term),
            Booking.email.ilike(term),
            Booking.booking_id.ilike(term),
        ))

    return query.order_by(Booking.created_at.desc(), Booking.id.desc())


def get_bookings(db: Session, **filters) -> List[Booking]:
    return booking_query(db, **filters).all()


def get_booking(db: Session, key) -> Booking:
    """Look a booking up by primary key, falling back to its reference."""
    require_db(db)

    booking = None
    if isinstance(key, int) or str(key).isdigit():
        booking = db.query(Booking).filter(Booking.id == int(key)).first()
    if booking is None:
        booking = db.query(Booking).filter(Booking.booking_id == str(key)).first()
    if booking is None:
        raise NotFoundError("Booking not found")
    return booking


def get_booking_unit(db: Session, booking: Booking) -> Optional[VillaUnit]:
    assignment = db.query(BookingUnit).filter(BookingUnit.booking_id == booking.id).first()
    return assignment.unit if assignment else None


def get_booking_activities(db: Session, key) -> List[BookingActivity]:
    booking = get_booking(db, key)
    return list(booking.activities)


def get_available_villas(db: Optional[Session], check_in: date, check_out: date) -> List[dict]:
    _raise_if(validate_stay_dates(check_in, check_out, allow_past=True))

    results = []
    for villa in get_active_villas(db):
        villa_id = villa["id"] if isinstance(villa, dict) else villa.id
        availability = inventory_service.get_available_units(db, villa_id, check_in, check_out)
        if availability.available_units > 0:
            results.append({"villa": villa, "availability": availability})
    return results


def get_booking_stats(db: Session) -> dict:
    require_db(db)

    counts = dict(
        db.query(Booking.status, func.count(Booking.id))
        .group_by(Booking.status)
        .all()
    )
    paid_count, revenue = db.query(
        func.count(Booking.id),
        func.coalesce(func.sum(Booking.total_amount), 0),
    ).filter(Booking.payment_status == "paid").one()
    revenue = float(revenue)

    return {
        "total_bookings": sum(counts.values()),
        "pending_bookings": counts.get("pending", 0),
        "confirmed_bookings": counts.get("confirmed", 0),
        "checked_in_bookings": counts.get("checked_in", 0),
        "completed_bookings": counts.get("completed", 0),
        "cancelled_bookings": counts.get("cancelled", 0),
        "total_revenue": revenue,
        "avg_booking_value": round_half_up(revenue / paid_count) if paid_count else 0,
    }


# =================================================
# UPDATE
# =================================================
def update_booking(db: Session, key, data: dict, performed_by: str = "admin") -> Tuple[Booking, Optional[str]]:
    """
    Admin edit. Date, villa or package changes re-price the booking;
    the remaining amount always follows the current total and advance.
    """
    booking = get_booking(db, key)
    data = dict(data)

    for field in ("guest_name", "email", "phone", "special_requests", "admin_notes"):
        if field in data:
            setattr(booking, field, data.pop(field))

    if "guests" in data and data["guests"] is not None:
        _raise_if(validate_guest_count(data["guests"], ADMIN_MAX_GUESTS))
        booking.guests = data.pop("guests")

    reprice = any(f in data and data[f] != getattr(booking, f) for f in PRICE_FIELDS)
    stay_changed = False
    if reprice:
        villa_id = data.get("villa_id") or booking.villa_id
        package_id = data["package_id"] if "package_id" in data else booking.package_id
        check_in = data.get("check_in") or booking.check_in
        check_out = data.get("check_out") or booking.check_out

        _raise_if(validate_stay_dates(check_in, check_out, allow_past=True))

        stay_changed = (villa_id, check_in, check_out) != (booking.villa_id, booking.check_in, booking.check_out)
        if stay_changed:
            availability = inventory_service.get_available_units(db, villa_id, check_in, check_out, booking.id)
            if not availability.is_available:
                raise UnavailableError()

        villa = get_villa(db, villa_id)
        package = get_package(db, package_id) if package_id else None
        snapshot = snapshot_for(villa, package, check_in, check_out, booking.safari_total or 0)

        booking.villa_id = villa.id
        booking.package_id = package.id if package else None
        booking.check_in = check_in
        booking.check_out = check_out
        for field, value in snapshot.as_booking_fields().items():
            setattr(booking, field, value)

    if data.get("advance_amount") is not None:
        booking.advance_amount = data["advance_amount"]

    _raise_if(validate_advance(booking.advance_amount or 0, booking.total_amount))
    booking.remaining_amount = calculate_remaining(booking.total_amount, booking.advance_amount)
    booking.payment_status = payment_status_for(
        booking.total_amount, booking.advance_amount, booking.payment_status
    )

    try:
        log_activity(db, booking, "updated", "Booking details updated", performed_by)
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    warning = None
    if stay_changed and _villa_has_units(db, booking.villa_id):
        warning = _try_assign(db, booking)
    return booking, warning


def update_booking_status(
    db: Session,
    key,
    status: str,
    force: bool = False,
    admin_notes: Optional[str] = None,
    performed_by: str = "admin",
) -> Tuple[Booking, Optional[str]]:
    booking = get_booking(db, key)
    previous = booking.status

    if check_transition(previous, status, force):
        logger.warning(
            "Booking %s moved %s -> %s outside the normal lifecycle (by %s)",
            booking.booking_id, previous, status, performed_by,
        )

    booking.status = status
    if status == "confirmed" and booking.payment_status == "pending":
        mark_fully_paid(booking)
    if admin_notes is not None:
        booking.admin_notes = admin_notes

    try:
        if status in ("cancelled", "no_show"):
            db.query(BookingUnit).filter(BookingUnit.booking_id == booking.id).delete()
        log_activity(db, booking, "status_changed", f"Status changed from {previous} to {status}", performed_by)
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    warning = None
    if status in ("confirmed", "checked_in") and _villa_has_units(db, booking.villa_id):
        if get_booking_unit(db, booking) is None:
            warning = _try_assign(db, booking)
    return booking, warning


def bulk_update_booking_status(db: Session, booking_refs: List[str], status: str, force: bool = False) -> dict:
    require_db(db)
    updated, skipped = [], []

    for ref in booking_refs:
        try:
            booking = db.query(Booking).filter(Booking.booking_id == ref).first()
            if booking is None:
                raise NotFoundError("Booking not found")
            update_booking_status(db, booking.id, status, force=force)
            updated.append(ref)
        except ServiceError as exc:
            skipped.append({"booking_id": ref, "error": exc.message})

    return {"updated": updated, "skipped": skipped}


def update_payment_status(db: Session, key, payment_status: str, payment_id: Optional[str] = None) -> Booking:
    booking = get_booking(db, key)
    booking.payment_status = payment_status
    if payment_id:
        booking.payment_id = payment_id
    if payment_status == "paid":
        mark_fully_paid(booking)

    try:
        log_activity(db, booking, "payment_updated", f"Payment status set to {payment_status}")
        db.commit()
        db.refresh(booking)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return booking


def assign_booking_unit(db: Session, key, unit_id: Optional[int] = None) -> BookingUnit:
    booking = get_booking(db, key)
    if booking.status in inventory_service.RELEASED_STATUSES:
        raise ValidationFailed("Cannot assign a unit to a closed booking")
    return inventory_service.assign_unit(db, booking, unit_id)


def delete_booking(db: Session, key) -> None:
    booking = get_booking(db, key)
    try:
        db.delete(booking)
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    logger.info("Booking %s deleted", booking.booking_id)


# =================================================
# HOLDS
# =================================================
def create_booking_hold(
    db: Session,
    session_id: str,
    villa_id: str,
    check_in: date,
    check_out: date,
    now: Optional[datetime] = None,
) -> BookingHold:
    require_db(db)
    get_villa(db, villa_id)
    _raise_if(validate_stay_dates(check_in, check_out, allow_past=False, today=(now or datetime.now()).date()))

    now = now or datetime.now()
    hold = BookingHold(
        session_id=session_id,
        villa_id=villa_id,
        check_in=check_in,
        check_out=check_out,
        expires_at=now + timedelta(minutes=BOOKING_HOLD_MINUTES),
    )
    try:
        db.query(BookingHold).filter(BookingHold.session_id == session_id).delete()
        db.add(hold)
        db.commit()
        db.refresh(hold)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return hold


def cleanup_expired_holds(db: Session, now: Optional[datetime] = None) -> int:
    require_db(db)
    now = now or datetime.now()
    try:
        removed = db.query(BookingHold).filter(BookingHold.expires_at < now).delete()
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    if removed:
        logger.info("Removed %s expired booking holds", removed)
    return removed
