import calendar
import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from villa_admin.models.booking import Booking
from villa_admin.models.inventory import VillaUnit
from villa_admin.models.villa import PricingRule, Villa
from villa_admin.services import demo_data
from villa_admin.services.inventory_service import total_units_for_villa
from villa_admin.utils.errors import (
    DeletionBlockedError,
    DuplicateEntryError,
    NotFoundError,
    handle_db_error,
    require_db,
)
from villa_admin.utils.numbers import round_half_up
from villa_admin.utils.validation import slugify

logger = logging.getLogger(__name__)


def get_all_villas(db: Optional[Session]):
    if db is None:
        return sorted(demo_data.demo_villas(), key=lambda v: v["name"])
    return db.query(Villa).order_by(Villa.name).all()


def get_active_villas(db: Optional[Session]):
    if db is None:
        villas = [v for v in demo_data.demo_villas() if v["status"] == "active"]
        return sorted(villas, key=lambda v: v["base_price"])

    return (
        db.query(Villa)
        .filter(Villa.status == "active")
        .order_by(Villa.base_price)
        .all()
    )


def get_villa(db: Optional[Session], villa_id: str):
    if db is None:
        for villa in demo_data.demo_villas():
            if villa["id"] == villa_id:
                return villa
        raise NotFoundError("Villa not found")

    villa = db.query(Villa).filter(Villa.id == villa_id).first()
    if not villa:
        raise NotFoundError("Villa not found")
    return villa


def create_villa(db: Session, data: dict) -> Villa:
    require_db(db)

    villa_id = data.pop("id", None) or slugify(data["name"])
    if db.query(Villa).filter(Villa.id == villa_id).first():
        raise DuplicateEntryError()

    villa = Villa(id=villa_id, **data)
    try:
        db.add(villa)
        db.commit()
        db.refresh(villa)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    logger.info("Villa %s created", villa.id)
    return villa


def update_villa(db: Session, villa_id: str, data: dict) -> Villa:
    require_db(db)
    villa = get_villa(db, villa_id)

    for field, value in data.items():
        setattr(villa, field, value)

    try:
        db.commit()
        db.refresh(villa)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return villa


def update_villa_pricing(db: Session, villa_id: str, base_price: float) -> Villa:
    return update_villa(db, villa_id, {"base_price": base_price})


def delete_villa(db: Session, villa_id: str) -> None:
    require_db(db)
    villa = get_villa(db, villa_id)

    has_bookings = db.query(Booking.id).filter(Booking.villa_id == villa_id).first()
    if has_bookings:
        raise DeletionBlockedError(
            "Cannot delete villa with existing bookings. "
            "Please cancel or complete all bookings first."
        )

    try:
        for unit in db.query(VillaUnit).filter(VillaUnit.villa_id == villa_id).all():
            db.delete(unit)
        db.delete(villa)
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    logger.info("Villa %s deleted", villa_id)


def toggle_villa_status(db: Session, villa_id: str) -> Villa:
    require_db(db)
    villa = get_villa(db, villa_id)
    new_status = "inactive" if villa.status == "active" else "active"
    return update_villa(db, villa_id, {"status": new_status})


def bulk_update_villa_status(db: Session, villa_ids: List[str], status: str) -> int:
    require_db(db)
    try:
        updated = (
            db.query(Villa)
            .filter(Villa.id.in_(villa_ids))
            .update({Villa.status: status}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return updated


# -------------------------------
# Stats
# -------------------------------
def get_villa_stats(db: Session, villa_id: str, today: Optional[date] = None) -> dict:
    require_db(db)
    get_villa(db, villa_id)
    today = today or date.today()

    total_bookings = db.query(Booking).filter(Booking.villa_id == villa_id).count()

    paid = db.query(
        func.count(Booking.id),
        func.coalesce(func.sum(Booking.total_amount), 0),
    ).filter(
        Booking.villa_id == villa_id,
        Booking.payment_status == "paid",
    ).one()
    paid_count, total_revenue = paid[0], float(paid[1])

    days_in_month = calendar.monthrange(today.year, today.month)[1]
    month_start = today.replace(day=1)
    month_end = today.replace(day=days_in_month)

    month_bookings = (
        db.query(Booking)
        .filter(
            Booking.villa_id == villa_id,
            Booking.status != "cancelled",
            Booking.check_in >= month_start,
            Booking.check_out <= month_end,
        )
        .all()
    )
    occupied_nights = sum(b.nights for b in month_bookings)
    capacity = total_units_for_villa(db, villa_id) * days_in_month

    return {
        "villa_id": villa_id,
        "total_bookings": total_bookings,
        "total_revenue": total_revenue,
        "avg_booking_value": round_half_up(total_revenue / paid_count) if paid_count else 0,
        "occupancy_rate": round_half_up(occupied_nights / capacity * 100, 2) if capacity else 0,
    }


# -------------------------------
# Seasonal pricing
# -------------------------------
def get_villa_price_for_date(db: Optional[Session], villa_id: str, day: date) -> float:
    villa = get_villa(db, villa_id)
    base_price = villa["base_price"] if isinstance(villa, dict) else villa.base_price
    if db is None:
        return base_price

    modifier = (
        db.query(func.max(PricingRule.price_modifier))
        .filter(
            PricingRule.is_active == True,
            PricingRule.start_date <= day,
            PricingRule.end_date >= day,
            (PricingRule.villa_id == villa_id) | (PricingRule.villa_id.is_(None)),
        )
        .scalar()
    )
    if not modifier:
        return base_price
    return round_half_up(base_price * modifier)


def create_pricing_rule(db: Session, data: dict) -> PricingRule:
    require_db(db)
    rule = PricingRule(**data)
    try:
        db.add(rule)
        db.commit()
        db.refresh(rule)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return rule
