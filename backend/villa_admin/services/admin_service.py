import logging
from datetime import date, datetime, time
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from villa_admin.core.config import Settings, is_database_configured, is_placeholder
from villa_admin.models.booking import Booking
from villa_admin.models.package import Package
from villa_admin.models.villa import Villa
from villa_admin.services import booking_service, occupancy_service
from villa_admin.utils.errors import require_db
from villa_admin.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

DASHBOARD_CACHE_KEY = "dashboard:stats"


def estimate_occupancy(total_bookings: int, total_villas: int) -> float:
    """Rough dashboard figure: bookings against a 30-day month per villa."""
    if not total_villas:
        return 0
    return round_half_up(min(total_bookings / (total_villas * 30) * 100, 100), 2)


def get_dashboard_stats(db: Session) -> dict:
    require_db(db)

    stats = booking_service.get_booking_stats(db)

    total_villas = db.query(Villa).count()
    active_villas = db.query(Villa).filter(Villa.status == "active").count()
    total_packages = db.query(Package).count()
    active_packages = db.query(Package).filter(Package.is_active == True).count()

    advance_count, advance_total = db.query(
        func.count(Booking.id),
        func.coalesce(func.sum(Booking.advance_amount), 0),
    ).filter(Booking.payment_status == "advance_paid").one()

    recent = (
        db.query(Booking)
        .order_by(Booking.created_at.desc(), Booking.id.desc())
        .limit(10)
        .all()
    )

    stats.update({
        "total_villas": total_villas,
        "active_villas": active_villas,
        "total_packages": total_packages,
        "active_packages": active_packages,
        "advance_payments": advance_count,
        "advance_revenue": float(advance_total),
        "occupancy_rate": estimate_occupancy(stats["total_bookings"], total_villas),
        "recent_bookings": [
            {
                "booking_id": b.booking_id,
                "guest_name": b.guest_name,
                "villa_name": b.villa_name,
                "check_in": b.check_in.isoformat(),
                "check_out": b.check_out.isoformat(),
                "total_amount": b.total_amount,
                "status": b.status,
                "payment_status": b.payment_status,
            }
            for b in recent
        ],
    })
    return stats


def get_villa_performance(db: Session) -> list:
    require_db(db)

    villas = db.query(Villa).order_by(Villa.name).all()
    bookings = db.query(Booking).all()

    performance = []
    for villa in villas:
        villa_bookings = [b for b in bookings if b.villa_id == villa.id]
        paid = [b for b in villa_bookings if b.payment_status == "paid"]
        last = max((b.created_at for b in villa_bookings if b.created_at), default=None)
        performance.append({
            "villa_id": villa.id,
            "villa_name": villa.name,
            "total_bookings": len(villa_bookings),
            "total_revenue": sum(b.total_amount for b in paid),
            "occupancy_rate": min(len(villa_bookings) * 5, 100),
            "last_booking_date": last,
        })
    return performance


def get_booking_analytics(db: Session, start: date, end: date) -> list:
    """Bookings and paid revenue per creation day."""
    require_db(db)

    bookings = (
        db.query(Booking)
        .filter(
            Booking.created_at >= datetime.combine(start, time.min),
            Booking.created_at <= datetime.combine(end, time.max),
        )
        .order_by(Booking.created_at)
        .all()
    )

    days = {}
    for booking in bookings:
        day = booking.created_at.date()
        entry = days.setdefault(day, {"date": day, "bookings": 0, "revenue": 0.0})
        entry["bookings"] += 1
        if booking.payment_status == "paid":
            entry["revenue"] += booking.total_amount
    return list(days.values())


def get_occupancy_overview(db: Optional[Session], day: Optional[date] = None) -> dict:
    return occupancy_service.get_overall_stats(db, day or date.today())


def cleanup_expired_holds(db: Session) -> int:
    return booking_service.cleanup_expired_holds(db)


def get_integration_status(settings: Settings) -> dict:
    def status(*values):
        return "configured" if all(not is_placeholder(v) for v in values) else "demo"

    return {
        "database": "configured" if is_database_configured(settings.DATABASE_URL) else "demo",
        "payment": status(settings.RAZORPAY_KEY_ID),
        "email": status(
            settings.EMAILJS_SERVICE_ID,
            settings.EMAILJS_TEMPLATE_ID,
            settings.EMAILJS_PUBLIC_KEY,
        ),
    }


def refresh_dashboard_cache(session_factory):
    """Build a cache refresher that recomputes dashboard stats with a fresh session."""

    def refresh(cache):
        generation = cache.generation
        db = session_factory()
        try:
            stats = get_dashboard_stats(db)
            if not cache.set_if_current(DASHBOARD_CACHE_KEY, stats, generation):
                logger.info("Dashboard refresh skipped, cache invalidated meanwhile")
        finally:
            db.close()

    return refresh
