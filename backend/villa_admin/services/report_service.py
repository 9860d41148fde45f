import logging
from datetime import date, datetime, time, timedelta
from typing import List, Optional

from sqlalchemy.orm import Session

from villa_admin.core.constants import (
    BOOKINGS_CSV_HEADERS,
    MONTH_LABELS,
    OCCUPANCY_CSV_HEADERS,
    REVENUE_CSV_HEADERS,
)
from villa_admin.models.booking import Booking
from villa_admin.services import occupancy_service
from villa_admin.utils.csv_export import to_csv
from villa_admin.utils.errors import ValidationFailed, require_db
from villa_admin.utils.numbers import round_half_up

logger = logging.getLogger(__name__)

PERIOD_DAYS = {"week": 7, "month": 30, "quarter": 90, "year": 365}


def _paid_bookings(db: Session, start: datetime, end: datetime) -> List[Booking]:
    return (
        db.query(Booking)
        .filter(
            Booking.payment_status == "paid",
            Booking.created_at >= start,
            Booking.created_at <= end,
        )
        .all()
    )


def _totals(bookings: List[Booking]) -> dict:
    revenue = sum(b.total_amount or 0 for b in bookings)
    return {
        "total_revenue": revenue,
        "villa_revenue": sum((b.villa_price or 0) * b.nights for b in bookings),
        "package_revenue": sum((b.package_price or 0) * b.nights for b in bookings),
        "tax_collected": sum(b.taxes or 0 for b in bookings),
        "total_bookings": len(bookings),
        "avg_booking_value": round_half_up(revenue / len(bookings)) if bookings else 0,
    }


def growth_rate(current: float, previous: float) -> float:
    if not previous:
        return 100.0 if current else 0.0
    return round_half_up((current - previous) / previous * 100, 1)


def get_monthly_revenue(db: Session, year: int) -> List[dict]:
    require_db(db)
    bookings = _paid_bookings(
        db,
        datetime(year, 1, 1),
        datetime.combine(date(year, 12, 31), time.max),
    )

    months = [{"period": label, "revenue": 0.0, "bookings": 0} for label in MONTH_LABELS]
    for booking in bookings:
        bucket = months[booking.created_at.month - 1]
        bucket["revenue"] += booking.total_amount or 0
        bucket["bookings"] += 1

    for bucket in months:
        bucket["avg_booking_value"] = (
            round_half_up(bucket["revenue"] / bucket["bookings"]) if bucket["bookings"] else 0
        )
    return months


def get_revenue_report(db: Session, period: str = "month", today: Optional[date] = None) -> dict:
    require_db(db)
    if period not in PERIOD_DAYS:
        raise ValidationFailed(f"Unknown report period: {period}")

    today = today or date.today()
    days = PERIOD_DAYS[period]
    end = datetime.combine(today, time.max)
    start = datetime.combine(today - timedelta(days=days - 1), time.min)
    previous_start = start - timedelta(days=days)

    current = _totals(_paid_bookings(db, start, end))
    previous = _totals(_paid_bookings(db, previous_start, start - timedelta(microseconds=1)))

    report = dict(current)
    report.update({
        "period": period,
        "start_date": start.date(),
        "end_date": today,
        "previous_revenue": previous["total_revenue"],
        "growth_rate": growth_rate(current["total_revenue"], previous["total_revenue"]),
        "monthly": get_monthly_revenue(db, today.year),
    })
    return report


# =================================================
# CSV EXPORTS
# =================================================
def bookings_csv(bookings: List[Booking]) -> str:
    return to_csv(BOOKINGS_CSV_HEADERS, (
        [
            b.booking_id,
            b.guest_name,
            b.email,
            b.phone,
            b.villa_name,
            b.check_in,
            b.check_out,
            b.guests,
            b.total_amount,
            b.status,
            b.payment_status,
            b.created_at,
        ]
        for b in bookings
    ))


def revenue_csv(monthly: List[dict]) -> str:
    return to_csv(REVENUE_CSV_HEADERS, (
        [row["period"], row["revenue"], row["bookings"], row["avg_booking_value"]]
        for row in monthly
    ))


def occupancy_rows(db: Optional[Session], start: date, end: date) -> List[list]:
    rows = []
    day = start
    while day <= end:
        for villa in occupancy_service.get_occupancy_for_date(db, day):
            for booking in villa["bookings"]:
                rows.append([
                    day,
                    villa["villa_name"],
                    booking["unit_number"],
                    booking["guest_name"],
                    booking["email"],
                    booking["phone"],
                    booking["guests"],
                    booking["check_in"],
                    booking["check_out"],
                    booking["status"],
                ])
        day += timedelta(days=1)
    return rows


def occupancy_csv(db: Optional[Session], start: date, end: date) -> str:
    if end < start:
        raise ValidationFailed("End date must not be before start date")
    if (end - start).days > 92:
        raise ValidationFailed("Occupancy export is limited to 92 days")
    return to_csv(OCCUPANCY_CSV_HEADERS, occupancy_rows(db, start, end))
