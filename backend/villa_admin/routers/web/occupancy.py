from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from villa_admin.auth.dependencies import admin_only
from villa_admin.database.session import get_db
from villa_admin.services import occupancy_service
from villa_admin.utils.errors import ValidationFailed

router = APIRouter(prefix="/occupancy", tags=["Occupancy"], dependencies=[Depends(admin_only)])


@router.get("/", name="occupancy_for_date")
def occupancy_for_date(day: Optional[date] = None, db: Session = Depends(get_db)):
    return occupancy_service.get_occupancy_for_date(db, day or date.today())


@router.get("/stats", name="occupancy_stats")
def occupancy_stats(day: Optional[date] = None, db: Session = Depends(get_db)):
    return occupancy_service.get_overall_stats(db, day or date.today())


@router.get("/range", name="occupancy_range")
def occupancy_range(start: date, end: date, db: Session = Depends(get_db)):
    if (end - start).days > 92:
        raise ValidationFailed("Occupancy range is limited to 92 days")
    return occupancy_service.get_occupancy_for_range(db, start, end)


@router.get("/weekly", name="occupancy_weekly")
def occupancy_weekly(start: Optional[date] = None, db: Session = Depends(get_db)):
    today = date.today()
    # Weeks start on Monday.
    start = start or today - timedelta(days=today.weekday())
    return occupancy_service.get_weekly_occupancy(db, start)


@router.get("/monthly", name="occupancy_monthly")
def occupancy_monthly(
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db)
):
    return occupancy_service.get_monthly_occupancy(db, year, month)


@router.get("/calendar/{villa_id}", name="occupancy_calendar")
def occupancy_calendar(
    villa_id: str,
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
    db: Session = Depends(get_db)
):
    return occupancy_service.get_availability_calendar(db, villa_id, year, month)
