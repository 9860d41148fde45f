from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from villa_admin.auth.dependencies import admin_only
from villa_admin.database.session import get_db
from villa_admin.services import report_service
from villa_admin.utils.responses import csv_response

router = APIRouter(prefix="/reports", tags=["Reports"], dependencies=[Depends(admin_only)])


# =================================================
# REVENUE
# =================================================
@router.get("/revenue", name="revenue_report")
def revenue_report(period: str = "month", db: Session = Depends(get_db)):
    return report_service.get_revenue_report(db, period)


@router.get("/revenue/monthly", name="revenue_monthly")
def revenue_monthly(year: Optional[int] = None, db: Session = Depends(get_db)):
    return report_service.get_monthly_revenue(db, year or date.today().year)


# =================================================
# CSV EXPORTS
# =================================================
@router.get("/revenue/export", name="revenue_export")
def revenue_export(year: Optional[int] = None, db: Session = Depends(get_db)):
    monthly = report_service.get_monthly_revenue(db, year or date.today().year)
    return csv_response(report_service.revenue_csv(monthly), "revenue")


@router.get("/occupancy/export", name="occupancy_export")
def occupancy_export(start: date, end: date, db: Session = Depends(get_db)):
    return csv_response(report_service.occupancy_csv(db, start, end), "occupancy")
