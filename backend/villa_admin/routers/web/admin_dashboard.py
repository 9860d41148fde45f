import logging
from datetime import date, timedelta
from typing import Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from villa_admin.auth.dependencies import admin_only
from villa_admin.core.config import settings
from villa_admin.database.session import get_db
from villa_admin.services import admin_service
from villa_admin.services.seed_service import ensure_seed_data
from villa_admin.utils.cache import get_cache, invalidate_dashboard
from villa_admin.utils.errors import require_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/admin/dashboard", tags=["Admin Dashboard"], dependencies=[Depends(admin_only)])


@router.get("/stats", name="dashboard_stats")
def dashboard_stats(request: Request, db: Session = Depends(get_db)):
    require_db(db)
    cache = get_cache(request)
    if cache is None:
        return admin_service.get_dashboard_stats(db)
    return cache.get_or_set(
        admin_service.DASHBOARD_CACHE_KEY,
        lambda: admin_service.get_dashboard_stats(db),
    )


@router.get("/performance", name="dashboard_performance")
def dashboard_performance(db: Session = Depends(get_db)):
    return admin_service.get_villa_performance(db)


@router.get("/analytics", name="dashboard_analytics")
def dashboard_analytics(
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: Session = Depends(get_db)
):
    end = end or date.today()
    start = start or end - timedelta(days=29)
    return admin_service.get_booking_analytics(db, start, end)


@router.get("/occupancy", name="dashboard_occupancy")
def dashboard_occupancy(day: Optional[date] = None, db: Session = Depends(get_db)):
    return admin_service.get_occupancy_overview(db, day)


@router.get("/integrations", name="dashboard_integrations")
def dashboard_integrations():
    return admin_service.get_integration_status(settings)


@router.post("/cleanup-holds", name="dashboard_cleanup_holds")
def dashboard_cleanup_holds(db: Session = Depends(get_db)):
    removed = admin_service.cleanup_expired_holds(db)
    return {"success": True, "removed": removed}


@router.post("/seed", name="dashboard_seed")
def dashboard_seed(request: Request, db: Session = Depends(get_db)):
    require_db(db)
    counts = ensure_seed_data(db)
    logger.info("Seed requested from dashboard: %s", counts)
    invalidate_dashboard(request)
    return {"success": True, "created": counts}
