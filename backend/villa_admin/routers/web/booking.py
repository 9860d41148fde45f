from datetime import date
from typing import Optional

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from villa_admin.auth.dependencies import admin_only
from villa_admin.database.session import get_db
from villa_admin.schemas.booking import (
    AdminBookingCreate,
    BookingActivityOut,
    BookingBulkStatus,
    BookingOut,
    BookingStatusUpdate,
    BookingUpdate,
    PaymentStatusUpdate,
    UnitAssignment,
)
from villa_admin.schemas.inventory import UnitOut
from villa_admin.schemas.villa import VillaOut
from villa_admin.services import booking_service, report_service
from villa_admin.utils.cache import invalidate_dashboard
from villa_admin.utils.pagination import paginate
from villa_admin.utils.responses import csv_response, serialize

router = APIRouter(prefix="/bookings", tags=["Bookings"])


def _booking_payload(db, booking, warning=None):
    unit = booking_service.get_booking_unit(db, booking)
    payload = {
        "success": True,
        "booking": serialize(BookingOut, booking),
        "unit": serialize(UnitOut, unit) if unit else None,
    }
    if warning:
        payload["warning"] = warning
    return payload


# =================================================
# LIST
# =================================================
@router.get("/", name="booking_list")
def booking_list(
    status: Optional[str] = None,
    payment_status: Optional[str] = None,
    villa_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=200),
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    query = booking_service.booking_query(
        db,
        status=status,
        payment_status=payment_status,
        villa_id=villa_id,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )
    result = paginate(query, page, per_page)
    result["items"] = serialize(BookingOut, result["items"])
    return result


@router.get("/stats", name="booking_stats")
def booking_stats(db: Session = Depends(get_db), current_user: dict = Depends(admin_only)):
    return booking_service.get_booking_stats(db)


@router.get("/export", name="booking_export")
def booking_export(
    status: Optional[str] = None,
    villa_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    bookings = booking_service.get_bookings(
        db, status=status, villa_id=villa_id, date_from=date_from, date_to=date_to
    )
    return csv_response(report_service.bookings_csv(bookings), "bookings")


@router.get("/available-villas", name="booking_available_villas")
def booking_available_villas(
    check_in: date,
    check_out: date,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    results = booking_service.get_available_villas(db, check_in, check_out)
    return [
        {"villa": serialize(VillaOut, row["villa"]), **row["availability"].to_dict()}
        for row in results
    ]


# =================================================
# CREATE
# =================================================
@router.post("/", name="booking_create", status_code=201)
def booking_create(
    payload: AdminBookingCreate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    booking, warning = booking_service.create_booking(
        db, payload.model_dump(), admin=True, performed_by=current_user["email"]
    )
    invalidate_dashboard(request)
    return _booking_payload(db, booking, warning)


@router.post("/bulk-status", name="booking_bulk_status")
def booking_bulk_status(
    payload: BookingBulkStatus,
    request: Request,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    result = booking_service.bulk_update_booking_status(
        db, payload.booking_ids, payload.status, force=payload.force
    )
    invalidate_dashboard(request)
    return {"success": True, **result}


# =================================================
# DETAIL
# =================================================
@router.get("/{key}", name="booking_detail")
def booking_detail(key: str, db: Session = Depends(get_db), current_user: dict = Depends(admin_only)):
    booking = booking_service.get_booking(db, key)
    return _booking_payload(db, booking)


@router.get("/{key}/activities", name="booking_activities")
def booking_activities(key: str, db: Session = Depends(get_db), current_user: dict = Depends(admin_only)):
    return serialize(BookingActivityOut, booking_service.get_booking_activities(db, key))


@router.put("/{key}", name="booking_update")
def booking_update(
    key: str,
    payload: BookingUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    booking, warning = booking_service.update_booking(
        db, key, payload.model_dump(exclude_unset=True), performed_by=current_user["email"]
    )
    invalidate_dashboard(request)
    return _booking_payload(db, booking, warning)


@router.patch("/{key}/status", name="booking_status_update")
def booking_status_update(
    key: str,
    payload: BookingStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    booking, warning = booking_service.update_booking_status(
        db,
        key,
        payload.status,
        force=payload.force,
        admin_notes=payload.admin_notes,
        performed_by=current_user["email"],
    )
    invalidate_dashboard(request)
    return _booking_payload(db, booking, warning)


@router.patch("/{key}/payment", name="booking_payment_update")
def booking_payment_update(
    key: str,
    payload: PaymentStatusUpdate,
    request: Request,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    booking = booking_service.update_payment_status(db, key, payload.payment_status, payload.payment_id)
    invalidate_dashboard(request)
    return _booking_payload(db, booking)


@router.post("/{key}/assign-unit", name="booking_assign_unit")
def booking_assign_unit(
    key: str,
    payload: UnitAssignment,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    assignment = booking_service.assign_booking_unit(db, key, payload.unit_id)
    return {"success": True, "unit": serialize(UnitOut, assignment.unit)}


@router.delete("/{key}", name="booking_delete")
def booking_delete(
    key: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    booking_service.delete_booking(db, key)
    invalidate_dashboard(request)
    return {"success": True}
