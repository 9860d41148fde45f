"""
Guest-facing endpoints used by the booking website. No login required.
"""
from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from villa_admin.database.session import get_db
from villa_admin.schemas.booking import BookingCreate, BookingHoldCreate, BookingOut, PriceQuote
from villa_admin.schemas.package import PackageOut
from villa_admin.schemas.safari import SafariOptionOut, SafariQueryCreate
from villa_admin.schemas.villa import VillaOut
from villa_admin.services import booking_service, package_service, safari_service, villa_service
from villa_admin.utils.cache import invalidate_dashboard
from villa_admin.utils.responses import serialize

router = APIRouter(prefix="/public", tags=["Public"])


# =================================================
# CATALOGUE
# =================================================
@router.get("/villas", response_model=List[VillaOut], name="public_villas")
def public_villas(db: Session = Depends(get_db)):
    return villa_service.get_active_villas(db)


@router.get("/villas/{villa_id}", response_model=VillaOut, name="public_villa_detail")
def public_villa_detail(villa_id: str, db: Session = Depends(get_db)):
    return villa_service.get_villa(db, villa_id)


@router.get("/packages", response_model=List[PackageOut], name="public_packages")
def public_packages(db: Session = Depends(get_db)):
    return package_service.get_active_packages(db)


@router.get("/safari-options", response_model=List[SafariOptionOut], name="public_safari_options")
def public_safari_options(db: Session = Depends(get_db)):
    return safari_service.get_safari_options(db)


# =================================================
# AVAILABILITY / PRICING
# =================================================
@router.get("/availability", name="public_availability")
def public_availability(check_in: date, check_out: date, db: Session = Depends(get_db)):
    results = booking_service.get_available_villas(db, check_in, check_out)
    return [
        {"villa": serialize(VillaOut, row["villa"]), **row["availability"].to_dict()}
        for row in results
    ]


@router.post("/quote", name="public_quote")
def public_quote(payload: PriceQuote, db: Session = Depends(get_db)):
    snapshot = booking_service.quote_price(
        db, payload.villa_id, payload.package_id, payload.check_in, payload.check_out
    )
    return snapshot.to_dict()


# =================================================
# BOOKINGS
# =================================================
@router.post("/booking-holds", name="public_booking_hold", status_code=201)
def public_booking_hold(payload: BookingHoldCreate, db: Session = Depends(get_db)):
    hold = booking_service.create_booking_hold(
        db, payload.session_id, payload.villa_id, payload.check_in, payload.check_out
    )
    return {"success": True, "expires_at": hold.expires_at.isoformat()}


@router.post("/bookings", name="public_booking_create", status_code=201)
def public_booking_create(payload: BookingCreate, request: Request, db: Session = Depends(get_db)):
    data = payload.model_dump()
    data["booking_source"] = "website"

    booking, warning = booking_service.create_booking(db, data)
    invalidate_dashboard(request)

    result = {"success": True, "booking": serialize(BookingOut, booking)}
    if warning:
        result["warning"] = warning
    return result


@router.post("/safari-queries", name="public_safari_query", status_code=201)
def public_safari_query(payload: SafariQueryCreate, db: Session = Depends(get_db)):
    query = safari_service.create_safari_query(db, payload.model_dump())
    return {"success": True, "id": query.id}
