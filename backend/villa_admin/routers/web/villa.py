from datetime import date
from typing import List

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from villa_admin.auth.dependencies import admin_only
from villa_admin.database.session import get_db
from villa_admin.schemas.villa import (
    PricingRuleCreate,
    VillaBulkStatus,
    VillaCreate,
    VillaOut,
    VillaPricingUpdate,
    VillaUpdate,
)
from villa_admin.services import inventory_service, villa_service
from villa_admin.utils.cache import invalidate_dashboard
from villa_admin.utils.responses import serialize

router = APIRouter(prefix="/villas", tags=["Villas"], dependencies=[Depends(admin_only)])


# =================================================
# LIST / DETAIL
# =================================================
@router.get("/", response_model=List[VillaOut], name="villa_list")
def villa_list(db: Session = Depends(get_db)):
    return villa_service.get_all_villas(db)


@router.get("/active", response_model=List[VillaOut], name="villa_active_list")
def villa_active_list(db: Session = Depends(get_db)):
    return villa_service.get_active_villas(db)


@router.get("/inventory", name="villa_inventory")
def villa_inventory(db: Session = Depends(get_db)):
    return {"data": inventory_service.get_villa_inventory(db)}


@router.get("/{villa_id}", response_model=VillaOut, name="villa_detail")
def villa_detail(villa_id: str, db: Session = Depends(get_db)):
    return villa_service.get_villa(db, villa_id)


@router.get("/{villa_id}/stats", name="villa_stats")
def villa_stats(villa_id: str, db: Session = Depends(get_db)):
    return villa_service.get_villa_stats(db, villa_id)


@router.get("/{villa_id}/price", name="villa_price_for_date")
def villa_price_for_date(
    villa_id: str,
    day: date = Query(...),
    db: Session = Depends(get_db)
):
    return {
        "villa_id": villa_id,
        "date": day,
        "price": villa_service.get_villa_price_for_date(db, villa_id, day),
    }


# =================================================
# MUTATIONS
# =================================================
@router.post("/", name="villa_create", status_code=201)
def villa_create(payload: VillaCreate, request: Request, db: Session = Depends(get_db)):
    villa = villa_service.create_villa(db, payload.model_dump())
    invalidate_dashboard(request)
    return {"success": True, "villa": serialize(VillaOut, villa)}


@router.put("/{villa_id}", name="villa_update")
def villa_update(villa_id: str, payload: VillaUpdate, request: Request, db: Session = Depends(get_db)):
    villa = villa_service.update_villa(db, villa_id, payload.model_dump(exclude_unset=True))
    invalidate_dashboard(request)
    return {"success": True, "villa": serialize(VillaOut, villa)}


@router.patch("/{villa_id}/pricing", name="villa_pricing_update")
def villa_pricing_update(villa_id: str, payload: VillaPricingUpdate, db: Session = Depends(get_db)):
    villa = villa_service.update_villa_pricing(db, villa_id, payload.base_price)
    return {"success": True, "villa": serialize(VillaOut, villa)}


@router.post("/{villa_id}/toggle-status", name="villa_toggle_status")
def villa_toggle_status(villa_id: str, request: Request, db: Session = Depends(get_db)):
    villa = villa_service.toggle_villa_status(db, villa_id)
    invalidate_dashboard(request)
    return {"success": True, "villa": serialize(VillaOut, villa)}


@router.post("/bulk-status", name="villa_bulk_status")
def villa_bulk_status(payload: VillaBulkStatus, request: Request, db: Session = Depends(get_db)):
    updated = villa_service.bulk_update_villa_status(db, payload.villa_ids, payload.status)
    invalidate_dashboard(request)
    return {"success": True, "updated": updated}


@router.post("/pricing-rules", name="pricing_rule_create", status_code=201)
def pricing_rule_create(payload: PricingRuleCreate, db: Session = Depends(get_db)):
    rule = villa_service.create_pricing_rule(db, payload.model_dump())
    return {"success": True, "id": rule.id}


@router.delete("/{villa_id}", name="villa_delete")
def villa_delete(villa_id: str, request: Request, db: Session = Depends(get_db)):
    villa_service.delete_villa(db, villa_id)
    invalidate_dashboard(request)
    return {"success": True}
