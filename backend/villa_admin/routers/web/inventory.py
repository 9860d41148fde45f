from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from villa_admin.auth.dependencies import admin_only
from villa_admin.database.session import get_db
from villa_admin.schemas.inventory import (
    BlockOut,
    UnitBlockCreate,
    UnitCreate,
    UnitOut,
    UnitStatusUpdate,
    UnitUpdate,
)
from villa_admin.services import inventory_service
from villa_admin.utils.responses import serialize

router = APIRouter(prefix="/inventory", tags=["Inventory"], dependencies=[Depends(admin_only)])


# =================================================
# UNITS
# =================================================
@router.get("/villas/{villa_id}/units", response_model=List[UnitOut], name="unit_list")
def unit_list(villa_id: str, db: Session = Depends(get_db)):
    return inventory_service.get_villa_units(db, villa_id)


@router.get("/villas/{villa_id}/availability", name="unit_availability")
def unit_availability(
    villa_id: str,
    check_in: date = Query(...),
    check_out: date = Query(...),
    db: Session = Depends(get_db)
):
    return inventory_service.get_available_units(db, villa_id, check_in, check_out).to_dict()


@router.get("/units/{unit_id}", response_model=UnitOut, name="unit_detail")
def unit_detail(unit_id: int, db: Session = Depends(get_db)):
    return inventory_service.get_unit(db, unit_id)


@router.post("/units", name="unit_create", status_code=201)
def unit_create(payload: UnitCreate, db: Session = Depends(get_db)):
    unit = inventory_service.create_unit(db, payload.model_dump())
    return {"success": True, "unit": serialize(UnitOut, unit)}


@router.put("/units/{unit_id}", name="unit_update")
def unit_update(unit_id: int, payload: UnitUpdate, db: Session = Depends(get_db)):
    unit = inventory_service.update_unit(db, unit_id, payload.model_dump(exclude_unset=True))
    return {"success": True, "unit": serialize(UnitOut, unit)}


@router.patch("/units/{unit_id}/status", name="unit_status_update")
def unit_status_update(unit_id: int, payload: UnitStatusUpdate, db: Session = Depends(get_db)):
    unit = inventory_service.update_unit_status(db, unit_id, payload.status, payload.notes)
    return {"success": True, "unit": serialize(UnitOut, unit)}


@router.delete("/units/{unit_id}", name="unit_delete")
def unit_delete(unit_id: int, db: Session = Depends(get_db)):
    inventory_service.delete_unit(db, unit_id)
    return {"success": True}


# =================================================
# BLOCKS
# =================================================
@router.get("/blocks", response_model=List[BlockOut], name="block_list")
def block_list(
    villa_id: Optional[str] = None,
    start: Optional[date] = None,
    end: Optional[date] = None,
    db: Session = Depends(get_db)
):
    return inventory_service.get_blocks(db, villa_id, start, end)


@router.post("/units/{unit_id}/blocks", name="unit_block", status_code=201)
def unit_block(unit_id: int, payload: UnitBlockCreate, db: Session = Depends(get_db)):
    block = inventory_service.block_unit(db, unit_id, payload.block_date, payload.block_type, payload.notes)
    return {"success": True, "block": serialize(BlockOut, block)}


@router.delete("/units/{unit_id}/blocks/{block_date}", name="unit_unblock")
def unit_unblock(unit_id: int, block_date: date, db: Session = Depends(get_db)):
    removed = inventory_service.unblock_unit(db, unit_id, block_date)
    return {"success": True, "removed": removed}
