from typing import List

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from villa_admin.auth.dependencies import admin_only
from villa_admin.database.session import get_db
from villa_admin.schemas.safari import SafariOptionCreate, SafariOptionOut, SafariOptionUpdate
from villa_admin.services import safari_service
from villa_admin.utils.responses import serialize

router = APIRouter(prefix="/safari-options", tags=["Safari Options"], dependencies=[Depends(admin_only)])


@router.get("/", response_model=List[SafariOptionOut], name="safari_option_list")
def safari_option_list(db: Session = Depends(get_db)):
    return safari_service.get_all_safari_options(db)


@router.get("/{option_id}", response_model=SafariOptionOut, name="safari_option_detail")
def safari_option_detail(option_id: str, db: Session = Depends(get_db)):
    return safari_service.get_safari_option(db, option_id)


@router.post("/", name="safari_option_create", status_code=201)
def safari_option_create(payload: SafariOptionCreate, db: Session = Depends(get_db)):
    option = safari_service.create_safari_option(db, payload.model_dump())
    return {"success": True, "option": serialize(SafariOptionOut, option)}


@router.put("/{option_id}", name="safari_option_update")
def safari_option_update(option_id: str, payload: SafariOptionUpdate, db: Session = Depends(get_db)):
    option = safari_service.update_safari_option(db, option_id, payload.model_dump(exclude_unset=True))
    return {"success": True, "option": serialize(SafariOptionOut, option)}


@router.post("/{option_id}/toggle-status", name="safari_option_toggle")
def safari_option_toggle(option_id: str, db: Session = Depends(get_db)):
    option = safari_service.toggle_safari_option(db, option_id)
    return {"success": True, "option": serialize(SafariOptionOut, option)}


@router.delete("/{option_id}", name="safari_option_delete")
def safari_option_delete(option_id: str, db: Session = Depends(get_db)):
    safari_service.delete_safari_option(db, option_id)
    return {"success": True}
