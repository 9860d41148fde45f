from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from villa_admin.auth.dependencies import admin_only
from villa_admin.database.session import get_db
from villa_admin.schemas.safari import (
    SafariQueryCreate,
    SafariQueryOut,
    SafariQueryRespond,
    SafariQueryStatus,
    SafariQueryUpdate,
)
from villa_admin.services import safari_service
from villa_admin.utils.responses import serialize

router = APIRouter(prefix="/safari-queries", tags=["Safari Queries"])


# =================================================
# LIST
# =================================================
@router.get("/", response_model=List[SafariQueryOut], name="safari_query_list")
def safari_query_list(
    status: Optional[str] = None,
    safari_option_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    return safari_service.get_safari_queries(
        db,
        status=status,
        safari_option_id=safari_option_id,
        date_from=date_from,
        date_to=date_to,
        search=search,
    )


@router.get("/stats", name="safari_query_stats")
def safari_query_stats(db: Session = Depends(get_db), current_user: dict = Depends(admin_only)):
    return safari_service.get_safari_query_stats(db)


@router.get("/{query_id}", response_model=SafariQueryOut, name="safari_query_detail")
def safari_query_detail(query_id: int, db: Session = Depends(get_db), current_user: dict = Depends(admin_only)):
    return safari_service.get_safari_query(db, query_id)


# =================================================
# MUTATIONS
# =================================================
@router.post("/", name="safari_query_create", status_code=201)
def safari_query_create(
    payload: SafariQueryCreate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    query = safari_service.create_safari_query(db, payload.model_dump())
    return {"success": True, "query": serialize(SafariQueryOut, query)}


@router.put("/{query_id}", name="safari_query_update")
def safari_query_update(
    query_id: int,
    payload: SafariQueryUpdate,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    query = safari_service.update_safari_query(db, query_id, payload.model_dump(exclude_unset=True))
    return {"success": True, "query": serialize(SafariQueryOut, query)}


@router.post("/{query_id}/respond", name="safari_query_respond")
def safari_query_respond(
    query_id: int,
    payload: SafariQueryRespond,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    query = safari_service.respond_to_query(
        db,
        query_id,
        payload.response,
        admin_notes=payload.admin_notes,
        responded_by=payload.responded_by or current_user["email"],
    )
    return {"success": True, "query": serialize(SafariQueryOut, query)}


@router.patch("/{query_id}/status", name="safari_query_status")
def safari_query_status(
    query_id: int,
    payload: SafariQueryStatus,
    db: Session = Depends(get_db),
    current_user: dict = Depends(admin_only)
):
    query = safari_service.update_query_status(db, query_id, payload.status, payload.admin_notes)
    return {"success": True, "query": serialize(SafariQueryOut, query)}


@router.delete("/{query_id}", name="safari_query_delete")
def safari_query_delete(query_id: int, db: Session = Depends(get_db), current_user: dict = Depends(admin_only)):
    safari_service.delete_safari_query(db, query_id)
    return {"success": True}
