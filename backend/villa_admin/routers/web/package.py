from typing import List

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

from villa_admin.auth.dependencies import admin_only
from villa_admin.database.session import get_db
from villa_admin.schemas.package import PackageBulkStatus, PackageCreate, PackageOut, PackageUpdate
from villa_admin.services import package_service
from villa_admin.utils.cache import invalidate_dashboard
from villa_admin.utils.responses import serialize

router = APIRouter(prefix="/packages", tags=["Packages"], dependencies=[Depends(admin_only)])


@router.get("/", response_model=List[PackageOut], name="package_list")
def package_list(db: Session = Depends(get_db)):
    return package_service.get_all_packages(db)


@router.get("/stats", name="package_stats")
def package_stats(db: Session = Depends(get_db)):
    return package_service.get_package_stats(db)


@router.get("/{package_id}", response_model=PackageOut, name="package_detail")
def package_detail(package_id: str, db: Session = Depends(get_db)):
    return package_service.get_package(db, package_id)


@router.get("/{package_id}/stats", name="package_detail_stats")
def package_detail_stats(package_id: str, db: Session = Depends(get_db)):
    return package_service.get_package_stats(db, package_id)


@router.post("/", name="package_create", status_code=201)
def package_create(payload: PackageCreate, request: Request, db: Session = Depends(get_db)):
    package = package_service.create_package(db, payload.model_dump())
    invalidate_dashboard(request)
    return {"success": True, "package": serialize(PackageOut, package)}


@router.put("/{package_id}", name="package_update")
def package_update(package_id: str, payload: PackageUpdate, request: Request, db: Session = Depends(get_db)):
    package = package_service.update_package(db, package_id, payload.model_dump(exclude_unset=True))
    invalidate_dashboard(request)
    return {"success": True, "package": serialize(PackageOut, package)}


@router.post("/{package_id}/toggle-status", name="package_toggle_status")
def package_toggle_status(package_id: str, request: Request, db: Session = Depends(get_db)):
    package = package_service.toggle_package_status(db, package_id)
    invalidate_dashboard(request)
    return {"success": True, "package": serialize(PackageOut, package)}


@router.post("/bulk-status", name="package_bulk_status")
def package_bulk_status(payload: PackageBulkStatus, request: Request, db: Session = Depends(get_db)):
    updated = package_service.bulk_update_package_status(db, payload.package_ids, payload.is_active)
    invalidate_dashboard(request)
    return {"success": True, "updated": updated}


@router.delete("/{package_id}", name="package_delete")
def package_delete(package_id: str, request: Request, db: Session = Depends(get_db)):
    package_service.delete_package(db, package_id)
    invalidate_dashboard(request)
    return {"success": True}
