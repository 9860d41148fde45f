import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from villa_admin.models.booking import Booking
from villa_admin.models.package import Package
from villa_admin.services import demo_data
from villa_admin.utils.errors import (
    DeletionBlockedError,
    DuplicateEntryError,
    NotFoundError,
    handle_db_error,
    require_db,
)
from villa_admin.utils.validation import slugify

logger = logging.getLogger(__name__)


def get_all_packages(db: Optional[Session]):
    if db is None:
        return sorted(demo_data.demo_packages(), key=lambda p: p["name"])
    return db.query(Package).order_by(Package.name).all()


def get_active_packages(db: Optional[Session]):
    if db is None:
        packages = [p for p in demo_data.demo_packages() if p["is_active"]]
        return sorted(packages, key=lambda p: p["price"])

    return (
        db.query(Package)
        .filter(Package.is_active == True)
        .order_by(Package.price)
        .all()
    )


def get_package(db: Optional[Session], package_id: str):
    if db is None:
        for package in demo_data.demo_packages():
            if package["id"] == package_id:
                return package
        raise NotFoundError("Package not found")

    package = db.query(Package).filter(Package.id == package_id).first()
    if not package:
        raise NotFoundError("Package not found")
    return package


def create_package(db: Session, data: dict) -> Package:
    require_db(db)

    package_id = data.pop("id", None) or slugify(data["name"])
    if db.query(Package).filter(Package.id == package_id).first():
        raise DuplicateEntryError()

    package = Package(id=package_id, **data)
    try:
        db.add(package)
        db.commit()
        db.refresh(package)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    logger.info("Package %s created", package.id)
    return package


def update_package(db: Session, package_id: str, data: dict) -> Package:
    require_db(db)
    package = get_package(db, package_id)

    for field, value in data.items():
        setattr(package, field, value)

    try:
        db.commit()
        db.refresh(package)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return package


def delete_package(db: Session, package_id: str) -> None:
    require_db(db)
    package = get_package(db, package_id)

    has_bookings = db.query(Booking.id).filter(Booking.package_id == package_id).first()
    if has_bookings:
        raise DeletionBlockedError(
            "Cannot delete package with existing bookings. "
            "Please update or cancel bookings first."
        )

    try:
        db.delete(package)
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    logger.info("Package %s deleted", package_id)


def toggle_package_status(db: Session, package_id: str) -> Package:
    require_db(db)
    package = get_package(db, package_id)
    return update_package(db, package_id, {"is_active": not package.is_active})


def bulk_update_package_status(db: Session, package_ids: List[str], is_active: bool) -> int:
    require_db(db)
    try:
        updated = (
            db.query(Package)
            .filter(Package.id.in_(package_ids))
            .update({Package.is_active: is_active}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return updated


def popularity_score(booking_count: int) -> int:
    if not booking_count:
        return 0
    return min(70 + booking_count * 2, 95)


def get_package_stats(db: Session, package_id: Optional[str] = None) -> dict:
    """
    Booking count and package revenue (nightly package price as booked),
    cancelled bookings excluded.
    """
    require_db(db)

    query = db.query(
        Booking.package_id,
        func.count(Booking.id),
        func.coalesce(func.sum(Booking.package_price), 0),
    ).filter(
        Booking.package_id.isnot(None),
        Booking.status != "cancelled",
    )
    if package_id:
        get_package(db, package_id)
        query = query.filter(Booking.package_id == package_id)

    rows = query.group_by(Booking.package_id).all()

    per_package = {
        pid: {
            "package_id": pid,
            "total_bookings": count,
            "total_revenue": float(revenue),
            "popularity": popularity_score(count),
        }
        for pid, count, revenue in rows
    }

    if package_id:
        return per_package.get(package_id, {
            "package_id": package_id,
            "total_bookings": 0,
            "total_revenue": 0.0,
            "popularity": 0,
        })

    return {
        "total_bookings": sum(p["total_bookings"] for p in per_package.values()),
        "total_revenue": sum(p["total_revenue"] for p in per_package.values()),
        "packages": list(per_package.values()),
    }
