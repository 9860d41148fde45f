import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from villa_admin.core.constants import VILLA_INVENTORY
from villa_admin.models.inventory import VillaUnit
from villa_admin.models.package import Package
from villa_admin.models.safari import SafariOption
from villa_admin.models.villa import Villa
from villa_admin.services import demo_data
from villa_admin.utils.errors import handle_db_error, require_db

logger = logging.getLogger(__name__)


def _insert_missing(db: Session, model, rows) -> int:
    existing = {row_id for (row_id,) in db.query(model.id).all()}
    added = 0
    for row in rows:
        if row["id"] in existing:
            continue
        db.add(model(**row))
        added += 1
    return added


def ensure_inventory_units(db: Session) -> int:
    """Create the standard units for villas that have no inventory rows yet."""
    require_db(db)
    added = 0

    for villa_id, inventory in VILLA_INVENTORY.items():
        if not db.query(Villa.id).filter(Villa.id == villa_id).first():
            continue
        if db.query(VillaUnit.id).filter(VillaUnit.villa_id == villa_id).first():
            continue

        for unit in demo_data.demo_units(villa_id):
            db.add(VillaUnit(
                villa_id=villa_id,
                unit_number=unit["unit_number"],
                room_type=inventory["room_type"],
                floor=unit["floor"],
                view_type=unit["view_type"],
                amenities=unit["amenities"],
                status="available",
            ))
            added += 1

    try:
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return added


def ensure_seed_data(db: Session, with_units: bool = True) -> dict:
    """
    Insert the demo catalogue rows that are missing. Safe to run repeatedly;
    existing rows are never modified.
    """
    require_db(db)

    try:
        counts = {
            "villas": _insert_missing(db, Villa, demo_data.demo_villas()),
            "packages": _insert_missing(db, Package, demo_data.demo_packages()),
            "safari_options": _insert_missing(db, SafariOption, demo_data.demo_safari_options()),
        }
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    counts["units"] = ensure_inventory_units(db) if with_units else 0

    if any(counts.values()):
        logger.info("Seed data inserted: %s", counts)
    return counts
