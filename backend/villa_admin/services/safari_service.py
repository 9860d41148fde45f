import logging
from datetime import date, datetime, time, timedelta
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from villa_admin.models.safari import SafariOption, SafariQuery
from villa_admin.services import demo_data
from villa_admin.utils.errors import (
    DuplicateEntryError,
    NotFoundError,
    ValidationFailed,
    handle_db_error,
    require_db,
)
from villa_admin.utils.validation import slugify

logger = logging.getLogger(__name__)

CONFIRMED_DEFAULT_RESPONSE = "Query confirmed by admin"


# =================================================
# SAFARI OPTIONS
# =================================================
def get_safari_options(db: Optional[Session]):
    if db is None:
        return [o for o in demo_data.demo_safari_options() if o["is_active"]]
    return (
        db.query(SafariOption)
        .filter(SafariOption.is_active == True)
        .order_by(SafariOption.name)
        .all()
    )


def get_all_safari_options(db: Optional[Session]):
    if db is None:
        return demo_data.demo_safari_options()
    return db.query(SafariOption).order_by(SafariOption.name).all()


def get_safari_option(db: Optional[Session], option_id: str):
    if db is None:
        for option in demo_data.demo_safari_options():
            if option["id"] == option_id:
                return option
        raise NotFoundError("Safari option not found")

    option = db.query(SafariOption).filter(SafariOption.id == option_id).first()
    if not option:
        raise NotFoundError("Safari option not found")
    return option


def create_safari_option(db: Session, data: dict) -> SafariOption:
    require_db(db)

    option_id = data.pop("id", None) or slugify(data["name"])
    if db.query(SafariOption).filter(SafariOption.id == option_id).first():
        raise DuplicateEntryError()

    option = SafariOption(id=option_id, **data)
    try:
        db.add(option)
        db.commit()
        db.refresh(option)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return option


def update_safari_option(db: Session, option_id: str, data: dict) -> SafariOption:
    require_db(db)
    option = get_safari_option(db, option_id)
    for field, value in data.items():
        setattr(option, field, value)

    try:
        db.commit()
        db.refresh(option)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return option


def toggle_safari_option(db: Session, option_id: str) -> SafariOption:
    require_db(db)
    option = get_safari_option(db, option_id)
    return update_safari_option(db, option_id, {"is_active": not option.is_active})


def delete_safari_option(db: Session, option_id: str) -> None:
    require_db(db)
    option = get_safari_option(db, option_id)
    try:
        db.query(SafariQuery).filter(SafariQuery.safari_option_id == option_id).update(
            {SafariQuery.safari_option_id: None}, synchronize_session=False
        )
        db.delete(option)
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)


# =================================================
# SAFARI QUERIES
# =================================================
def _matches(query: dict, status, safari_option_id, date_from, date_to, search) -> bool:
    if status and status != "all" and query["status"] != status:
        return False
    if safari_option_id and safari_option_id != "all" and query["safari_option_id"] != safari_option_id:
        return False
    if date_from and query["preferred_date"] < date_from:
        return False
    if date_to and query["preferred_date"] > date_to:
        return False
    if search:
        term = search.strip().lower()
        haystack = (query["guest_name"], query["email"], query["safari_name"])
        return any(term in value.lower() for value in haystack)
    return True


def get_safari_queries(
    db: Optional[Session],
    status: Optional[str] = None,
    safari_option_id: Optional[str] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    search: Optional[str] = None,
):
    if db is None:
        queries = [
            q for q in demo_data.demo_safari_queries()
            if _matches(q, status, safari_option_id, date_from, date_to, search)
        ]
        return sorted(queries, key=lambda q: q["created_at"], reverse=True)

    query = db.query(SafariQuery)
    if status and status != "all":
        query = query.filter(SafariQuery.status == status)
    if safari_option_id and safari_option_id != "all":
        query = query.filter(SafariQuery.safari_option_id == safari_option_id)
    if date_from:
        query = query.filter(SafariQuery.preferred_date >= date_from)
    if date_to:
        query = query.filter(SafariQuery.preferred_date <= date_to)
    if search:
        term = f"%{search.strip()}%"
        query = query.filter(or_(
            SafariQuery.guest_name.ilike(term),
            SafariQuery.email.ilike(term),
            SafariQuery.safari_name.ilike(term),
        ))

    return query.order_by(SafariQuery.created_at.desc(), SafariQuery.id.desc()).all()


def get_safari_query(db: Session, query_id: int) -> SafariQuery:
    require_db(db)
    query = db.query(SafariQuery).filter(SafariQuery.id == query_id).first()
    if not query:
        raise NotFoundError("Safari query not found")
    return query


def create_safari_query(db: Session, data: dict) -> SafariQuery:
    require_db(db)

    option_id = data.get("safari_option_id")
    if option_id:
        option = get_safari_option(db, option_id)
        data.setdefault("safari_name", None)
        data["safari_name"] = data["safari_name"] or option.name
        if data.get("number_of_persons", 1) > option.max_persons:
            raise ValidationFailed(f"Maximum {option.max_persons} persons allowed for this safari")
    elif not data.get("safari_name"):
        raise ValidationFailed("Please select a safari")

    safari_query = SafariQuery(status="pending", **data)
    try:
        db.add(safari_query)
        db.commit()
        db.refresh(safari_query)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)

    logger.info("Safari query %s received for %s", safari_query.id, safari_query.safari_name)
    return safari_query


def update_safari_query(db: Session, query_id: int, data: dict) -> SafariQuery:
    safari_query = get_safari_query(db, query_id)
    for field, value in data.items():
        setattr(safari_query, field, value)

    try:
        db.commit()
        db.refresh(safari_query)
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)
    return safari_query


def respond_to_query(
    db: Session,
    query_id: int,
    response: str,
    admin_notes: Optional[str] = None,
    responded_by: Optional[str] = None,
) -> SafariQuery:
    """Record the admin's answer. Answering a query also confirms it."""
    data = {
        "response": response,
        "responded_at": datetime.now(),
        "responded_by": responded_by or "admin",
        "status": "confirmed",
    }
    if admin_notes is not None:
        data["admin_notes"] = admin_notes
    return update_safari_query(db, query_id, data)


def update_query_status(db: Session, query_id: int, status: str, admin_notes: Optional[str] = None) -> SafariQuery:
    safari_query = get_safari_query(db, query_id)

    data = {"status": status}
    if admin_notes is not None:
        data["admin_notes"] = admin_notes
    if status == "confirmed" and not safari_query.response:
        data.update({
            "response": CONFIRMED_DEFAULT_RESPONSE,
            "responded_at": datetime.now(),
            "responded_by": "admin",
        })
    return update_safari_query(db, query_id, data)


def delete_safari_query(db: Session, query_id: int) -> None:
    safari_query = get_safari_query(db, query_id)
    try:
        db.delete(safari_query)
        db.commit()
    except SQLAlchemyError as exc:
        raise handle_db_error(db, exc)


def get_safari_query_stats(db: Optional[Session], today: Optional[date] = None) -> dict:
    today = today or date.today()
    month_start = datetime.combine(today.replace(day=1), time.min)
    # Weeks start on Sunday.
    week_start = datetime.combine(today - timedelta(days=(today.weekday() + 1) % 7), time.min)

    if db is None:
        queries = demo_data.demo_safari_queries()
        counts = {}
        for q in queries:
            counts[q["status"]] = counts.get(q["status"], 0) + 1
        this_month = len([q for q in queries if q["created_at"] >= month_start])
        this_week = len([q for q in queries if q["created_at"] >= week_start])
    else:
        counts = dict(
            db.query(SafariQuery.status, func.count(SafariQuery.id))
            .group_by(SafariQuery.status)
            .all()
        )
        this_month = db.query(SafariQuery).filter(SafariQuery.created_at >= month_start).count()
        this_week = db.query(SafariQuery).filter(SafariQuery.created_at >= week_start).count()

    return {
        "total": sum(counts.values()),
        "pending": counts.get("pending", 0),
        "confirmed": counts.get("confirmed", 0),
        "cancelled": counts.get("cancelled", 0),
        "completed": counts.get("completed", 0),
        "this_month": this_month,
        "this_week": this_week,
    }
