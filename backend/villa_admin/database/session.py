import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from villa_admin.core.config import settings, is_database_configured
from villa_admin.database.base import Base

logger = logging.getLogger(__name__)

engine = None
SessionLocal = sessionmaker(autoflush=False)


def build_engine(url: str, **kwargs):
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, connect_args=connect_args, **kwargs)


def configure_database(url: str = None, **kwargs):
    """
    Bind the session factory to a database. Without a usable URL the
    service stays in demo mode and get_db() yields None.
    """
    global engine

    url = settings.DATABASE_URL if url is None else url
    if not is_database_configured(url):
        engine = None
        SessionLocal.configure(bind=None)
        logger.warning("DATABASE_URL not configured, running in demo mode")
        return None

    engine = build_engine(url, **kwargs)
    SessionLocal.configure(bind=engine)
    return engine


def init_db(bind=None):
    # Model modules register their tables on Base when imported.
    from villa_admin.models import admin_user, booking, inventory, package, safari, villa  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


def get_db():
    if engine is None:
        yield None
        return

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


configure_database()
