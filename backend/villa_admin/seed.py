"""
Populate a fresh database with the resort catalogue.

    python -m villa_admin.seed [--no-units] [--admin-email EMAIL --admin-password PASSWORD]
"""
import argparse
import logging

from villa_admin.core.config import settings
from villa_admin.core.logging import setup_logging
from villa_admin.database import session as db_session
from villa_admin.services.auth_service import create_admin_user
from villa_admin.services.seed_service import ensure_seed_data
from villa_admin.utils.errors import NotConfiguredError

logger = logging.getLogger("villa_admin.seed")


def main(argv=None):
    parser = argparse.ArgumentParser(description="Seed villas, packages, safari options and units.")
    parser.add_argument("--no-units", action="store_true", help="skip creating inventory units")
    parser.add_argument("--admin-email", help="also create an admin login")
    parser.add_argument("--admin-password")
    args = parser.parse_args(argv)

    setup_logging(settings.LOG_LEVEL)

    if db_session.engine is None:
        raise NotConfiguredError()

    db_session.init_db()
    db = db_session.SessionLocal()
    try:
        counts = ensure_seed_data(db, with_units=not args.no_units)
        logger.info("Seed complete: %s", counts)

        if args.admin_email and args.admin_password:
            create_admin_user(db, args.admin_email, args.admin_password)
    finally:
        db.close()
    return counts


if __name__ == "__main__":
    main()
