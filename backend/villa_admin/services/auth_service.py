import hmac
import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy.orm import Session

from villa_admin.core.config import settings
from villa_admin.core.security import hash_password, verify_password
from villa_admin.models.admin_user import AdminUser
from villa_admin.utils.errors import AuthenticationError, require_db

logger = logging.getLogger(__name__)

DEMO_ADMIN_ID = 0


def _demo_admin() -> dict:
    return {"id": DEMO_ADMIN_ID, "email": settings.ADMIN_EMAIL, "name": "Administrator", "role": "admin"}


def is_demo_credential(email: str, password: str) -> bool:
    return (
        hmac.compare_digest(email.strip().lower(), settings.ADMIN_EMAIL.lower())
        and hmac.compare_digest(password, settings.ADMIN_PASSWORD)
    )


def authenticate(db: Optional[Session], email: str, password: str) -> dict:
    """
    Check admin credentials against the admin_users table, falling back
    to the configured demo login.
    """
    if db is not None:
        user = (
            db.query(AdminUser)
            .filter(AdminUser.email == email.strip().lower(), AdminUser.is_active == True)
            .first()
        )
        if user and verify_password(password, user.password_hash):
            user.last_login = datetime.now(timezone.utc)
            db.commit()
            return {"id": user.id, "email": user.email, "name": user.name, "role": user.role}

    if is_demo_credential(email, password):
        return _demo_admin()

    logger.warning("Failed admin login for %s", email)
    raise AuthenticationError()


def get_admin(db: Optional[Session], user_id: int) -> Optional[dict]:
    if user_id == DEMO_ADMIN_ID:
        return _demo_admin()
    if db is None:
        return None

    user = db.query(AdminUser).filter(AdminUser.id == user_id, AdminUser.is_active == True).first()
    if not user:
        return None
    return {"id": user.id, "email": user.email, "name": user.name, "role": user.role}


def create_admin_user(db: Session, email: str, password: str, name: str = None) -> AdminUser:
    require_db(db)
    email = email.strip().lower()

    user = db.query(AdminUser).filter(AdminUser.email == email).first()
    if user:
        return user

    user = AdminUser(email=email, password_hash=hash_password(password), name=name, role="admin")
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info("Admin user %s created", email)
    return user
