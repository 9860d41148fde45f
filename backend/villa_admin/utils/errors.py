import logging

from sqlalchemy.exc import IntegrityError, NoResultFound, SQLAlchemyError

logger = logging.getLogger(__name__)

NOT_CONFIGURED_MESSAGE = "Database not configured. Please set DATABASE_URL first."


class ServiceError(Exception):
    code = "UNKNOWN_ERROR"
    status_code = 500
    default_message = "An unexpected error occurred. Please try again."

    def __init__(self, message: str = None, code: str = None, status_code: int = None):
        self.message = message or self.default_message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self):
        return {"success": False, "error": self.message, "code": self.code}


class NotConfiguredError(ServiceError):
    code = "NOT_CONFIGURED"
    status_code = 503
    default_message = NOT_CONFIGURED_MESSAGE


class NotFoundError(ServiceError):
    code = "NO_ROWS_FOUND"
    status_code = 404
    default_message = "Record not found."


class ValidationFailed(ServiceError):
    code = "VALIDATION_ERROR"
    status_code = 422
    default_message = "Invalid data."


class DeletionBlockedError(ServiceError):
    code = "DELETE_BLOCKED"
    status_code = 409
    default_message = "Cannot delete record that is still referenced."


class UnavailableError(ServiceError):
    code = "UNAVAILABLE"
    status_code = 409
    default_message = "Villa is no longer available for selected dates"


class InvalidTransitionError(ServiceError):
    code = "INVALID_TRANSITION"
    status_code = 409
    default_message = "Booking status change is not allowed."


class AuthenticationError(ServiceError):
    code = "AUTH_FAILED"
    status_code = 401
    default_message = "Invalid email or password"


class DuplicateEntryError(ServiceError):
    code = "DUPLICATE_ENTRY"
    status_code = 409
    default_message = "This record already exists. Please try with different details."


class ForeignKeyError(ServiceError):
    code = "FOREIGN_KEY_VIOLATION"
    status_code = 409
    default_message = "Referenced record not found. Please refresh and try again."


class DatabaseError(ServiceError):
    code = "DATABASE_ERROR"
    status_code = 500
    default_message = "A database error occurred. Please try again."


def _pgcode(exc):
    return getattr(getattr(exc, "orig", None), "pgcode", None)


def classify_error(exc: Exception) -> ServiceError:
    """
    Map a raised exception onto a user-readable ServiceError.

    Postgres error codes are checked first; SQLite reports the same
    violations only through the message text.
    """
    if isinstance(exc, ServiceError):
        return exc

    if isinstance(exc, NoResultFound):
        return NotFoundError()

    if isinstance(exc, IntegrityError):
        code = _pgcode(exc)
        text = str(getattr(exc, "orig", exc)).upper()
        if code == "23505" or "UNIQUE" in text:
            return DuplicateEntryError()
        if code == "23503" or "FOREIGN KEY" in text:
            return ForeignKeyError()
        return DatabaseError()

    if isinstance(exc, SQLAlchemyError):
        return DatabaseError()

    return ServiceError()


def handle_db_error(db, exc: Exception) -> ServiceError:
    """Roll back the session and return the classified error for re-raising."""
    if db is not None:
        db.rollback()
    error = classify_error(exc)
    logger.error("Database operation failed (%s): %s", error.code, exc)
    return error


def require_db(db):
    if db is None:
        raise NotConfiguredError()
    return db
