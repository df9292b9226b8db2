"""Translation of storage constraint violations into HTTP errors"""

import logging
from typing import Optional

from fastapi import HTTPException
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"
CHECK_VIOLATION = "23514"

# SQLite has no SQLSTATE, only the message text
_SQLITE_MARKERS = {
    UNIQUE_VIOLATION: "UNIQUE constraint failed",
    FOREIGN_KEY_VIOLATION: "FOREIGN KEY constraint failed",
    CHECK_VIOLATION: "CHECK constraint failed",
}


def _sqlstate(error: IntegrityError) -> Optional[str]:
    code = getattr(error.orig, "pgcode", None)
    if code:
        return code
    message = str(error.orig)
    for state, marker in _SQLITE_MARKERS.items():
        if marker in message:
            return state
    return None


def translate_integrity_error(error: IntegrityError, entity: str = "record") -> HTTPException:
    """
    Map a constraint violation to a domain-meaningful HTTPException.

    unique -> 409 conflict, foreign key -> 400 invalid reference,
    check -> 400 invalid format, anything else -> 500.
    """
    state = _sqlstate(error)
    logger.warning(f"⚠️ Integrity error on {entity} (sqlstate={state}): {error.orig}")

    if state == UNIQUE_VIOLATION:
        if entity == "appointment":
            return HTTPException(
                status_code=409, detail="Appointment conflict detected - time slot already booked"
            )
        return HTTPException(status_code=409, detail=f"Conflicting {entity} already exists")
    if state == FOREIGN_KEY_VIOLATION:
        return HTTPException(status_code=400, detail="Invalid client or agent ID provided")
    if state == CHECK_VIOLATION:
        return HTTPException(status_code=400, detail=f"Invalid {entity} data format")
    return HTTPException(status_code=500, detail=f"Failed to save {entity}: {error.orig}")


def run_write(db: Session, operation: str, entity: str, func, *args, **kwargs):
    """
    Run a repository write, rolling back the session on any failure.

    HTTPExceptions raised inside pass through unchanged; integrity errors are
    translated; anything else becomes a 500 carrying the underlying message.
    """
    try:
        return func(*args, **kwargs)
    except HTTPException:
        db.rollback()
        raise
    except IntegrityError as e:
        db.rollback()
        raise translate_integrity_error(e, entity) from e
    except Exception as e:
        db.rollback()
        logger.error(f"❌ {operation} failed: {e}")
        raise HTTPException(status_code=500, detail=f"{operation} failed: {e}") from e
