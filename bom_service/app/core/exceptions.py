"""
Domain error kinds raised by BOM Service repositories and services.

Each kind carries the HTTP status and error type the error handler renders.
Anything that is not a ``BomServiceError`` is treated as an internal error.
"""

from typing import Any, Dict, Optional

from sqlalchemy.exc import IntegrityError

# SQLSTATE codes reported by PostgreSQL drivers
UNIQUE_VIOLATION = "23505"
FOREIGN_KEY_VIOLATION = "23503"


class BomServiceError(Exception):
    status_code: int = 500
    error_type: str = "internal_server_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class UnauthorizedError(BomServiceError):
    status_code = 401
    error_type = "authentication_error"


class ForbiddenError(BomServiceError):
    status_code = 403
    error_type = "permission_error"


class NotFoundError(BomServiceError):
    status_code = 404
    error_type = "not_found"


class InvalidInputError(BomServiceError):
    status_code = 400
    error_type = "value_error"


class ConstraintViolationError(BomServiceError):
    status_code = 409
    error_type = "constraint_violation"


class AlreadyExistsError(ConstraintViolationError):
    error_type = "already_exists"


class CategoryCycleError(ConstraintViolationError):
    error_type = "category_cycle"


def _sqlstate(exc: IntegrityError) -> Optional[str]:
    orig = getattr(exc, "orig", None)
    for attr in ("sqlstate", "pgcode"):
        code = getattr(orig, attr, None)
        if code:
            return str(code)
    return None


def is_unique_violation(exc: IntegrityError) -> bool:
    """True when the integrity error came from a unique constraint or index."""
    if _sqlstate(exc) == UNIQUE_VIOLATION:
        return True
    return "UNIQUE constraint failed" in str(getattr(exc, "orig", exc))


def is_foreign_key_violation(exc: IntegrityError) -> bool:
    if _sqlstate(exc) == FOREIGN_KEY_VIOLATION:
        return True
    return "FOREIGN KEY constraint failed" in str(getattr(exc, "orig", exc))


def translate_integrity_error(
    exc: IntegrityError, already_exists_message: str
) -> BomServiceError:
    """Map a database integrity error onto a domain error kind.

    Unique violations become ``AlreadyExistsError`` with the caller's message,
    foreign-key violations and anything else a plain
    ``ConstraintViolationError``.
    """
    if is_unique_violation(exc):
        return AlreadyExistsError(already_exists_message)
    if is_foreign_key_violation(exc):
        return ConstraintViolationError("Referenced record does not exist")
    return ConstraintViolationError("Database constraint violated")
