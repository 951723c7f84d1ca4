"""Billing error codes

Every code a billing use case can return, grouped by category. The API
layer maps categories to HTTP status codes.
"""

from enum import Enum
from sqlalchemy.exc import IntegrityError
from libs.result import Error


class ErrorCategory(str, Enum):
    VALIDATION_ERROR = "validation_error"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    PRECONDITION_FAILED = "precondition_failed"
    INTERNAL = "internal"


# Validation
VALIDATION_ERROR = "VALIDATION_ERROR"

# Not found
CLIENT_NOT_FOUND = "CLIENT_NOT_FOUND"
INVOICE_NOT_FOUND = "INVOICE_NOT_FOUND"
EVENTS_NOT_FOUND = "EVENTS_NOT_FOUND"
EXCHANGE_RATE_NOT_FOUND = "EXCHANGE_RATE_NOT_FOUND"
SERVICE_NOT_FOUND = "SERVICE_NOT_FOUND"
CONTRACT_RATE_NOT_FOUND = "CONTRACT_RATE_NOT_FOUND"

# Conflict
INVOICE_ALREADY_ISSUED = "INVOICE_ALREADY_ISSUED"
EVENTS_LOCKED = "EVENTS_LOCKED"
EXCHANGE_RATE_LOCKED = "EXCHANGE_RATE_LOCKED"
DUPLICATE_INVOICE_NUMBER = "DUPLICATE_INVOICE_NUMBER"
DUPLICATE_EXCHANGE_RATE = "DUPLICATE_EXCHANGE_RATE"
DUPLICATE_SERVICE_CODE = "DUPLICATE_SERVICE_CODE"
DUPLICATE_CONTRACT_RATE = "DUPLICATE_CONTRACT_RATE"

# Precondition failed
FX_NOT_FOUND = "FX_NOT_FOUND"
NO_PENDING_EVENTS = "NO_PENDING_EVENTS"
INVALID_STATUS = "INVALID_STATUS"

ERROR_CATEGORIES = {
    VALIDATION_ERROR: ErrorCategory.VALIDATION_ERROR,
    CLIENT_NOT_FOUND: ErrorCategory.NOT_FOUND,
    INVOICE_NOT_FOUND: ErrorCategory.NOT_FOUND,
    EVENTS_NOT_FOUND: ErrorCategory.NOT_FOUND,
    EXCHANGE_RATE_NOT_FOUND: ErrorCategory.NOT_FOUND,
    SERVICE_NOT_FOUND: ErrorCategory.NOT_FOUND,
    CONTRACT_RATE_NOT_FOUND: ErrorCategory.NOT_FOUND,
    INVOICE_ALREADY_ISSUED: ErrorCategory.CONFLICT,
    EVENTS_LOCKED: ErrorCategory.CONFLICT,
    EXCHANGE_RATE_LOCKED: ErrorCategory.CONFLICT,
    DUPLICATE_INVOICE_NUMBER: ErrorCategory.CONFLICT,
    DUPLICATE_EXCHANGE_RATE: ErrorCategory.CONFLICT,
    DUPLICATE_SERVICE_CODE: ErrorCategory.CONFLICT,
    DUPLICATE_CONTRACT_RATE: ErrorCategory.CONFLICT,
    FX_NOT_FOUND: ErrorCategory.PRECONDITION_FAILED,
    NO_PENDING_EVENTS: ErrorCategory.PRECONDITION_FAILED,
    INVALID_STATUS: ErrorCategory.PRECONDITION_FAILED,
}


def category_of(code: str) -> ErrorCategory:
    """Category of an error code; unknown codes are internal failures"""
    return ERROR_CATEGORIES.get(code, ErrorCategory.INTERNAL)


def _is_foreign_key_violation(exc: IntegrityError) -> bool:
    text = str(exc.orig if exc.orig is not None else exc).lower()
    return "foreign key" in text


def integrity_error(exc: IntegrityError, duplicate_code: str, duplicate_message: str) -> Error:
    """
    Translate a data-store integrity violation

    Foreign key violations become VALIDATION_ERROR, everything else
    (unique constraints) becomes the given duplicate conflict code.
    """
    if _is_foreign_key_violation(exc):
        return Error(
            code=VALIDATION_ERROR,
            message="Referenced record does not exist",
            reason=str(exc.orig),
        )
    return Error(code=duplicate_code, message=duplicate_message, reason=str(exc.orig))
