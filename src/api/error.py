"""API error translation

Use case errors are raised as ClientError and rendered by the handler
registered in create_app as {"error": {"code", "message"}}.
"""

from typing import Optional
from fastapi import status
from libs.result import Error
from src.app.use_cases.billing.errors import ErrorCategory, category_of

STATUS_BY_CATEGORY = {
    ErrorCategory.VALIDATION_ERROR: status.HTTP_400_BAD_REQUEST,
    ErrorCategory.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCategory.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCategory.PRECONDITION_FAILED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCategory.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def status_for(code: str) -> int:
    return STATUS_BY_CATEGORY[category_of(code)]


class ClientError(Exception):
    """Use case error surfaced to the HTTP caller"""

    def __init__(self, error: Error, status_code: Optional[int] = None):
        super().__init__(error.message)
        self.error = error
        self.status_code = status_code or status_for(error.code)

    def to_dict(self) -> dict:
        return {"error": {"code": self.error.code, "message": self.error.message}}


def error_response(description: str, code: str, message: str) -> dict:
    """OpenAPI `responses=` entry documenting an error body"""
    return {
        "description": description,
        "content": {"application/json": {"example": {"error": {"code": code, "message": message}}}},
    }
