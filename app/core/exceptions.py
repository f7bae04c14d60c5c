"""
Custom exception classes for service operations and global error handling
"""

from typing import Optional
from fastapi import status


class ServiceError(Exception):
    """Base exception for every failure that maps onto a structured error response"""

    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        detail: Optional[str] = None
    ):
        self.message = message
        self.status_code = status_code
        self.detail = detail
        super().__init__(self.message)


class InvalidRequestError(ServiceError):
    """Missing or malformed required field"""

    def __init__(self, message: str, field: str = None, detail: Optional[str] = None):
        self.field = field
        super().__init__(message, status.HTTP_400_BAD_REQUEST, detail)


class InvalidYearError(InvalidRequestError):
    """Quota year outside the accepted bounds"""

    def __init__(self, year, minimum: int, maximum: int):
        super().__init__(
            "Invalid year",
            field="year",
            detail=f"{year} is outside {minimum}..{maximum}"
        )


class EmptyUploadError(InvalidRequestError):
    """Upload carries no content or no worksheet"""

    def __init__(self, message: str = "Upload is empty"):
        super().__init__(message, field="contentBase64")


class UnauthenticatedError(ServiceError):
    """Missing, malformed or expired bearer token"""

    def __init__(self, message: str = "Could not validate credentials", detail: Optional[str] = None):
        super().__init__(message, status.HTTP_401_UNAUTHORIZED, detail)


class InvalidCredentialError(UnauthenticatedError):
    """PIN did not match the stored credential"""

    def __init__(self):
        super().__init__("Invalid PIN")


class ForbiddenError(ServiceError):
    """Role or association-scope violation"""

    def __init__(self, message: str = "Forbidden", detail: Optional[str] = None):
        super().__init__(message, status.HTTP_403_FORBIDDEN, detail)


class AccountDisabledError(ForbiddenError):
    def __init__(self, code: str):
        super().__init__("Account is disabled", detail=code)


class NotFoundError(ServiceError):
    """Referenced document does not exist"""

    def __init__(self, resource: str = "Document", identifier: str = None):
        if identifier:
            message = f"{resource} '{identifier}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(message, status.HTTP_404_NOT_FOUND)


class AccountNotFoundError(NotFoundError):
    def __init__(self, code: str):
        super().__init__("Account", code)


class ConflictError(ServiceError):
    """Duplicate unique key on create"""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message, status.HTTP_409_CONFLICT, detail)


class MisconfigurationError(ServiceError):
    """Missing server-side secret or credential field"""

    def __init__(self, message: str, detail: Optional[str] = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, detail)


class MissingCredentialError(MisconfigurationError):
    def __init__(self, code: str):
        super().__init__("Account has no usable PIN credential", detail=code)


class DocumentDecodeError(MisconfigurationError):
    """A stored document does not match its typed record"""

    def __init__(self, collection: str, document_id: str, reason: str):
        self.collection = collection
        self.document_id = document_id
        super().__init__(
            f"Stored {collection} document could not be decoded",
            detail=f"{collection}/{document_id}: {reason}"
        )


class UpstreamError(ServiceError):
    """Unexpected document store failure"""

    def __init__(self, message: str = "Database operation failed", detail: Optional[str] = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, detail)


def create_error_response(error: ServiceError) -> dict:
    """
    Create a standardized error response from ServiceError

    Args:
        error: ServiceError instance

    Returns:
        Dictionary with error details in standardized format
    """
    response = {
        "ok": False,
        "message": error.message,
        "error_type": error.__class__.__name__
    }

    if error.detail:
        response["detail"] = error.detail

    return response
