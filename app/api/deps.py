"""
Dependency functions for API endpoints
"""

from typing import Optional

import structlog
from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import ValidationError

from app.core.exceptions import ForbiddenError, MisconfigurationError, UnauthenticatedError
from app.core.security import verify_token
from app.db.document_store import DocumentStore
from app.schemas.auth import Identity

logger = structlog.get_logger()

# Bearer scheme; a missing header is reported through our own 401 body
bearer_scheme = HTTPBearer(auto_error=False)


def get_store(request: Request) -> DocumentStore:
    """Document store created in the application lifespan"""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise MisconfigurationError("Document store is not initialised")
    return store


async def get_current_identity(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Identity:
    """Verify the bearer token and return its claims"""
    if credentials is None or credentials.scheme.lower() != "bearer" or not credentials.credentials:
        raise UnauthenticatedError("Missing Bearer token")

    claims = verify_token(credentials.credentials)
    try:
        return Identity.model_validate(claims)
    except ValidationError:
        raise UnauthenticatedError("Invalid token", detail="Token claims are incomplete")


async def require_staff(identity: Identity = Depends(get_current_identity)) -> Identity:
    """Moderator, admin or super"""
    if not identity.staff:
        logger.warning("Forbidden staff-only access", code=identity.code, role=identity.role.value)
        raise ForbiddenError("Forbidden (staff only)")
    return identity

