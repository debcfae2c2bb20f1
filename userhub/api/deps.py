"""Auth dependencies: authentication gate (get_current_user) and role gate (require_role)."""

import logging
from collections.abc import Callable
from typing import Annotated

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from userhub.core.config import get_settings
from userhub.core.database import get_db
from userhub.core.errors import (
    AuthenticationError,
    AuthorizationError,
    InvalidTokenError,
    internal_errors,
)
from userhub.core.security import TokenError, TokenService, get_token_service
from userhub.crud.user import get_user_by_id
from userhub.models.user import Role
from userhub.schemas.auth import AuthenticatedUser

logger = logging.getLogger(__name__)
security = HTTPBearer(auto_error=False)

MISSING_TOKEN_MESSAGE = "Missing token"
INVALID_TOKEN_MESSAGE = "Invalid token"
FORBIDDEN_MESSAGE = "Forbidden, insufficient permission"


def extract_token(
    request: Request, credentials: HTTPAuthorizationCredentials | None
) -> str | None:
    """Access-token cookie wins over the Authorization: Bearer header."""
    cookie_token = request.cookies.get(get_settings().ACCESS_TOKEN_COOKIE_NAME)
    if cookie_token:
        return cookie_token
    if credentials is not None and credentials.credentials:
        return credentials.credentials
    return None


def get_current_user(
    request: Request,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(security)],
    db: Annotated[Session, Depends(get_db)],
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthenticatedUser:
    """
    Dependency: require a valid access token and return the user it names.
    401 if no token is presented, 403 if it is invalid, expired, or its user is gone.
    """
    token = extract_token(request, credentials)
    if token is None:
        raise AuthenticationError(
            MISSING_TOKEN_MESSAGE, headers={"WWW-Authenticate": "Bearer"}
        )
    try:
        claims = tokens.verify(token)
    except TokenError as e:
        logger.info(
            "Rejected access token",
            extra={"reason": type(e).__name__, "path": request.url.path},
        )
        raise InvalidTokenError(INVALID_TOKEN_MESSAGE) from e

    with internal_errors("authenticate", db):
        user = get_user_by_id(db, claims.id)
    if user is None:
        logger.info(
            "Rejected access token",
            extra={"reason": "user_not_found", "user_id": claims.id},
        )
        raise InvalidTokenError(INVALID_TOKEN_MESSAGE)
    return AuthenticatedUser.model_validate(user)


def require_role(*roles: Role) -> Callable[[AuthenticatedUser], AuthenticatedUser]:
    """Build a dependency that admits only identities whose role is in roles (exact match)."""
    allowed = frozenset(roles)

    def dependency(
        current_user: Annotated[AuthenticatedUser, Depends(get_current_user)],
    ) -> AuthenticatedUser:
        if current_user.role not in allowed:
            logger.info(
                "Denied by role",
                extra={"user_id": current_user.id, "role": current_user.role.value},
            )
            raise AuthorizationError(FORBIDDEN_MESSAGE)
        return current_user

    return dependency


require_admin = require_role(Role.ADMIN)
AdminUser = Annotated[AuthenticatedUser, Depends(require_admin)]
DbSession = Annotated[Session, Depends(get_db)]
