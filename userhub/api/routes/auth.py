"""Register, login and logout. These establish identity, so they bypass the auth gate."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from userhub.api.deps import DbSession
from userhub.core.config import get_settings
from userhub.core.errors import AuthenticationError, internal_errors
from userhub.core.security import (
    TokenClaims,
    TokenService,
    dummy_password_hash,
    get_token_service,
    verify_password,
)
from userhub.crud import user as user_store
from userhub.models.user import Role, User
from userhub.schemas.auth import AuthResponse, LoginRequest, RegisterRequest
from userhub.schemas.user import MessageResponse, UserOut

logger = logging.getLogger(__name__)
router = APIRouter()

INVALID_CREDENTIALS_MESSAGE = "Invalid email or password"


def _token_for(user: User, tokens: TokenService) -> str:
    return tokens.issue(
        TokenClaims(id=user.id, email=user.email, username=user.username)
    )


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
def register(
    body: RegisterRequest,
    db: DbSession,
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthResponse:
    """Create a 'user'-role account and return it with an access token."""
    with internal_errors("register user", db):
        user = user_store.create_user(
            db,
            username=body.username,
            email=body.email,
            password=body.password,
            role=Role.USER,
        )
        token = _token_for(user, tokens)
    logger.info("User registered", extra={"user_id": user.id})
    return AuthResponse(
        message="User registered successfully",
        user=UserOut.model_validate(user),
        token=token,
    )


@router.post("/login", response_model=AuthResponse)
def login(
    body: LoginRequest,
    db: DbSession,
    tokens: Annotated[TokenService, Depends(get_token_service)],
) -> AuthResponse:
    """
    Authenticate with email and password; returns an access token.
    Send it as a cookie named access_token or as: Authorization: Bearer <token>
    """
    with internal_errors("login", db):
        user = user_store.get_user_by_email(db, body.email)
    stored_hash = user.password if user is not None else dummy_password_hash()
    if not verify_password(body.password, stored_hash) or user is None:
        logger.info("Login failed", extra={"reason": "invalid_credentials"})
        raise AuthenticationError(INVALID_CREDENTIALS_MESSAGE)
    with internal_errors("login"):
        token = _token_for(user, tokens)
    logger.info("Login succeeded", extra={"user_id": user.id})
    return AuthResponse(
        message="Login successful",
        user=UserOut.model_validate(user),
        token=token,
    )


@router.post("/logout", response_model=MessageResponse)
def logout(response: Response) -> MessageResponse:
    """Clear the access-token cookie. The token itself stays valid until it expires."""
    response.delete_cookie(get_settings().ACCESS_TOKEN_COOKIE_NAME)
    return MessageResponse(message="Logout successful")
