"""Pydantic request/response schemas."""

from userhub.schemas.auth import (
    AuthenticatedUser,
    AuthResponse,
    LoginRequest,
    RegisterRequest,
)
from userhub.schemas.health import HealthResponse
from userhub.schemas.user import MessageResponse, UserCreate, UserOut, UserUpdate

__all__ = [
    "AuthenticatedUser",
    "AuthResponse",
    "HealthResponse",
    "LoginRequest",
    "MessageResponse",
    "RegisterRequest",
    "UserCreate",
    "UserOut",
    "UserUpdate",
]
