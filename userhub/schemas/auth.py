"""Request/response schemas for auth endpoints."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from userhub.core.security import (
    PASSWORD_MAX_LEN,
    PASSWORD_MIN_LEN,
    USERNAME_MAX_LEN,
    USERNAME_MIN_LEN,
)
from userhub.models.user import Role
from userhub.schemas.user import UserOut, normalize_email, normalize_username


class RegisterRequest(BaseModel):
    """Self-service registration. Role is not accepted; new users are always 'user'."""

    model_config = ConfigDict(extra="ignore")

    username: str = Field(..., min_length=USERNAME_MIN_LEN, max_length=USERNAME_MAX_LEN)
    email: EmailStr
    password: str = Field(..., min_length=PASSWORD_MIN_LEN, max_length=PASSWORD_MAX_LEN)

    @field_validator("username")
    @classmethod
    def check_username(cls, v: str) -> str:
        return normalize_username(v)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)


class LoginRequest(BaseModel):
    """Credentials for login."""

    email: EmailStr
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LEN)

    @field_validator("email")
    @classmethod
    def check_email(cls, v: str) -> str:
        return normalize_email(v)


class AuthResponse(BaseModel):
    """Returned by register and login: redacted user plus a bearer token."""

    message: str
    user: UserOut
    token: str = Field(..., description="JWT access token")


class AuthenticatedUser(BaseModel):
    """Identity resolved by the authentication gate and passed to handlers."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: int
    username: str
    email: str
    role: Role
