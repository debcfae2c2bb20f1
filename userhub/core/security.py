"""Password hashing and JWT issuance/verification for authentication."""

from datetime import UTC, datetime, timedelta
from functools import lru_cache
from typing import Any

import bcrypt
import jwt
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from userhub.core.config import get_settings

# Min/max lengths for username and password validation.
USERNAME_MIN_LEN = 1
USERNAME_MAX_LEN = 255
PASSWORD_MIN_LEN = 8
PASSWORD_MAX_LEN = 128

# bcrypt only looks at the first 72 bytes of the password.
BCRYPT_MAX_BYTES = 72


class HashingError(Exception):
    """bcrypt could not produce a hash."""


class TokenSigningError(Exception):
    """A token could not be encoded or signed."""


def hash_password(plain_password: str, rounds: int | None = None) -> str:
    """Hash a plain-text password for storage. Do not store plain passwords."""
    if rounds is None:
        rounds = get_settings().BCRYPT_ROUNDS
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=rounds))
    except (ValueError, TypeError) as e:
        raise HashingError(str(e)) from e
    return hashed.decode("utf-8")


def verify_password(plain_password: str, hashed: str) -> bool:
    """Verify a plain password against a stored hash."""
    pw_bytes = plain_password.encode("utf-8")[:BCRYPT_MAX_BYTES]
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


@lru_cache
def dummy_password_hash() -> str:
    """Hash checked when a login names an unknown email, so both failures cost one bcrypt verify."""
    return hash_password("not-a-real-password")


class TokenError(Exception):
    """Base class for token verification failures."""


class TokenInvalid(TokenError):
    """Signature mismatch, malformed token, or malformed claims."""


class TokenExpired(TokenError):
    """Token was valid but its exp is in the past."""


class TokenClaims(BaseModel):
    """Identity claims carried by an access token."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: int
    email: str
    username: str


class TokenService:
    """Issues and verifies HMAC-signed access tokens with a fixed lifetime."""

    def __init__(
        self,
        secret: str,
        algorithm: str = "HS256",
        expire_minutes: int = 60,
    ) -> None:
        if not secret:
            raise ValueError("Token secret must be non-empty")
        self._secret = secret
        self.algorithm = algorithm
        self.ttl = timedelta(minutes=expire_minutes)

    def issue(self, claims: TokenClaims, now: datetime | None = None) -> str:
        """Sign claims plus iat and exp (iat + ttl)."""
        issued_at = now or datetime.now(UTC)
        payload: dict[str, Any] = {
            **claims.model_dump(),
            "iat": issued_at,
            "exp": issued_at + self.ttl,
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=self.algorithm)
        except (jwt.PyJWTError, TypeError, ValueError, NotImplementedError) as e:
            raise TokenSigningError(str(e)) from e

    def verify(self, token: str) -> TokenClaims:
        """
        Check signature, expiry and claim shape; return the identity claims.
        Raises TokenExpired or TokenInvalid.
        """
        try:
            payload = jwt.decode(
                token,
                self._secret,
                algorithms=[self.algorithm],
                options={"require": ["exp", "iat"]},
            )
        except jwt.ExpiredSignatureError as e:
            raise TokenExpired("Token has expired") from e
        except jwt.PyJWTError as e:
            raise TokenInvalid(str(e)) from e
        try:
            return TokenClaims.model_validate(payload)
        except PydanticValidationError as e:
            raise TokenInvalid("Token payload is missing identity claims") from e


@lru_cache
def get_token_service() -> TokenService:
    """Process-wide token service built from settings (FastAPI dependency)."""
    settings = get_settings()
    return TokenService(
        secret=settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
        expire_minutes=settings.JWT_EXPIRE_MINUTES,
    )
