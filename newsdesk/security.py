"""Password hashing and JWT issuance/verification."""
from datetime import datetime, timedelta, timezone
from typing import Any

import bcrypt
import jwt
from pydantic import BaseModel, ValidationError as PydanticValidationError

from newsdesk.config import settings
from newsdesk.errors import InvalidTokenError

BCRYPT_ROUNDS = settings.BCRYPT_ROUNDS

# Compared against when the username is unknown so a failed login costs the
# same whether or not the account exists.
_DUMMY_HASH = bcrypt.hashpw(b"newsdesk-dummy-password", bcrypt.gensalt(rounds=BCRYPT_ROUNDS))


class TokenClaims(BaseModel):
    """Identity carried by a verified access token."""

    sub: int
    username: str
    is_admin: bool
    exp: datetime

    @property
    def user_id(self) -> int:
        return self.sub


def hash_password(plain_password: str) -> str:
    """Hash a plain-text password for storage."""
    # bcrypt only looks at the first 72 bytes.
    pw_bytes = plain_password.encode("utf-8")[:72]
    return bcrypt.hashpw(pw_bytes, bcrypt.gensalt(rounds=BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(plain_password: str, hashed: str | None) -> bool:
    """Verify *plain_password* against *hashed*; a None hash never matches."""
    pw_bytes = plain_password.encode("utf-8")[:72]
    if hashed is None:
        bcrypt.checkpw(pw_bytes, _DUMMY_HASH)
        return False
    try:
        return bcrypt.checkpw(pw_bytes, hashed.encode("utf-8"))
    except (ValueError, TypeError):
        return False


def create_access_token(user_id: int, username: str, is_admin: bool) -> str:
    """Create a signed token expiring ``settings.JWT_EXPIRE_HOURS`` from now."""
    now = datetime.now(timezone.utc)
    payload: dict[str, Any] = {
        "sub": str(user_id),
        "username": username,
        "is_admin": is_admin,
        "iat": now,
        "exp": now + timedelta(hours=settings.JWT_EXPIRE_HOURS),
    }
    return jwt.encode(
        payload,
        settings.JWT_SECRET.get_secret_value(),
        algorithm=settings.JWT_ALGORITHM,
    )


def decode_access_token(token: str) -> TokenClaims:
    """
    Verify *token* and return its claims.

    Raises InvalidTokenError for every failure (bad signature, expiry,
    tampering, missing or mistyped claims) without saying which.
    """
    try:
        payload = jwt.decode(
            token,
            settings.JWT_SECRET.get_secret_value(),
            algorithms=[settings.JWT_ALGORITHM],
            options={"require": ["exp", "sub"]},
        )
        return TokenClaims.model_validate(payload)
    except (jwt.PyJWTError, PydanticValidationError) as exc:
        raise InvalidTokenError() from exc
