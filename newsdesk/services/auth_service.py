"""
Auth service: registration and login against the ``users`` table.

Username uniqueness is enforced by the unique constraint on
``users.username``; an insert that violates it is reported as
``UsernameTakenError`` instead of racing a check-then-insert.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from newsdesk.errors import InvalidCredentialsError, StorageError, UsernameTakenError
from newsdesk.models import User, utcnow
from newsdesk.security import create_access_token, hash_password, verify_password
from newsdesk.validation import check_password, check_username

logger = logging.getLogger(__name__)


def _user_to_dict(user: User) -> dict:
    return {"id": user.id, "username": user.username, "is_admin": user.is_admin}


async def create_user(
    db: AsyncSession, username: str, password: str, is_admin: bool = False
) -> dict:
    """Insert a user with a hashed password; the plain password is never stored."""
    username = check_username(username)
    password = check_password(password)

    now = utcnow()
    user = User(
        username=username,
        password_hash=hash_password(password),
        is_admin=is_admin,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    try:
        await db.flush()
    except IntegrityError as exc:
        raise UsernameTakenError() from exc
    except SQLAlchemyError as exc:
        raise StorageError("Failed to create user") from exc

    logger.info("User %s (%r) registered, admin=%s", user.id, user.username, is_admin)
    return _user_to_dict(user)


async def register(db: AsyncSession, username: str, password: str) -> dict:
    """Register a regular (non-admin) user."""
    return await create_user(db, username, password, is_admin=False)


async def login(db: AsyncSession, username: str, password: str) -> dict:
    """
    Return ``{"token", "is_admin"}`` for valid credentials.

    An unknown username and a wrong password raise the same
    InvalidCredentialsError, and both run one bcrypt check.
    """
    result = await db.execute(select(User).where(User.username == username.strip()))
    user = result.scalar_one_or_none()

    if not verify_password(password, user.password_hash if user else None) or user is None:
        logger.warning("Failed login attempt")
        raise InvalidCredentialsError()

    token = create_access_token(user.id, user.username, user.is_admin)
    return {"token": token, "is_admin": user.is_admin}
