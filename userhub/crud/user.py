"""Credential store: the only code that reads or writes user rows."""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from userhub.core.errors import ConflictError, NotFoundError
from userhub.core.security import hash_password
from userhub.models.user import Role, User
from userhub.schemas.user import UserUpdate

logger = logging.getLogger(__name__)

USER_EXISTS_MESSAGE = "User already exists"
USER_NOT_FOUND_MESSAGE = "User not found"

# users.id is a 32-bit INTEGER; ids outside 1..MAX_USER_ID cannot exist.
MAX_USER_ID = 2**31 - 1


def get_user_by_id(db: Session, user_id: int) -> User | None:
    if not 1 <= user_id <= MAX_USER_ID:
        return None
    return db.get(User, user_id)


def get_user_by_email(db: Session, email: str) -> User | None:
    return db.query(User).filter(User.email == email).first()


def get_user_or_404(db: Session, user_id: int) -> User:
    user = get_user_by_id(db, user_id)
    if user is None:
        raise NotFoundError(USER_NOT_FOUND_MESSAGE)
    return user


def list_users(db: Session) -> list[User]:
    return db.query(User).order_by(User.id).all()


def _commit_or_conflict(db: Session) -> None:
    """Commit; a unique-index violation becomes ConflictError after rollback."""
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        logger.info("Unique constraint violation on users", extra={"reason": str(e.orig)[:200]})
        raise ConflictError(USER_EXISTS_MESSAGE) from e


def create_user(
    db: Session,
    username: str,
    email: str,
    password: str,
    role: Role = Role.USER,
) -> User:
    """
    Hash the password and insert a user.

    The email pre-check only gives a friendly early answer; the unique index
    on users.email decides concurrent registrations.
    """
    if get_user_by_email(db, email) is not None:
        raise ConflictError(USER_EXISTS_MESSAGE)
    user = User(
        username=username,
        email=email,
        password=hash_password(password),
        role=role,
    )
    db.add(user)
    _commit_or_conflict(db)
    db.refresh(user)
    return user


def update_user(db: Session, user_id: int, changes: UserUpdate) -> User:
    """Apply only supplied fields; re-hash the password when one is given."""
    user = get_user_or_404(db, user_id)
    data = changes.changes()
    if "email" in data and data["email"] != user.email:
        other = get_user_by_email(db, data["email"])
        if other is not None and other.id != user.id:
            raise ConflictError(USER_EXISTS_MESSAGE)
    if "password" in data:
        data["password"] = hash_password(data["password"])
    for field, value in data.items():
        setattr(user, field, value)
    if data:
        _commit_or_conflict(db)
        db.refresh(user)
    return user


def delete_user(db: Session, user_id: int) -> None:
    """Hard delete; raises NotFoundError if the id is unknown."""
    user = get_user_or_404(db, user_id)
    db.delete(user)
    db.commit()
