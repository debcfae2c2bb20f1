"""Admin-only user management: create, list, get, update, delete."""

import logging

from fastapi import APIRouter, status

from userhub.api.deps import AdminUser, DbSession
from userhub.core.errors import internal_errors
from userhub.crud import user as user_store
from userhub.schemas.user import MessageResponse, UserCreate, UserOut, UserUpdate

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(body: UserCreate, admin: AdminUser, db: DbSession) -> UserOut:
    """Create a user with an explicit role."""
    with internal_errors("create user", db):
        user = user_store.create_user(
            db,
            username=body.username,
            email=body.email,
            password=body.password,
            role=body.role,
        )
    logger.info(
        "User created",
        extra={"user_id": user.id, "role": user.role.value, "admin_id": admin.id},
    )
    return UserOut.model_validate(user)


# Declared before /{user_id} so "all" is never parsed as an id.
@router.get("/all", response_model=list[UserOut])
def list_users(_admin: AdminUser, db: DbSession) -> list[UserOut]:
    with internal_errors("list users", db):
        users = user_store.list_users(db)
    return [UserOut.model_validate(u) for u in users]


@router.get("/{user_id}", response_model=UserOut)
def get_user(user_id: int, _admin: AdminUser, db: DbSession) -> UserOut:
    with internal_errors("get user", db):
        user = user_store.get_user_or_404(db, user_id)
    return UserOut.model_validate(user)


@router.patch("/{user_id}", response_model=UserOut)
def update_user(
    user_id: int, body: UserUpdate, admin: AdminUser, db: DbSession
) -> UserOut:
    """Partial update; the password is re-hashed only when supplied."""
    with internal_errors("update user", db):
        user = user_store.update_user(db, user_id, body)
    logger.info(
        "User updated",
        extra={"user_id": user.id, "fields": sorted(body.changes()), "admin_id": admin.id},
    )
    return UserOut.model_validate(user)


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(user_id: int, admin: AdminUser, db: DbSession) -> MessageResponse:
    with internal_errors("delete user", db):
        user_store.delete_user(db, user_id)
    logger.info("User deleted", extra={"user_id": user_id, "admin_id": admin.id})
    return MessageResponse(message="User deleted successfully")
