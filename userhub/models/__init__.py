"""SQLAlchemy ORM models."""

from userhub.models.base import Base
from userhub.models.user import Role, User

__all__ = ["Base", "Role", "User"]
