"""
Create a user (e.g. first admin). Run from project root:
  python -m userhub.scripts.create_user USERNAME EMAIL PASSWORD [role]
Example:
  python -m userhub.scripts.create_user admin admin@acme.io your-secure-password admin
"""
import argparse
import sys

from pydantic import ValidationError
from sqlalchemy.exc import SQLAlchemyError

from userhub.core.database import SessionLocal
from userhub.core.errors import ConflictError, format_validation_error
from userhub.core.security import HashingError
from userhub.crud.user import create_user
from userhub.models.user import Role
from userhub.schemas.user import UserCreate


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(
        description="Create a user; registration can only create 'user' accounts."
    )
    parser.add_argument("username", help="Username (1-255 chars)")
    parser.add_argument("email", help="Email address (login key, unique)")
    parser.add_argument("password", help="Password (8-128 chars)")
    parser.add_argument(
        "role", nargs="?", default=Role.USER.value, choices=[r.value for r in Role]
    )
    args = parser.parse_args(argv)

    try:
        body = UserCreate(
            username=args.username,
            email=args.email,
            password=args.password,
            role=args.role,
        )
    except ValidationError as e:
        print(format_validation_error(e.errors()), file=sys.stderr)
        return 1

    db = SessionLocal()
    try:
        user = create_user(
            db,
            username=body.username,
            email=body.email,
            password=body.password,
            role=body.role,
        )
        print(f"Created user '{user.email}' with role '{user.role.value}'.")
        return 0
    except ConflictError:
        print(f"User '{body.email}' already exists.", file=sys.stderr)
        return 1
    except (SQLAlchemyError, HashingError) as e:
        print(f"Failed to create user: {e}", file=sys.stderr)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())
