"""Shared test helpers: in-memory SQLite database wired into the FastAPI app."""

import unittest

from fastapi.testclient import TestClient
from sqlalchemy import Engine, create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from userhub.core.database import get_db
from userhub.core.security import TokenClaims, get_token_service
from userhub.crud.user import create_user
from userhub.main import app
from userhub.models import Base, Role, User

DEFAULT_PASSWORD = "Secret123"


def make_database() -> tuple[Engine, sessionmaker]:
    """Fresh in-memory SQLite database with all tables created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return engine, sessionmaker(autocommit=False, autoflush=False, bind=engine)


def bearer(token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


class DatabaseTestCase(unittest.TestCase):
    """Gives each test its own empty database and a session on it."""

    def setUp(self) -> None:
        self.engine, self.SessionTesting = make_database()
        self.db: Session = self.SessionTesting()

    def tearDown(self) -> None:
        self.db.close()
        self.engine.dispose()

    def add_user(
        self,
        email: str,
        role: Role = Role.USER,
        username: str | None = None,
        password: str = DEFAULT_PASSWORD,
    ) -> User:
        return create_user(
            self.db,
            username=username or email.split("@")[0],
            email=email,
            password=password,
            role=role,
        )


class ApiTestCase(DatabaseTestCase):
    """DatabaseTestCase plus a TestClient whose get_db uses the test database."""

    def setUp(self) -> None:
        super().setUp()

        def override_get_db():
            db = self.SessionTesting()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        super().tearDown()

    def token_for(self, user: User) -> str:
        return get_token_service().issue(
            TokenClaims(id=user.id, email=user.email, username=user.username)
        )

    def admin_headers(self) -> dict[str, str]:
        admin = self.add_user("root@acme.io", role=Role.ADMIN, username="root")
        return bearer(self.token_for(admin))

    def register(
        self,
        username: str = "jane",
        email: str = "jane@x.com",
        password: str = DEFAULT_PASSWORD,
    ):
        return self.client.post(
            "/auth/register",
            json={"username": username, "email": email, "password": password},
        )
