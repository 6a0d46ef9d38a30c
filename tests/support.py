"""Shared fixtures: SQLite session factory, seeded users and a recording notifier."""

import unittest

import bcrypt
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from app.core.database import get_db
from app.main import app
from app.models import Base, User
from app.services.notifier import NotificationError, get_notifier

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

ADMIN_PASSWORD = "correct-pw"


def reset_database() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


def make_user(
    db: Session,
    username: str = "admin",
    password: str = ADMIN_PASSWORD,
    email: str = "admin@example.com",
    is_admin: bool = True,
) -> User:
    """Insert a user; low bcrypt cost keeps tests fast."""
    pw_hash = bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=4)).decode("utf-8")
    user = User(username=username, password_hash=pw_hash, email=email, is_admin=is_admin)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


class RecordingNotifier:
    """Captures OTP emails instead of sending them; set fail=True to simulate delivery errors."""

    def __init__(self) -> None:
        self.sent: list[tuple[str, str, int]] = []
        self.fail = False

    def send_otp(self, to_email: str, code: str, expires_in_minutes: int) -> None:
        if self.fail:
            raise NotificationError("simulated SMTP outage")
        self.sent.append((to_email, code, expires_in_minutes))

    @property
    def last_code(self) -> str:
        return self.sent[-1][1]


class DatabaseTestCase(unittest.TestCase):
    """Fresh schema and session per test."""

    def setUp(self) -> None:
        reset_database()
        self.db = TestingSessionLocal()

    def tearDown(self) -> None:
        self.db.close()


class ApiTestCase(DatabaseTestCase):
    """TestClient wired to the SQLite session and a recording notifier."""

    def setUp(self) -> None:
        super().setUp()
        self.notifier = RecordingNotifier()

        def override_get_db():
            db = TestingSessionLocal()
            try:
                yield db
            finally:
                db.close()

        app.dependency_overrides[get_db] = override_get_db
        app.dependency_overrides[get_notifier] = lambda: self.notifier
        self.client = TestClient(app)

    def tearDown(self) -> None:
        app.dependency_overrides.clear()
        super().tearDown()

    def login(self, username: str = "admin", password: str = ADMIN_PASSWORD) -> str:
        """Run both OTP steps and return the session token."""
        resp = self.client.post(
            "/api/request-otp", json={"username": username, "password": password}
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        request_id = resp.json()["requestId"]
        resp = self.client.post(
            "/api/verify-otp",
            json={"requestId": request_id, "otp": self.notifier.last_code},
        )
        self.assertEqual(resp.status_code, 200, resp.text)
        return resp.json()["token"]
