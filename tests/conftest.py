"""
Pytest configuration and fixtures for testing.

Provides:
- In-memory user directory and verification store
- A notifier that records delivered codes
- The change-email service and a FastAPI test client wired to the same stores
"""

import asyncio
import os

# Settings are read once at import; point them at throwaway backends first.
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite:///:memory:")
os.environ.setdefault("VERIFICATION_BACKEND", "memory")
os.environ.setdefault("NOTIFIER_BACKEND", "console")
os.environ.setdefault("SECRET_KEY", "test-secret")

import pytest
import pytest_asyncio
from fastapi.testclient import TestClient

from change_email_otp.api import deps
from change_email_otp.core.config import OTPOptions
from change_email_otp.core.security import create_access_token
from change_email_otp.main import app
from change_email_otp.schemas.auth import AuthSession, SessionUser
from change_email_otp.services.change_email import ChangeEmailOTPService
from change_email_otp.stores.memory_store import (
    MemoryRateLimiter,
    MemoryUserDirectory,
    MemoryVerificationStore,
)


class RecordingNotifier:
    """Keeps every (email, otp) pair instead of sending it."""

    def __init__(self):
        self.sent: list[tuple[str, str]] = []

    async def notify(self, email: str, otp: str) -> None:
        self.sent.append((email, otp))

    @property
    def last_otp(self) -> str:
        return self.sent[-1][1]


@pytest.fixture
def users():
    return MemoryUserDirectory()


@pytest.fixture
def verifications():
    return MemoryVerificationStore()


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def options():
    return OTPOptions(length=6, expiration_minutes=5, max_attempts=3)


@pytest_asyncio.fixture
async def current_user(users):
    """The signed-in user whose email is being changed."""
    return await users.create_user({"id": "user-1", "email": "old@example.com", "email_verified": True})


@pytest.fixture
def session(current_user):
    return AuthSession(user=SessionUser(id=current_user["id"], email=current_user["email"]))


@pytest.fixture
def service(users, verifications, notifier, options):
    return ChangeEmailOTPService(users=users, verifications=verifications, notifier=notifier, options=options)


@pytest.fixture
def run_async():
    """Run a store coroutine from a synchronous TestClient test."""
    return asyncio.run


@pytest.fixture
def auth_headers(current_user):
    token = create_access_token(subject=current_user["id"])
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def client(users, verifications, notifier, options):
    """
    FastAPI test client with stores, notifier, and rate limiter overridden.
    """
    rate_limiter = MemoryRateLimiter()

    app.dependency_overrides[deps.get_user_directory] = lambda: users
    app.dependency_overrides[deps.get_verification_store] = lambda: verifications
    app.dependency_overrides[deps.get_notifier] = lambda: notifier
    app.dependency_overrides[deps.get_otp_options] = lambda: options
    app.dependency_overrides[deps.get_rate_limiter] = lambda: rate_limiter

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
