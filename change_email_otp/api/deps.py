"""Dependency providers used by FastAPI endpoints.

These helpers expose database sessions, the verification store, the notifier,
the caller session, and the composed service through FastAPI's dependency
injection system so route handlers remain thin.
"""

from typing import AsyncGenerator

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from change_email_otp.core.config import OTPOptions, Settings, get_settings
from change_email_otp.core.security import decode_access_token
from change_email_otp.db.session import get_session
from change_email_otp.interfaces import Notifier, RateLimiter, UserDirectory, VerificationStore
from change_email_otp.schemas.auth import AuthSession, SessionUser
from change_email_otp.services.change_email import ChangeEmailOTPService
from change_email_otp.services.email import ConsoleNotifier, SmtpNotifier
from change_email_otp.stores.memory_store import MemoryRateLimiter, MemoryVerificationStore
from change_email_otp.stores.redis_store import RedisVerificationStore, get_redis_client
from change_email_otp.stores.sql_store import SqlUserDirectory, SqlVerificationStore

bearer_scheme = HTTPBearer(auto_error=False)

_memory_verification_store = MemoryVerificationStore()
_memory_rate_limiter = MemoryRateLimiter()


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Yield an async SQLAlchemy session tied to the shared engine."""

    async for session in get_session():
        yield session


def get_otp_options(config: Settings = Depends(get_settings)) -> OTPOptions:
    return config.otp_options()


def get_user_directory(session: AsyncSession = Depends(get_db_session)) -> UserDirectory:
    return SqlUserDirectory(session)


def get_verification_store(
    session: AsyncSession = Depends(get_db_session),
    config: Settings = Depends(get_settings),
) -> VerificationStore:
    """Pick the verification backend named by `VERIFICATION_BACKEND`."""
    if config.VERIFICATION_BACKEND == "redis":
        return RedisVerificationStore(get_redis_client(), config.VERIFICATION_RETENTION_SECONDS)
    if config.VERIFICATION_BACKEND == "database":
        return SqlVerificationStore(session)
    return _memory_verification_store


def get_notifier(config: Settings = Depends(get_settings)) -> Notifier:
    if config.NOTIFIER_BACKEND == "console":
        return ConsoleNotifier()
    return SmtpNotifier(config)


def get_change_email_service(
    users: UserDirectory = Depends(get_user_directory),
    verifications: VerificationStore = Depends(get_verification_store),
    notifier: Notifier = Depends(get_notifier),
    options: OTPOptions = Depends(get_otp_options),
) -> ChangeEmailOTPService:
    return ChangeEmailOTPService(users=users, verifications=verifications, notifier=notifier, options=options)


def get_current_session(
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
) -> AuthSession | None:
    """Resolve the caller from the bearer token; None when absent or invalid."""
    if credentials is None:
        return None
    user_id = decode_access_token(credentials.credentials)
    if user_id is None:
        return None
    return AuthSession(user=SessionUser(id=user_id))


def get_rate_limiter() -> RateLimiter:
    return _memory_rate_limiter


async def enforce_rate_limit(
    request: Request,
    limiter: RateLimiter = Depends(get_rate_limiter),
    config: Settings = Depends(get_settings),
) -> None:
    client_ip = request.client.host if request.client else "unknown"
    key = f"{request.url.path}:{client_ip}"
    allowed = await limiter.allow(key, config.RATE_LIMIT_MAX, config.RATE_LIMIT_WINDOW_SECONDS)
    if not allowed:
        raise HTTPException(status_code=status.HTTP_429_TOO_MANY_REQUESTS, detail="Too many requests")
