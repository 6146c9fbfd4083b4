"""Application entrypoint for the change-email OTP service.

This module wires together the FastAPI application with its lifespan hooks,
database metadata, Redis cleanup, logging, and the error handler that renders
change-email failures. It is the root that other modules depend on when the
API process starts.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from change_email_otp.api.routes import change_email_router
from change_email_otp.core.config import settings
from change_email_otp.core.errors import ChangeEmailOTPError
from change_email_otp.core.logging import setup_logging
from change_email_otp.db.models import Base
from change_email_otp.db.session import engine
from change_email_otp.stores.redis_store import close_redis_client

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create database tables on startup and dispose shared clients on shutdown.

    Dependencies:
    - Uses the async SQLAlchemy engine from `change_email_otp.db.session` to
      ensure the `users` and `verifications` tables exist.
    - Cleans up the Redis client via `close_redis_client` so connections are
      properly released when the FastAPI app stops.
    """

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield
    await close_redis_client()
    await engine.dispose()


async def change_email_error_handler(request: Request, exc: ChangeEmailOTPError) -> JSONResponse:
    """Render typed change-email failures as `{code, message}`."""
    logger.debug("%s %s -> %s", request.method, request.url.path, exc.code)
    return JSONResponse(status_code=exc.status_code, content={"code": exc.code, "message": exc.message})


def create_application() -> FastAPI:
    """Assemble and configure the FastAPI application instance.

    - Configures logging from `settings.LOG_LEVEL`.
    - Injects the lifespan manager defined above to manage startup/shutdown.
    - Registers the change-email router and its error handler.
    """

    setup_logging(settings.LOG_LEVEL)

    application = FastAPI(
        title=settings.PROJECT_NAME,
        version=settings.PROJECT_VERSION,
        lifespan=lifespan,
    )

    application.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    application.add_exception_handler(ChangeEmailOTPError, change_email_error_handler)
    application.include_router(change_email_router)

    @application.get("/")
    async def healthcheck():
        """Lightweight health endpoint used by uptime monitors."""
        return {"message": "Change email OTP service is running!"}

    return application


app = create_application()
