"""
FastAPI application entry point.

This module creates and configures the FastAPI application.
Using an application factory pattern (create_app function) because:
- Easier to test with different configurations
- Explicit about initialization order

For local development:
    SNOWFLAKE_MOCK_MODE=true uvicorn trainerdesk.main:app --reload

For production:
    gunicorn trainerdesk.main:app -w 4 -k uvicorn.workers.UvicornWorker
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .api.routes import clients, dashboard, health, sessions, users
from .config.settings import get_settings

# Configure logging
logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=logging.INFO,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Application lifespan manager.

    Runs on startup and shutdown. We only validate configuration here;
    database connections are opened per request.
    """
    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level.upper())

    logger.info(
        "TrainerDesk API starting",
        extra={
            "version": settings.api_version,
            "mock_mode": settings.snowflake_mock_mode,
        }
    )

    missing_fields = settings.validate_required_fields()
    if missing_fields:
        logger.error(
            "Missing required configuration",
            extra={"missing_fields": missing_fields}
        )

    yield

    logger.info("TrainerDesk API shutting down")


def _validation_message(exc: RequestValidationError) -> dict:
    """
    Flatten pydantic's error list into {"message", "field"}.

    Only the first error is reported; the web client shows one message
    per submit anyway.
    """
    errors = exc.errors()
    if not errors:
        return {"message": "Invalid request"}

    first = errors[0]
    # loc looks like ("body", "sessionCost"); drop the location kind
    loc = [str(part) for part in first.get("loc", ())[1:]]
    body = {"message": first.get("msg", "Invalid request")}
    if loc:
        body["field"] = ".".join(loc)
    return body


def create_app() -> FastAPI:
    """
    Application factory.

    Creates and configures the FastAPI application.
    This function is called once at startup (in production) or
    once per test module with different dependency overrides.
    """
    settings = get_settings()

    app = FastAPI(
        title=settings.api_title,
        version=__version__,
        description="""
        Client and session bookkeeping for personal trainers.

        ## Authentication

        Sign-in is handled by the identity provider. Requests must carry
        the provider's claims (`X-User-Id`, optionally `X-User-Email`,
        `X-User-First-Name`, `X-User-Last-Name`, `X-User-Profile-Image-Url`)
        and an API key in the `X-API-Key` header.

        ## Resources

        - **Clients**: `/api/clients`
        - **Sessions**: `/api/sessions`, payment status via `/api/sessions/{id}/paid`
        - **Dashboard**: `/api/dashboard`
        - **Profile**: `/api/me`
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routers
    app.include_router(
        health.router,
        prefix="/health",
        tags=["Health"],
    )

    app.include_router(
        users.router,
        prefix="/api",
        tags=["Trainer"],
    )

    app.include_router(
        clients.router,
        prefix="/api/clients",
        tags=["Clients"],
    )

    app.include_router(
        sessions.router,
        prefix="/api/sessions",
        tags=["Sessions"],
    )

    app.include_router(
        dashboard.router,
        prefix="/api/dashboard",
        tags=["Dashboard"],
    )

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "message": "TrainerDesk API",
            "version": __version__,
            "docs": "/docs",
            "health": "/health",
        }

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request, exc):
        """Render HTTP errors as {"message": ...} like the rest of the API."""
        if isinstance(exc.detail, dict):
            content = exc.detail
        else:
            content = {"message": str(exc.detail)}

        return JSONResponse(
            status_code=exc.status_code,
            content=content,
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request, exc):
        """Request bodies that fail the schema are a plain 400."""
        body = _validation_message(exc)

        logger.warning(
            "Rejected invalid request",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": body["message"],
            }
        )

        return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content=body)

    @app.exception_handler(Exception)
    async def global_exception_handler(request, exc):
        """
        Catch-all exception handler.

        Prevents stack traces from leaking to clients. We log the full
        error server-side but return a generic message.
        """
        logger.error(
            "Unhandled exception",
            extra={
                "path": request.url.path,
                "method": request.method,
                "error": str(exc),
            },
            exc_info=exc,
        )

        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "message": "Internal server error. Please contact support if this persists."
            }
        )

    logger.info(
        "FastAPI application created",
        extra={
            "title": settings.api_title,
            "version": __version__,
        }
    )

    return app


# Create the application instance
# This is what uvicorn/gunicorn will import
app = create_app()


# For debugging/development
if __name__ == "__main__":
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "trainerdesk.main:app",
        host="0.0.0.0",
        port=8000,
        reload=True,
        log_level=settings.log_level.lower(),
    )
