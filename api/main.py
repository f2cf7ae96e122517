"""
FastAPI application initialization and configuration.
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from core.config import settings
from database.engine import init_db, close_db
from api.routes import health
from api.routes.v1 import applications, interviews, jobs

from core.middleware import (
    ErrorHandlingMiddleware,
    setup_error_handlers,
    StructuredLoggingMiddleware,
    setup_logging,
    AuthenticationMiddleware,
)

# Setup structured logging (do this first, before anything else)
setup_logging(
    log_level=settings.log_level,
    json_logs=settings.json_logs,
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Manage application lifespan events."""
    logger.info(f"Starting {settings.app_name} in {settings.app_env} environment")
    await init_db()

    yield

    logger.info(f"Shutting down {settings.app_name}")
    await close_db()


def create_app() -> FastAPI:
    """Build the application with its middleware stack and routers."""
    app = FastAPI(
        title=settings.app_name,
        description="Job board lifecycle engine: jobs, applications and interviews",
        version="0.1.0",
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
        lifespan=lifespan,
    )

    # Setup error handlers (before middleware)
    setup_error_handlers(app, debug=settings.debug)

    # Middleware executes in reverse order of registration
    # 1. Authentication (innermost): attaches the caller's identity
    app.add_middleware(
        AuthenticationMiddleware,
        jwt_secret=settings.jwt_secret_key,
        jwt_algorithm=settings.jwt_algorithm,
    )

    # 2. Structured logging: sees the identity once the request returns
    app.add_middleware(
        StructuredLoggingMiddleware,
        log_request_body=settings.log_request_body,
        max_body_size=settings.log_max_body_size,
    )

    # 3. CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # 4. Error handling (outermost): catches anything the handlers missed
    app.add_middleware(
        ErrorHandlingMiddleware,
        debug=settings.debug,
    )

    app.include_router(health.router, tags=["Health"])
    app.include_router(health.router, prefix=settings.api_prefix, tags=["Health"])
    app.include_router(jobs.router, prefix=settings.api_prefix)
    app.include_router(applications.router, prefix=settings.api_prefix)
    app.include_router(interviews.router, prefix=settings.api_prefix)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "api.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
