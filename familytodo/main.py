"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
import logging
from pathlib import Path

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from familytodo import __version__
from familytodo.config import get_settings
from familytodo.database import engine, init_db
from familytodo.logging_config import setup_logging
from familytodo.routers import categories, comments, people, realtime, tasks

logger = logging.getLogger("familytodo")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    # Startup
    init_db()
    yield
    # Shutdown
    engine.dispose()


async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    """Turn storage failures into a plain 500 response.

    The unit of work has already been rolled back by the service layer.
    """
    logger.error("Storage error on %s %s: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"detail": "Database error"},
    )


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    HTTP routers live under ``/api/v<version>``; the realtime router adds the
    ``/tasks/stream`` WebSocket and its HTTP status endpoint under the same prefix.
    """
    settings = get_settings()
    setup_logging(
        log_dir=Path(settings.log_dir) if settings.log_dir else None,
        debug=settings.debug,
    )

    app = FastAPI(
        title="FamilyTodo API",
        description="API for the shared household task list",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin for origin in settings.cors_origins_list if isinstance(origin, str)],
        allow_origin_regex="|".join(
            origin.pattern for origin in settings.cors_origins_list if not isinstance(origin, str)
        )
        or None,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(SQLAlchemyError, storage_error_handler)

    api_version_path = settings.api_version_path

    app.include_router(realtime.router, prefix=api_version_path, tags=["realtime"])
    app.include_router(tasks.router, prefix=f"{api_version_path}/tasks", tags=["tasks"])
    app.include_router(people.router, prefix=f"{api_version_path}/people", tags=["people"])
    app.include_router(
        categories.router,
        prefix=f"{api_version_path}/categories",
        tags=["categories"],
    )
    app.include_router(comments.router, prefix=f"{api_version_path}/comments", tags=["comments"])

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "familytodo.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        reload_excludes=["*.log", "*.db", "*.db-journal"] if settings.debug else None,
    )
