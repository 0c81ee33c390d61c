"""Main FastAPI application entry point."""

from contextlib import asynccontextmanager
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from tasktracker import __version__
from tasktracker.config import get_settings
from tasktracker.database import SessionLocal, engine, init_db
from tasktracker.errors import register_exception_handlers
from tasktracker.logging_config import setup_logging
from tasktracker.routers import admin, auth, comments, notifications, system, tasks, users
from tasktracker.services.sweep_scheduler import OverdueSweepScheduler

logger = logging.getLogger("tasktracker.system")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup and shutdown events."""
    settings = get_settings()
    init_db()
    scheduler: OverdueSweepScheduler | None = None
    if settings.scheduler_enabled:
        scheduler = OverdueSweepScheduler(SessionLocal, run_hour=settings.scheduler_run_hour)
        await scheduler.start()
    app.state.sweep_scheduler = scheduler
    yield
    if scheduler is not None:
        await scheduler.stop()
    engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    settings = get_settings()
    setup_logging(settings.log_dir, debug=settings.debug)

    app = FastAPI(
        title="Task Tracker API",
        description="Users, tasks, comments and notifications with role-based access",
        version=__version__,
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.allow_all_origins else settings.cors_origins_list,
        allow_origin_regex=settings.cors_origin_regex,
        allow_credentials=not settings.allow_all_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_exception_handlers(app)

    prefix = settings.api_prefix
    app.include_router(system.router, prefix=prefix, tags=["system"])
    app.include_router(auth.router, prefix=f"{prefix}/auth", tags=["auth"])
    app.include_router(admin.router, prefix=f"{prefix}/admin", tags=["admin"])
    app.include_router(tasks.router, prefix=f"{prefix}/tasks", tags=["tasks"])
    app.include_router(comments.router, prefix=f"{prefix}/tasks", tags=["comments"])
    app.include_router(users.router, prefix=f"{prefix}/users", tags=["users"])
    app.include_router(notifications.router, prefix=f"{prefix}/notifications", tags=["notifications"])

    logger.info(f"Application created: api_prefix={prefix} version={__version__}")
    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "tasktracker.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.debug,
        reload_excludes=["*.log", "*.db", "*.db-journal", "*.pyc"] if settings.debug else None,
    )
