"""FastAPI application entry point."""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from .config import Settings, get_settings
from .db import RecordAPI, RecordClient
from .logging_setup import ensure_logging, setup_logging
from .routers import board, projects, tasks
from .services import ProjectService, TaskService
from .state import BoardState, NotificationQueue

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    record_client: RecordAPI | None = None,
    *,
    configure_logging: bool = True,
) -> FastAPI:
    """Build the application.

    Without ``record_client`` an HTTP client for the configured record service
    is opened on startup and closed on shutdown.

    Logging is configured on startup unless ``configure_logging`` is false or
    the process already did it.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Wire services into a fresh board and load it."""
        if configure_logging:
            ensure_logging(settings.log_level, settings.log_file)
        client = record_client or RecordClient.from_settings(settings)
        notifications = NotificationQueue()
        app.state.notifications = notifications
        app.state.board = BoardState(
            TaskService(client, page_size=settings.task_page_size),
            ProjectService(client, page_size=settings.project_page_size),
            notifier=notifications,
        )
        await app.state.board.load()
        try:
            yield
        finally:
            if record_client is None:
                await client.aclose()

    app = FastAPI(
        title="TaskFlow",
        description="Task board backed by a hosted record service",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.include_router(tasks.router)
    app.include_router(projects.router)
    app.include_router(board.router)

    @app.get("/health")
    def health():
        """Liveness probe."""
        return {"status": "ok"}

    return app


app = create_app()


def main():
    """Run the application with uvicorn."""
    import uvicorn

    settings = get_settings()
    setup_logging(settings.log_level, settings.log_file)
    logger.info("Using record service at %s", settings.record_api_url)

    uvicorn.run(
        "taskflow.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.reload,
    )


if __name__ == "__main__":
    main()
