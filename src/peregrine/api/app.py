"""FastAPI application factory.

Configuration comes from the environment:
- PEREGRINE_DB_PATH: SQLite database path
- PEREGRINE_CORS_ORIGINS: comma-separated allowed origins
- PEREGRINE_SUMMARY_WORKERS: threads used for event-wide stats
- PEREGRINE_HOST / PEREGRINE_PORT: bind address when run as a module
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from peregrine.db.repo import DbSession
from peregrine.db.session import get_session, init_db

DEFAULT_CORS_ORIGINS = "http://localhost:8080,http://127.0.0.1:8080"
DEFAULT_SUMMARY_WORKERS = 4


def _request_session(db_path: Path | None) -> Generator[DbSession, None, None]:
    session = get_session(db_path)
    try:
        yield session
    finally:
        session.close()


def get_db_session() -> Generator[DbSession, None, None]:
    """Dependency to get database session.

    Yields:
        Session on the PEREGRINE_DB_PATH database, closed after the request.
        Apps created with an explicit db_path override this.
    """
    yield from _request_session(None)


def get_summary_workers() -> int:
    """Thread count for event-wide summaries (at least 1)."""
    raw = os.environ.get("PEREGRINE_SUMMARY_WORKERS")
    if not raw:
        return DEFAULT_SUMMARY_WORKERS
    try:
        return max(1, int(raw))
    except ValueError as e:
        raise ValueError(f"PEREGRINE_SUMMARY_WORKERS must be an integer, got {raw!r}") from e


def create_app(db_path: Path | None = None, *, create_tables: bool = False) -> FastAPI:
    """Create FastAPI application.

    Args:
        db_path: Optional path to database file.
        create_tables: Create missing tables on startup.

    Returns:
        Configured FastAPI application.
    """
    if create_tables:
        init_db(db_path)

    app = FastAPI(
        title="Peregrine API",
        description="Scouting data analysis for robotics competitions",
        version="0.1.0",
    )

    if db_path is not None:
        # Requests must reach the same file the tables were created in
        def get_app_db_session() -> Generator[DbSession, None, None]:
            yield from _request_session(db_path)

        app.dependency_overrides[get_db_session] = get_app_db_session

    origins = os.environ.get("PEREGRINE_CORS_ORIGINS", DEFAULT_CORS_ORIGINS)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Include routes
    from peregrine.api.routes import reports, schemas, stats

    app.include_router(schemas.router, prefix="/api")
    app.include_router(stats.router, prefix="/api")
    app.include_router(reports.router, prefix="/api")

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "ok"}

    return app


# Default app instance
app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "peregrine.api.app:app",
        host=os.environ.get("PEREGRINE_HOST", "127.0.0.1"),
        port=int(os.environ.get("PEREGRINE_PORT", "8000")),
    )
