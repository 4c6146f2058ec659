"""SQLAlchemy engine and session factory configuration."""

from __future__ import annotations

from pathlib import Path

import structlog
from sqlalchemy import create_engine
from sqlalchemy.engine import URL, make_url
from sqlalchemy.orm import sessionmaker

from app.backend.src.core.config import get_settings

LOGGER = structlog.get_logger(__name__)
PROJECT_ROOT = Path(__file__).resolve().parents[4]


def _normalize_database_url(raw_url: str) -> URL:
    """Return an absolute :class:`~sqlalchemy.engine.URL` for SQLite databases."""

    url = make_url(raw_url)
    if not url.drivername.startswith("sqlite"):
        return url

    database = url.database or ""
    if database in {"", ":memory:"}:
        return url

    db_path = Path(database)
    if db_path.is_absolute():
        resolved = db_path
    else:
        resolved = PROJECT_ROOT / db_path

    resolved = resolved.resolve()
    if resolved != db_path:
        LOGGER.info(
            "database_path_normalized",
            original=str(db_path),
            resolved=str(resolved),
        )

    return url.set(database=str(resolved))


def build_engine(raw_url: str):
    """Create an engine for ``raw_url``; SQLite connections may cross threads."""

    url = _normalize_database_url(raw_url)
    connect_args: dict[str, object] = {}
    if url.drivername.startswith("sqlite"):
        # Store reads run in worker threads via asyncio.to_thread.
        connect_args["check_same_thread"] = False
    return create_engine(url, pool_pre_ping=True, connect_args=connect_args)


def build_session_factory(bind) -> sessionmaker:
    """Return a read-oriented session factory bound to ``bind``."""

    return sessionmaker(
        bind=bind,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


_settings = get_settings()
engine = build_engine(_settings.database_url)
SessionLocal = build_session_factory(engine)

LOGGER.info("database_engine_initialized", url=engine.url.render_as_string(hide_password=True))

__all__ = ["SessionLocal", "build_engine", "build_session_factory", "engine"]
