"""Engine and session factory for the users and workflows tables."""
from __future__ import annotations

from typing import Any, Generator

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from strain_api.config import settings


def engine_options(database_url: str) -> dict[str, Any]:
    """
    Build create_engine keyword arguments for the configured backend.

    In-memory SQLite has to share one connection across sessions, and does
    not accept the pool sizing options used for PostgreSQL.
    """
    if database_url.lower().startswith("sqlite"):
        options: dict[str, Any] = {"connect_args": {"check_same_thread": False}}
        if ":memory:" in database_url or database_url.rstrip("/") == "sqlite:":
            options["poolclass"] = StaticPool
        return options
    return {
        "pool_pre_ping": True,
        "pool_size": settings.db_pool_size,
        "max_overflow": settings.db_max_overflow,
    }


engine: Engine = create_engine(
    settings.database_url,
    echo=False,
    **engine_options(settings.database_url),
)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db() -> Generator[Session, None, None]:
    """Request-scoped session; closed once the response is sent."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind: Engine | None = None) -> None:
    from strain_api.models import Base

    Base.metadata.create_all(bind=bind or engine)


def database_health(bind: Engine | None = None) -> dict[str, Any]:
    """Run a trivial query and report which backend answered it."""
    target = bind or engine
    try:
        with target.connect() as connection:
            connection.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        return {"ok": False, "dialect": target.dialect.name, "error": str(exc)}
    return {"ok": True, "dialect": target.dialect.name, "database": target.url.database}
