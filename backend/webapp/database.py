"""Database connection and session management."""
from typing import Iterator, Optional

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker, Session
from sqlalchemy.pool import NullPool

Base = declarative_base()


def build_engine(database_url: str, environment: str = "development") -> Engine:
    """
    Create the SQLAlchemy engine for the configured database.

    Pooler endpoints (PgBouncer-style, port 6543) get NullPool; stationary
    servers get a regular connection pool.
    """
    if database_url.startswith("sqlite"):
        return create_engine(database_url, connect_args={"check_same_thread": False})

    if database_url.endswith(":6543") or environment == "test":
        return create_engine(
            database_url,
            poolclass=NullPool,  # Required for pooler connections
            echo=environment == "development",
        )

    # Direct connection for stationary servers
    return create_engine(
        database_url,
        pool_size=20,
        max_overflow=10,
        pool_pre_ping=True,
        echo=environment == "development",
    )


class Database:
    """Owns the engine and session factory for the lifetime of the process."""

    def __init__(self, database_url: Optional[str] = None, environment: str = "development", engine: Optional[Engine] = None):
        if engine is None:
            if not database_url:
                raise ValueError("Either database_url or engine must be provided")
            engine = build_engine(database_url, environment)
        self.engine = engine
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def create_all(self) -> None:
        """Create tables that don't exist yet (no migrations)."""
        # Register all models on Base.metadata
        import webapp.models  # noqa: F401

        Base.metadata.create_all(bind=self.engine)

    def session(self) -> Session:
        return self.SessionLocal()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Iterator[Session]:
    """Dependency for getting a per-request database session."""
    db = request.app.state.database.session()
    try:
        yield db
    finally:
        db.close()
