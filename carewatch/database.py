"""
Database engine and session factory.

Vitals, medication logs and alerts share one database. Postgres in
deployment; SQLite (file or in-memory) for local runs and tests.
"""

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool
from carewatch.config import settings

settings.validate_database_url()


def _engine_options(url: str) -> dict:
    # SQLite doesn't support pool_size/max_overflow, PostgreSQL does
    if not url.startswith("sqlite"):
        return {"pool_pre_ping": True, "pool_size": 10, "max_overflow": 20}

    options = {"connect_args": {"check_same_thread": False}}
    if url in ("sqlite://", "sqlite:///:memory:"):
        # One shared connection, otherwise every session sees an empty database
        options["poolclass"] = StaticPool
    return options


engine = create_engine(settings.DATABASE_URL, **_engine_options(settings.DATABASE_URL))

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """FastAPI dependency: one session per request"""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
