"""
database.py — Engine, session factory and declarative Base
SQLite (file or in-memory) for local runs and tests, pooled PostgreSQL in production.
"""

import logging
import os

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, declarative_base
from sqlalchemy.pool import StaticPool

from config import DATABASE_URL, LOG_LEVEL

logging.basicConfig(
    level=getattr(logging, LOG_LEVEL, logging.INFO),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
)
logger = logging.getLogger(__name__)

Base = declarative_base()


def make_engine(url: str):
    if url in ("sqlite://", "sqlite:///:memory:"):
        # in-memory databases live on one connection; every session must share it
        return create_engine(url, connect_args={"check_same_thread": False}, poolclass=StaticPool)
    if url.startswith("sqlite"):
        return create_engine(url, connect_args={"check_same_thread": False})
    return create_engine(
        url,
        pool_size=5,
        max_overflow=10,
        pool_timeout=30,
        pool_recycle=1800,
        pool_pre_ping=True,
    )


engine = make_engine(DATABASE_URL)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """FastAPI dependency — yields a database session and closes it after use."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create every table on bind (the default engine if omitted)."""
    bind = bind or engine
    path = bind.url.database
    if bind.url.get_backend_name() == "sqlite" and path and path != ":memory:":
        directory = os.path.dirname(path)
        if directory:
            os.makedirs(directory, exist_ok=True)

    import models  # noqa: F401  registers every table on Base.metadata

    Base.metadata.create_all(bind=bind)
    logger.info(f"Database ready ({bind.url.get_backend_name()})")
