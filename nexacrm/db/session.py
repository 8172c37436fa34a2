"""Engine and session factory for the configured database."""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from nexacrm.core.settings import get_settings

logger = logging.getLogger(__name__)


def build_engine(database_url: str):
    connect_args = {"check_same_thread": False} if database_url.startswith("sqlite") else {}
    return create_engine(database_url, connect_args=connect_args, pool_pre_ping=True)


engine = build_engine(get_settings().database_url)
SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db() -> None:
    # Local import so every model is registered on the metadata first
    from nexacrm.db.base import Base

    Base.metadata.create_all(bind=engine)
    logger.info("Database schema ready (%s)", engine.url.get_backend_name())


def dispose_engine() -> None:
    engine.dispose()
