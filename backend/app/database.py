"""
Database engine, session factory and declarative base.
"""

import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from app.config import settings

logger = logging.getLogger(__name__)

connect_args = {}
if settings.database_url.startswith("sqlite"):
    # SQLite connections are shared across FastAPI's worker threads
    connect_args["check_same_thread"] = False

engine = create_engine(settings.database_url, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db() -> None:
    """Create all tables that don't exist yet."""
    # Register every model on Base.metadata before create_all
    import app.models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Database tables created for %s", settings.database_url)


if __name__ == "__main__":
    logging.basicConfig(level=settings.log_level)
    init_db()
