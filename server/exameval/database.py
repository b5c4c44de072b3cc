"""
Database engine, session factory and declarative base.
"""
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from exameval.config import settings

logger = logging.getLogger(__name__)

connect_args = {}
if settings.database_url.startswith("sqlite"):
    # FastAPI serves sync routes from a threadpool
    connect_args["check_same_thread"] = False

engine = create_engine(settings.database_url, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    """Yield a database session for the duration of a request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create tables and seed the default sections and practice tests."""
    # Register models with the metadata before create_all
    import exameval.models  # noqa: F401
    from exameval.seed import seed_defaults

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    session = sessionmaker(autocommit=False, autoflush=False, bind=bind)()
    try:
        seed_defaults(session)
    finally:
        session.close()
    logger.info("Database ready at %s", bind.url)
