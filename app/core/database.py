# app/core/database.py

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.models.base import Base
from app.core.logging_config import get_logger

# Imported so their tables are registered on Base.metadata
from app.models.message import Message  # noqa: F401
from app.models.file import StoredFile  # noqa: F401

logger = get_logger("db")


def normalize_database_url(url: str) -> str:
    # Hosting platforms still hand out the scheme SQLAlchemy dropped
    if url.startswith("postgres://"):
        return "postgresql://" + url[len("postgres://"):]
    return url


def build_engine(database_url: str, **kwargs) -> Engine:
    url = normalize_database_url(database_url)
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})  # only needed for SQLite
    else:
        kwargs.setdefault("pool_pre_ping", True)
    return create_engine(url, **kwargs)


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def init_db(engine: Engine) -> bool:
    """
    Create the `messages` and `files` tables if they are absent.

    A database that is down at boot must not take the web process with it,
    so failures are logged and reported as False.
    """
    try:
        Base.metadata.create_all(bind=engine)
    except SQLAlchemyError:
        logger.exception("[DB] init_db failed")
        return False
    logger.info("[DB] init_db OK")
    return True
