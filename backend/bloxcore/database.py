import logging
from contextlib import contextmanager
from typing import Iterator
from typing import Optional

from sqlalchemy import Engine
from sqlalchemy import create_engine
from sqlalchemy.orm import Session
from sqlalchemy.orm import declarative_base
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from bloxcore.config import get_settings

logger = logging.getLogger(__name__)

# Create Base class
Base = declarative_base()


def make_engine(db_url: Optional[str] = None, **kwargs) -> Engine:
    """Create a SQLAlchemy engine with the given URL and options.

    Args:
        db_url: Database connection URL; defaults to ``BLOX_DATABASE_URL``
        **kwargs: Additional arguments for create_engine

    Returns:
        A SQLAlchemy Engine instance
    """
    db_url = db_url or get_settings().database_url
    connect_args = kwargs.pop("connect_args", {})
    if db_url.startswith("sqlite"):
        # Remote-store calls run in worker threads (asyncio.to_thread).
        connect_args.setdefault("check_same_thread", False)
        connect_args.setdefault("timeout", 30)
        # One shared connection, otherwise every thread sees its own empty
        # in-memory database.
        if ":memory:" in db_url or db_url in {"sqlite://", "sqlite:///"}:
            kwargs.setdefault("poolclass", StaticPool)

    return create_engine(db_url, connect_args=connect_args, **kwargs)


def make_sessionmaker(engine: Engine) -> sessionmaker:
    """Create a sessionmaker bound to the given engine.

    ``expire_on_commit=False`` keeps row attributes readable after the
    session that loaded them is gone.
    """
    return sessionmaker(autocommit=False, autoflush=False, expire_on_commit=False, bind=engine)


def initialize_database(engine: Engine) -> None:
    """Create all tables registered on :data:`Base` (idempotent)."""

    # Import for the side effect of registering the models on Base.
    from bloxcore.models import models  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.debug(f"Database initialised at {engine.url}")


@contextmanager
def db_session(session_factory: sessionmaker) -> Iterator[Session]:
    """Session scope: commit on success, roll back on error, always close.

    Usage:
        with db_session(factory) as db:
            db.add(row)
    """
    session = session_factory()

    try:
        yield session
        session.commit()
        logger.debug("Database session committed successfully")

    except Exception as e:
        session.rollback()
        logger.error(f"Database session rolled back due to error: {e}")
        raise

    finally:
        session.close()
