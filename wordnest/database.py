"""
Database utilities and SQLAlchemy session management.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker
from sqlalchemy.pool import QueuePool

logger = logging.getLogger(__name__)

Base = declarative_base()


def build_engine(database_url: str, pool_size: int = 10, max_overflow: int = 0,
                 pool_timeout: int = 10) -> Engine:
    """
    Create the process-wide engine. Connections come from a bounded pool;
    each request checks one out for the length of its session.
    """
    connect_args = {}
    if database_url.startswith("sqlite"):
        # Request threads share the pool, so connections cross threads.
        connect_args["check_same_thread"] = False
    elif database_url.startswith("postgresql"):
        connect_args["connect_timeout"] = 10

    engine = create_engine(
        database_url,
        poolclass=QueuePool,
        pool_size=pool_size,
        max_overflow=max_overflow,
        pool_timeout=pool_timeout,
        pool_pre_ping=True,
        pool_recycle=3600,
        future=True,
        echo=False,
        connect_args=connect_args,
    )

    if database_url.startswith("sqlite"):
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)

    logger.info(f"Database engine ready: {engine.url.render_as_string(hide_password=True)}")
    return engine


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def build_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(
        bind=engine,
        autoflush=False,
        autocommit=False,
        expire_on_commit=False,
        future=True,
    )


def init_db(engine: Engine) -> None:
    """
    Import models and create tables. Should be invoked once during startup.
    """
    try:
        from wordnest import models  # noqa: F401  (side-effect import)
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Error initializing database: {e}", exc_info=True)
        raise


@contextmanager
def db_session(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """
    Context manager that yields a SQLAlchemy session and guarantees cleanup.
    """
    session = session_factory()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
