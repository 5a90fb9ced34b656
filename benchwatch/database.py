"""
Database engine + session factory.

Always initializes — defaults to SQLite for local dev, Postgres in production.
get_session() always returns a real session; session_scope() wraps one unit of work.
"""
import logging
from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError, DBAPIError, OperationalError, InterfaceError
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from benchwatch.config import DATABASE_URL, DB_POOL_SIZE, DB_MAX_OVERFLOW
from benchwatch.errors import StorageUnavailable, StorageRejected

logger = logging.getLogger('benchwatch.database')


class Base(DeclarativeBase):
    pass


# Heroku-style URLs use postgres:// but SQLAlchemy 2.x requires postgresql://
url = DATABASE_URL.replace('postgres://', 'postgresql://', 1)

# SQLite needs different engine kwargs than Postgres
if url.startswith('sqlite'):
    engine = create_engine(url, connect_args={'check_same_thread': False, 'timeout': 30})
else:
    engine = create_engine(url, pool_pre_ping=True, pool_size=DB_POOL_SIZE,
                           max_overflow=DB_MAX_OVERFLOW)

SessionLocal = sessionmaker(bind=engine)


def get_session():
    """Return a new DB session."""
    return SessionLocal()


def _is_transient(e: SQLAlchemyError) -> bool:
    """Connection loss, lock timeouts and deadlocks; not constraint or SQL errors."""
    if isinstance(e, (OperationalError, InterfaceError)):
        return True
    return isinstance(e, DBAPIError) and e.connection_invalidated


@contextmanager
def session_scope():
    """
    Yield a session for one unit of work; callers commit explicitly.

    Any exception rolls the session back. Transient driver failures become
    StorageUnavailable (retryable); other storage errors become StorageRejected.
    """
    session = get_session()
    try:
        yield session
    except SQLAlchemyError as e:
        session.rollback()
        logger.error("Storage call failed: %s", e, exc_info=True)
        if _is_transient(e):
            raise StorageUnavailable('Storage is unavailable, retry later') from e
        raise StorageRejected('Storage rejected the operation') from e
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()
