"""
Database engine, session management, and base model.

This module is the foundation for all database operations.
Every model inherits from Base. Work against the ledger runs
inside a session from session_scope() or one the host
application provides.
"""

from contextlib import contextmanager

from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker, DeclarativeBase

from double_entry.config import get_settings

settings = get_settings()

# --- Engine ---
# pool_pre_ping=True tests connections before using them,
# which handles cases where the database restarted or a
# connection went stale.
engine = create_engine(
    settings.DATABASE_URL,
    pool_pre_ping=True,
    echo=settings.SQL_ECHO,
)

# --- Session Factory ---
# autocommit=False means the caller explicitly controls when
# changes are saved: an entry and its amounts are committed
# together or not at all.
# autoflush=False means SQLAlchemy won't send SQL to the
# database until we explicitly flush or commit.
SessionLocal = sessionmaker(
    bind=engine,
    autocommit=False,
    autoflush=False,
)


# --- Base Model Class ---
# Every ledger model (Account, Entry, Amount, ...) inherits
# from this class.
class Base(DeclarativeBase):
    pass


@contextmanager
def session_scope(session_factory=SessionLocal):
    """
    Provide a transactional scope around a series of operations.

    Commits when the block finishes, rolls back if it raises,
    and always closes the session so the connection goes back
    to the pool.
    """
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
