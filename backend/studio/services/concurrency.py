# Overview: Unit-of-work and row locking helpers shared by every write path.

from __future__ import annotations

from contextlib import contextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm.exc import StaleDataError

from ..errors import Internal


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    unit_of_work() compensates on SQLite by taking the write lock up front.
    """
    return query.with_for_update()


def _begin_write(session) -> None:
    # db.session is a scoped_session proxy; transaction state lives on the
    # Session it currently resolves to.
    current = session() if hasattr(session, "registry") else session
    bind = current.get_bind()
    if bind.dialect.name == "sqlite" and not current.in_transaction():
        current.execute(text("BEGIN IMMEDIATE"))


@contextmanager
def unit_of_work(session):
    """
    One atomic unit of work on the given session.

    Commits when the block exits cleanly. Any exception rolls back everything
    written inside the block before it propagates, so partial writes are never
    committed. Storage failures (lock timeouts, deadlocks, optimistic version
    conflicts) surface as Internal; the caller must resubmit the whole
    operation.
    """
    _begin_write(session)
    try:
        yield session
        session.commit()
    except (SQLAlchemyError, StaleDataError) as exc:
        session.rollback()
        raise Internal("Storage failure, transaction rolled back", cause=exc) from exc
    except BaseException:
        session.rollback()
        raise
