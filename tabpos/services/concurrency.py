"""Unit-of-work helpers for engine mutations.

Each mutation runs inside ``atomic``: it either commits as a whole or is
rolled back, and is never retried. Row locks are per transaction id, so
mutations on different tabs never wait for each other.
"""
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy import Select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tabpos.exceptions.pos_exception import APIException, StoreFailureError

logger = logging.getLogger(__name__)


def lock_for_update(query: Select) -> Select:
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE; there the lock is taken by
    the BEGIN IMMEDIATE that configure_sqlite issues for every unit of work.
    """
    return query.with_for_update()


@asynccontextmanager
async def atomic(db: AsyncSession) -> AsyncIterator[AsyncSession]:
    """Commit on success, roll back on any failure.

    Domain errors propagate unchanged; store errors are surfaced as
    StoreFailureError.
    """
    try:
        yield db
        await db.commit()
    except APIException:
        await db.rollback()
        raise
    except SQLAlchemyError as exc:
        await db.rollback()
        logger.exception("Store failure, unit of work rolled back")
        raise StoreFailureError(f"Storage failure: {exc.__class__.__name__}") from exc
