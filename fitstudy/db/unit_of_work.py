# fitstudy/db/unit_of_work.py
"""
Explicit transactional unit for write paths.

A unit is: begin -> locked reads -> conditional write -> commit, or
rollback on any exception. Everything done with the session inside the
``with`` block belongs to one database transaction, and that transaction
starts at the top of the block: anything the session still had open from
earlier reads is committed first.
"""

from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import text
from sqlalchemy.exc import DBAPIError, OperationalError
from sqlalchemy.orm import Session

from fitstudy.core.config import settings

# Connection execution option marking a transaction as a write unit.
# The SQLite engine opens such transactions with BEGIN IMMEDIATE.
WRITE_UNIT_OPTION = "fitstudy_write_unit"

# lock_not_available, query_canceled
_PG_TIMEOUT_CODES = {"55P03", "57014"}


@contextmanager
def transactional_unit(
    db: Session, *, lock_timeout_ms: Optional[int] = None
) -> Iterator[Session]:
    """Run the enclosed block as one all-or-nothing transaction."""
    timeout = lock_timeout_ms if lock_timeout_ms is not None else settings.DB_LOCK_TIMEOUT_MS
    if db.in_transaction():
        db.commit()
    try:
        db.connection(execution_options={WRITE_UNIT_OPTION: True})
        if db.get_bind().dialect.name == "postgresql":
            # Scoped to this transaction only.
            db.execute(text(f"SET LOCAL lock_timeout = '{int(timeout)}ms'"))
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise


def is_lock_timeout(exc: Exception) -> bool:
    """True when the store gave up waiting for a lock rather than failing outright."""
    if not isinstance(exc, OperationalError):
        return False
    orig = exc.orig if isinstance(exc, DBAPIError) else None
    if getattr(orig, "pgcode", None) in _PG_TIMEOUT_CODES:
        return True
    return "database is locked" in str(orig or exc).lower()
