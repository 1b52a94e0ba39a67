"""SQL World State — SQLAlchemy-backed ledger with one DB transaction per invocation.

Invariants:
    - Every invocation runs in its own Session
    - last_tx_id is the row version: every write stamps the writing tx id
    - On normal exit the write_set is applied conditionally and the remaining
      reads re-checked inside the same DB transaction; a stale read raises
      TransactionConflictError and the whole write_set rolls back
    - Rollback on any exception
    - Read-path SQLAlchemy failures become StorageReadError, commit failures
      become StorageWriteError (core/errors.py)
    - Range scans order by key; SQLite's default BINARY collation gives code point order
    - The scan cursor wraps a live Result and must be closed by the caller

Design Decisions:
    - Synchronous engine over async: contract operations are synchronous units
      of work; FastAPI runs the sync routes in its threadpool
    - Write first, validate second: the first write takes SQLite's write lock
      (FOR UPDATE rows on PostgreSQL), so no commit can slip in between the
      re-check and our COMMIT
    - Key read as absent -> plain INSERT; a concurrent insert surfaces as
      IntegrityError on the primary key and is reported as a conflict
    - Key read at version v -> UPDATE ... WHERE last_tx_id = v; zero rows = conflict
    - Blind writes (never read) -> session.merge() upsert, portable across
      SQLite and PostgreSQL
    - Pool sizing only applied to non-SQLite URLs (SQLite pools reject it)
"""

import logging
from contextlib import contextmanager
from typing import Iterator

from sqlalchemy import create_engine, func, select, text, update
from sqlalchemy.engine import Engine, Result
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from supplychain.core.domain_types import TxTimestamp
from supplychain.core.errors import (
    StorageReadError, StorageWriteError, TransactionConflictError,
)
from supplychain.db.base import Base
from supplychain.infrastructure.ledger_transaction import BufferedTransaction, new_tx_id
from supplychain.models.world_state_entry import WorldStateEntry

logger = logging.getLogger(__name__)

# Rows written outside this backend may carry no tx id
_row_version = func.coalesce(WorldStateEntry.last_tx_id, "")


class SqlStateCursor:
    """Range-scan cursor over a live SQLAlchemy Result."""

    def __init__(self, result: Result):
        self._result = result

    def __iter__(self) -> Iterator[tuple[str, bytes, str]]:
        try:
            for key, value, version in self._result:
                yield key, value, version
        except SQLAlchemyError as e:
            logger.error(f"World state scan failed: {e}")
            raise StorageReadError("range scan failed") from e

    def close(self) -> None:
        self._result.close()


class _SessionReader:
    """Committed-state reader bound to one Session."""

    def __init__(self, session: Session):
        self._session = session

    def read(self, key: str) -> tuple[bytes | None, str | None]:
        try:
            row = self._session.execute(
                select(WorldStateEntry.value, _row_version)
                .where(WorldStateEntry.key == key),
            ).one_or_none()
        except SQLAlchemyError as e:
            logger.error(f"World state read failed for {key}: {e}")
            raise StorageReadError("point read failed", key) from e
        return (row[0], row[1]) if row else (None, None)

    def scan(self, start: str, end: str) -> SqlStateCursor:
        stmt = (
            select(WorldStateEntry.key, WorldStateEntry.value, _row_version)
            .order_by(WorldStateEntry.key)
        )
        stmt = _bounded(stmt, start, end)
        try:
            return SqlStateCursor(self._session.execute(stmt))
        except SQLAlchemyError as e:
            logger.error(f"World state scan failed: {e}")
            raise StorageReadError("range scan failed") from e


def _bounded(stmt, start: str, end: str):
    if start:
        stmt = stmt.where(WorldStateEntry.key >= start)
    if end:
        stmt = stmt.where(WorldStateEntry.key < end)
    return stmt


def _engine_kwargs(
    database_url: str, pool_size: int, max_overflow: int, echo: bool,
) -> dict:
    kwargs: dict = {"echo": echo, "pool_pre_ping": True}
    if not database_url.startswith("sqlite"):
        kwargs.update(
            pool_size=pool_size, max_overflow=max_overflow, pool_recycle=3600,
        )
    return kwargs


class SqlWorldState:
    """Ledger backend over a SQL world_state table."""

    def __init__(
        self,
        database_url: str | None = None,
        pool_size: int = 20,
        max_overflow: int = 10,
        echo: bool = False,
        engine: Engine | None = None,
    ):
        if engine is None:
            if not database_url:
                raise ValueError("database_url or engine is required")
            engine = create_engine(
                database_url,
                **_engine_kwargs(database_url, pool_size, max_overflow, echo),
            )
        self.engine = engine
        self._session_factory = sessionmaker(
            self.engine, class_=Session, expire_on_commit=False,
        )

    def create_schema(self) -> None:
        """Create tables directly (dev/test). Production uses Alembic."""
        Base.metadata.create_all(self.engine)

    @contextmanager
    def transaction(
        self, tx_id: str | None = None, timestamp: TxTimestamp | None = None,
    ) -> Iterator[BufferedTransaction]:
        session = self._session_factory()
        tx = BufferedTransaction(
            _SessionReader(session), tx_id or new_tx_id(), timestamp,
        )
        try:
            yield tx
            self._commit(session, tx)
        except BaseException:
            session.rollback()
            raise
        finally:
            session.close()

    def _commit(self, session: Session, tx: BufferedTransaction) -> None:
        if not tx.write_set:
            return
        try:
            for key, value in tx.write_set.items():
                self._apply_write(session, tx, key, value)
            tx.validate_reads(
                lambda key: _current_version(session, key),
                lambda start, end: _current_versions(session, start, end),
                written=frozenset(tx.write_set),
            )
            session.commit()
        except TransactionConflictError as e:
            logger.warning(
                f"World state conflict on {e.key}", extra={"tx_id": tx.tx_id},
            )
            raise
        except SQLAlchemyError as e:
            logger.error(
                f"World state commit failed: {e}", extra={"tx_id": tx.tx_id},
            )
            raise StorageWriteError("commit failed") from e
        logger.debug(
            f"Committed {len(tx.write_set)} write(s)", extra={"tx_id": tx.tx_id},
        )

    def _apply_write(
        self, session: Session, tx: BufferedTransaction, key: str, value: bytes,
    ) -> None:
        entry = WorldStateEntry(key=key, value=value, last_tx_id=tx.tx_id)
        try:
            if key not in tx.read_versions:
                session.merge(entry)
                session.flush()
                return
            seen = tx.read_versions[key]
            if seen is None:
                session.add(entry)
                session.flush()
                return
        except IntegrityError as e:
            raise TransactionConflictError(key) from e

        result = session.execute(
            update(WorldStateEntry)
            .where(WorldStateEntry.key == key, _row_version == seen)
            .values(value=value, last_tx_id=tx.tx_id),
            execution_options={"synchronize_session": False},
        )
        if result.rowcount != 1:
            raise TransactionConflictError(key)

    def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        try:
            with self.engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            return True
        except SQLAlchemyError as e:
            logger.error(f"DB health check failed: {e}")
            return False


def _current_version(session: Session, key: str) -> str | None:
    return session.execute(
        select(_row_version).where(WorldStateEntry.key == key).with_for_update(),
    ).scalar_one_or_none()


def _current_versions(session: Session, start: str, end: str) -> dict[str, str]:
    stmt = _bounded(
        select(WorldStateEntry.key, _row_version).with_for_update(), start, end,
    )
    return {key: version for key, version in session.execute(stmt)}
