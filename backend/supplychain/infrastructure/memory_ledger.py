"""In-Memory Ledger — process-local world state for development and tests.

Invariants:
    - Each transaction reads a snapshot copied at transaction start
    - Every committed key carries a version: the tx id that last wrote it
    - On normal exit, reads are validated and the write_set applied in ONE
      critical section; a stale read raises TransactionConflictError and
      nothing is applied
    - On exception, the write_set is discarded
    - Range scans return keys in lexicographic (code point) order

Design Decisions:
    - dict + sorted() over a sorted container: ledgers here hold few keys and
      scans are rare compared to point reads
    - Read-only transactions skip validation: they commit nothing
"""

import logging
import threading
from contextlib import contextmanager
from typing import Iterator

from supplychain.core.domain_types import TxTimestamp
from supplychain.infrastructure.ledger_transaction import (
    GENESIS_VERSION, BufferedTransaction, new_tx_id,
)

logger = logging.getLogger(__name__)

# key -> (value, version)
_State = dict[str, tuple[bytes, str]]


def _keys_in(state: _State, start: str, end: str) -> list[str]:
    return sorted(k for k in state if k >= start and (not end or k < end))


class MemoryCursor:
    """Range-scan cursor over a materialized snapshot slice."""

    def __init__(self, items: list[tuple[str, bytes, str]]):
        self._items = items
        self.closed = False

    def __iter__(self) -> Iterator[tuple[str, bytes, str]]:
        for item in self._items:
            if self.closed:
                return
            yield item

    def close(self) -> None:
        self.closed = True


class _Snapshot:
    """Frozen copy of committed state lent to one transaction."""

    def __init__(self, state: _State):
        self._state = state

    def read(self, key: str) -> tuple[bytes | None, str | None]:
        entry = self._state.get(key)
        return entry if entry else (None, None)

    def scan(self, start: str, end: str) -> MemoryCursor:
        return MemoryCursor([
            (k, *self._state[k]) for k in _keys_in(self._state, start, end)
        ])


class InMemoryLedger:
    """Ledger backend holding committed state in a dict."""

    def __init__(self, initial: dict[str, bytes] | None = None):
        self._state: _State = {
            key: (value, GENESIS_VERSION) for key, value in (initial or {}).items()
        }
        self._lock = threading.Lock()

    @contextmanager
    def transaction(
        self, tx_id: str | None = None, timestamp: TxTimestamp | None = None,
    ) -> Iterator[BufferedTransaction]:
        with self._lock:
            snapshot = _Snapshot(dict(self._state))
        tx = BufferedTransaction(snapshot, tx_id or new_tx_id(), timestamp)
        yield tx
        if not tx.write_set:
            return
        with self._lock:
            tx.validate_reads(self._version_of, self._versions_in)
            for key, value in tx.write_set.items():
                self._state[key] = (value, tx.tx_id)
        logger.debug(
            f"Committed {len(tx.write_set)} write(s)", extra={"tx_id": tx.tx_id},
        )

    def _version_of(self, key: str) -> str | None:
        entry = self._state.get(key)
        return entry[1] if entry else None

    def _versions_in(self, start: str, end: str) -> dict[str, str]:
        return {k: self._state[k][1] for k in _keys_in(self._state, start, end)}

    def committed(self, key: str) -> bytes | None:
        """Read committed state outside any transaction."""
        with self._lock:
            entry = self._state.get(key)
        return entry[0] if entry else None

    def version(self, key: str) -> str | None:
        """Tx id of the last committed writer of key (None if absent)."""
        with self._lock:
            return self._version_of(key)

    def keys(self) -> list[str]:
        with self._lock:
            return sorted(self._state)

    def health_check(self) -> bool:
        return True
