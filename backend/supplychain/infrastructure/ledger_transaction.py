"""Buffered Transaction — versioned reads plus a private write set, applied on commit.

Invariants:
    - get_state returns this transaction's own buffered write when there is one,
      otherwise committed state; get_state_by_range reads committed state only
    - put_state never touches the backend: writes collect in write_set until commit
    - Every committed read records the version it saw (read_versions, range_reads);
      a backend commits only if validate_reads() finds every version unchanged
    - Empty keys are rejected at put time
    - An invocation that raises is discarded by its backend; write_set never lands

Design Decisions:
    - One transaction class shared by every backend: backends differ only in the
      StateReader they supply and in how they apply write_set
    - Optimistic validation at commit over locks held for the whole invocation:
      readers never block, a stale writer fails with TransactionConflictError
    - Version = tx id of the last committed writer; None = key absent
    - A range read is validated up to the last key the caller actually consumed,
      or to the range end when the cursor was exhausted (phantoms included)
"""

import time
import uuid
from dataclasses import dataclass, field
from typing import Callable, Iterator, Protocol

from supplychain.core.domain_types import NANOS_PER_SECOND, TxTimestamp
from supplychain.core.errors import StorageWriteError, TransactionConflictError

# Version assigned to state that predates any tracked transaction
GENESIS_VERSION = "genesis"


class VersionedCursor(Protocol):
    """Backend cursor yielding (key, value, version) in key order."""
    def __iter__(self) -> Iterator[tuple[str, bytes, str]]: ...
    def close(self) -> None: ...


class StateReader(Protocol):
    """Committed-state view a backend lends to one transaction."""
    def read(self, key: str) -> tuple[bytes | None, str | None]: ...
    def scan(self, start: str, end: str) -> VersionedCursor: ...


@dataclass
class RangeRead:
    """One range scan as observed by the transaction."""
    start: str
    end: str
    seen: dict[str, str] = field(default_factory=dict)
    exhausted: bool = False

    def covers(self, key: str) -> bool:
        if key < self.start or (self.end and key >= self.end):
            return False
        if self.exhausted:
            return True
        return bool(self.seen) and key <= max(self.seen)


class _TrackedCursor:
    """StateCursor handed to the core; records what the scan observed."""

    def __init__(self, inner: VersionedCursor, record: RangeRead, on_read):
        self._inner = inner
        self._record = record
        self._on_read = on_read
        self._closed = False

    def __iter__(self) -> Iterator[tuple[str, bytes]]:
        for key, value, version in self._inner:
            self._record.seen[key] = version
            self._on_read(key, version)
            yield key, value
        if not self._closed:
            self._record.exhausted = True

    def close(self) -> None:
        self._closed = True
        self._inner.close()

    @property
    def closed(self) -> bool:
        return self._closed


class BufferedTransaction:
    """TransactionContext implementation used by all ledger backends."""

    def __init__(
        self, reader: StateReader, tx_id: str, timestamp: TxTimestamp | None,
    ):
        self.tx_id = tx_id
        self._reader = reader
        self._timestamp = timestamp
        self.write_set: dict[str, bytes] = {}
        self.read_versions: dict[str, str | None] = {}
        self.range_reads: list[RangeRead] = []

    def get_state(self, key: str) -> bytes | None:
        if key in self.write_set:
            return self.write_set[key]
        value, version = self._reader.read(key)
        self._record_read(key, version)
        return value

    def put_state(self, key: str, value: bytes) -> None:
        if not key:
            raise StorageWriteError("key must not be empty", key)
        self.write_set[key] = bytes(value)

    def get_state_by_range(self, start: str, end: str) -> _TrackedCursor:
        record = RangeRead(start, end)
        self.range_reads.append(record)
        return _TrackedCursor(
            self._reader.scan(start, end), record, self._record_read,
        )

    def get_tx_timestamp(self) -> TxTimestamp | None:
        return self._timestamp

    def _record_read(self, key: str, version: str | None) -> None:
        # First observation wins: a later re-read must not hide a change
        self.read_versions.setdefault(key, version)

    def validate_reads(
        self,
        version_of: Callable[[str], str | None],
        versions_in: Callable[[str, str], dict[str, str]],
        written: frozenset[str] = frozenset(),
    ) -> None:
        """Raise TransactionConflictError if committed state moved since it was read.

        Keys in `written` are skipped: the backend already validated them
        while applying the write set.
        """
        for key, seen in self.read_versions.items():
            if key not in written and version_of(key) != seen:
                raise TransactionConflictError(key)
        for scan in self.range_reads:
            current = {
                k: v for k, v in versions_in(scan.start, scan.end).items()
                if scan.covers(k) and k not in written
            }
            observed = {
                k: v for k, v in scan.seen.items() if k not in written
            }
            if current != observed:
                changed = sorted(set(current.items()) ^ set(observed.items()))
                raise TransactionConflictError(changed[0][0])


def new_tx_id() -> str:
    return uuid.uuid4().hex


def stamp_now() -> TxTimestamp:
    """Gateway-assigned transaction time, captured once per invocation."""
    seconds, nanos = divmod(time.time_ns(), NANOS_PER_SECOND)
    return TxTimestamp(seconds, nanos)
