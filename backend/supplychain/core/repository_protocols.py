"""Boundary Protocols — contracts between core and the ledger platform.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All ledger IO accessed through Protocol types
    - A TransactionContext is passed into every contract operation, never held globally
    - Reads observe committed state; put_state writes land at the commit boundary

Design Decisions:
    - Protocol over ABC: structural subtyping, test fakes need no inheritance
      (ADR: ExMA anti-pattern)
    - Synchronous methods: one invocation is a sequential unit of work, the
      platform owns concurrency across invocations
"""

from contextlib import AbstractContextManager
from typing import Iterator, Protocol

from supplychain.core.domain_types import TxTimestamp


class StateCursor(Protocol):
    """Ordered range-scan cursor over (key, value) pairs. Must be closed."""
    def __iter__(self) -> Iterator[tuple[str, bytes]]: ...
    def close(self) -> None: ...


class TransactionContext(Protocol):
    """Per-invocation view of the world state plus its consensus time."""
    tx_id: str

    def get_state(self, key: str) -> bytes | None: ...
    def put_state(self, key: str, value: bytes) -> None: ...
    def get_state_by_range(self, start: str, end: str) -> StateCursor: ...
    def get_tx_timestamp(self) -> TxTimestamp | None: ...


class Ledger(Protocol):
    """World state backend — opens one transaction per invocation."""
    def transaction(
        self, tx_id: str | None = None, timestamp: TxTimestamp | None = None,
    ) -> AbstractContextManager[TransactionContext]: ...
    def health_check(self) -> bool: ...
