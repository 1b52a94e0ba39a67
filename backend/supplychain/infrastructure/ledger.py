"""Ledger Manager — process-wide ledger backend plus the per-invocation transaction runner.

Invariants:
    - ledger is built once on startup (init_ledger) from Settings
    - Every invocation gets a fresh tx id and ONE timestamp captured at entry;
      all replicas of that invocation would see the same pair
    - The operation's writes commit only if it returns normally and its reads
      are still current (otherwise TransactionConflictError, nothing applied)
    - Errors leaving an invocation carry its tx_id and operation name

Design Decisions:
    - Singleton ledger initialized on startup: FastAPI lifespan manages lifecycle
      (ADR: no global import side effects)
    - Gateway stamps the transaction time: stands in for the ordering service,
      so the contract never touches the local clock itself
"""

import logging
from typing import Callable, TypeVar

from supplychain.config import Settings
from supplychain.core.errors import SupplyChainError
from supplychain.core.repository_protocols import Ledger, TransactionContext
from supplychain.infrastructure.ledger_transaction import new_tx_id, stamp_now
from supplychain.infrastructure.memory_ledger import InMemoryLedger
from supplychain.infrastructure.world_state import SqlWorldState

logger = logging.getLogger(__name__)

T = TypeVar("T")

# Singleton (initialized on startup)
ledger: Ledger | None = None


def build_ledger(settings: Settings) -> Ledger:
    if settings.ledger_backend == "memory":
        return InMemoryLedger()
    backend = SqlWorldState(
        settings.database_url,
        pool_size=settings.database_pool_size,
        max_overflow=settings.database_max_overflow,
        echo=settings.database_echo,
    )
    backend.create_schema()
    return backend


def init_ledger(settings: Settings) -> Ledger:
    global ledger
    ledger = build_ledger(settings)
    logger.info(f"Ledger backend ready: {settings.ledger_backend}")
    return ledger


def get_ledger() -> Ledger:
    """FastAPI dependency for the ledger backend."""
    if not ledger:
        raise RuntimeError("Ledger not initialized")
    return ledger


def run_invocation(
    backend: Ledger,
    operation: Callable[[TransactionContext], T],
    operation_name: str | None = None,
) -> tuple[str, T]:
    """Execute one operation as one transaction. Returns (tx_id, result).

    Ledger errors raised by the operation or by its commit leave with the
    invocation's tx_id and operation name in their context.
    """
    tx_id = new_tx_id()
    try:
        with backend.transaction(tx_id, stamp_now()) as ctx:
            result = operation(ctx)
    except SupplyChainError as e:
        e.context.tx_id = e.context.tx_id or tx_id
        e.context.operation = e.context.operation or operation_name
        raise
    return tx_id, result
