"""Root conftest — shared test configuration and ledger fixtures."""

import os

import pytest

from supplychain.core.domain_types import TxTimestamp
from supplychain.infrastructure.memory_ledger import InMemoryLedger

# Ensure tests never touch a real world state database
os.environ.setdefault("LEDGER_BACKEND", "memory")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LOG_FORMAT", "text")

# 2023-11-14T22:13:20Z
BASE_SECONDS = 1_700_000_000


@pytest.fixture
def memory_ledger():
    return InMemoryLedger()


@pytest.fixture
def run(memory_ledger):
    """Run one operation as one committed transaction at a chosen consensus time.

    run(op, at=0) stamps BASE_SECONDS + at; op receives the TransactionContext.
    """
    counter = {"n": 0}

    def _run(operation, at: int = 0, nanos: int = 0):
        counter["n"] += 1
        ts = TxTimestamp(BASE_SECONDS + at, nanos)
        with memory_ledger.transaction(f"tx-{counter['n']}", ts) as ctx:
            return operation(ctx)

    return _run
