"""API test fixtures — FastAPI test client over an in-memory ledger.

Invariants:
    - Every test gets a fresh InMemoryLedger
    - get_ledger dependency overridden; the module singleton patched for probes

Design Decisions:
    - ASGITransport skips lifespan: no settings-driven backend is built in tests
"""

import pytest
from httpx import ASGITransport, AsyncClient

import supplychain.infrastructure.ledger as ledger_module
from supplychain.infrastructure.ledger import get_ledger
from supplychain.main import app


@pytest.fixture
async def client(memory_ledger, monkeypatch):
    """FastAPI test client with the ledger dependency overridden."""
    app.dependency_overrides[get_ledger] = lambda: memory_ledger
    monkeypatch.setattr(ledger_module, "ledger", memory_ledger)

    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c

    app.dependency_overrides.clear()
