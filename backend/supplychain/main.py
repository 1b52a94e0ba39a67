"""Supply Chain Ledger API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery — ExMA anti-pattern)
    - Global error handlers map SupplyChainError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Ledger backend initialized on startup via lifespan context manager
    - InitLedger runs on startup only when bootstrap_on_startup is set

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Error handlers live in api/error_handlers.py (ADR: ExMA import fan-out < 10)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from supplychain.api.error_handlers import register_error_handlers
from supplychain.infrastructure.ledger import init_ledger, run_invocation
from supplychain.infrastructure.observability import setup_logging
from supplychain.core.domain_types import Operation
from supplychain.config import get_settings
from supplychain.api.routes import health, ledger, products
from supplychain.services.product_contract import ProductContract

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format, settings.database_echo)
    backend = init_ledger(settings)
    if settings.bootstrap_on_startup:
        tx_id, _ = run_invocation(
            backend, ProductContract().bootstrap, Operation.INIT_LEDGER.value,
        )
        logger.info("Ledger bootstrapped on startup", extra={"tx_id": tx_id})
    logger.info("Supply chain ledger API started")
    yield
    logger.info("Supply chain ledger API shutting down")


app = FastAPI(
    title="Supply Chain Ledger API", version="1.0.0", lifespan=lifespan,
)

# CORS — configured from settings, not hardcoded
settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Routes — explicit registration (ExMA: no convention-over-config)
app.include_router(health.router)
app.include_router(products.router)
app.include_router(ledger.router)

register_error_handlers(app)
