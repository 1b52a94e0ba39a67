"""Health & Readiness Probes — liveness and readiness endpoints for container orchestration.

Invariants:
    - GET /health/ always returns 200 if process is up (liveness)
    - GET /health/ready returns 503 if the world state backend is unreachable (readiness)

Design Decisions:
    - Separate liveness/readiness: liveness restarts, readiness removes from load balancer
"""

import logging
from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

import supplychain.infrastructure.ledger as ledger_module

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/health", tags=["health"])


@router.get("/", status_code=status.HTTP_200_OK)
def health_check():
    """Basic liveness probe. Returns 200 if the process is up."""
    return {
        "status": "healthy",
        "service": "supplychain-ledger",
        "version": "1.0.0",
    }


@router.get("/ready")
def readiness_check():
    """Readiness probe — includes world state connectivity."""
    backend = ledger_module.ledger
    ledger_ok = backend.health_check() if backend else False
    if not ledger_ok:
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={
                "status": "not_ready",
                "reason": "ledger_unavailable",
            },
        )
    return {"status": "ready", "checks": {"ledger": "healthy"}}
