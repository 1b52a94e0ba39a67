"""Ledger Routes — seeding and raw invocation by operation name.

Invariants:
    - POST /ledger/init runs InitLedger: overwrites seed ids, never 409s
    - POST /invoke resolves the name through ContractDispatch only (no other lookup)

Design Decisions:
    - Raw invoke endpoint mirrors how ledger clients call a contract
      (function name + positional string args) for tooling that speaks that shape
"""

import logging

from fastapi import APIRouter, Depends

from supplychain.core.domain_types import Operation
from supplychain.core.repository_protocols import Ledger
from supplychain.core.seed_products import SEED_PRODUCT_IDS
from supplychain.infrastructure.ledger import get_ledger, run_invocation
from supplychain.schemas.product import InvokeRequest, InvokeResponse, LedgerInitResponse
from supplychain.services.contract_dispatch import ContractDispatch
from supplychain.services.product_contract import ProductContract

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1", tags=["ledger"])

_contract = ProductContract()
_dispatch = ContractDispatch(_contract)


@router.post("/ledger/init", response_model=LedgerInitResponse)
def init_ledger(backend: Ledger = Depends(get_ledger)):
    """Write the seed products, replacing any existing seed records."""
    tx_id, _ = run_invocation(
        backend, _contract.bootstrap, Operation.INIT_LEDGER.value,
    )
    return LedgerInitResponse(tx_id=tx_id, seeded=list(SEED_PRODUCT_IDS))


@router.get("/operations")
def list_operations():
    return {"operations": _dispatch.operations()}


@router.post("/invoke", response_model=InvokeResponse)
def invoke(body: InvokeRequest, backend: Ledger = Depends(get_ledger)):
    """Run any registered operation by name with positional string args."""
    tx_id, result = run_invocation(
        backend, lambda ctx: _dispatch.invoke(ctx, body.function, body.args),
        body.function,
    )
    return InvokeResponse(tx_id=tx_id, function=body.function, result=result)
