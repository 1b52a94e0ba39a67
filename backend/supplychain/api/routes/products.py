"""Product Routes — HTTP surface for the product lifecycle operations.

Invariants:
    - One request = one ledger transaction (run_invocation); a mutation and the
      record it returns come from the same transaction
    - Every response carries the transaction id in X-Transaction-Id
    - Routes only translate HTTP <-> contract arguments; all rules live in ProductContract
    - No DELETE route: records are append-only

Design Decisions:
    - Sync route functions: contract and backends are synchronous, FastAPI runs
      them in its threadpool
    - Path id over body id for update/transfer: the URL names the record
"""

import logging

from fastapi import APIRouter, Depends, Response, status

from supplychain.core.domain_types import Operation
from supplychain.core.product import Product
from supplychain.core.repository_protocols import Ledger, TransactionContext
from supplychain.infrastructure.ledger import get_ledger, run_invocation
from supplychain.schemas.product import OwnershipTransfer, ProductCreate, ProductUpdate
from supplychain.services.product_contract import ProductContract

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/products", tags=["products"])

TX_ID_HEADER = "X-Transaction-Id"

_contract = ProductContract()


@router.post("", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    body: ProductCreate, response: Response,
    backend: Ledger = Depends(get_ledger),
):
    """Create a product; 409 if the id is taken."""
    def _create(ctx: TransactionContext) -> Product:
        _contract.create_product(
            ctx, body.id, body.name, body.owner, body.description, body.category,
        )
        return _contract.query_product(ctx, body.id)

    tx_id, product = run_invocation(
        backend, _create, Operation.CREATE_PRODUCT.value,
    )
    response.headers[TX_ID_HEADER] = tx_id
    return product


@router.get("", response_model=list[Product])
def list_products(response: Response, backend: Ledger = Depends(get_ledger)):
    """Every product in key order."""
    tx_id, products = run_invocation(
        backend, _contract.get_all_products, Operation.GET_ALL_PRODUCTS.value,
    )
    response.headers[TX_ID_HEADER] = tx_id
    return products


@router.get("/{product_id}", response_model=Product)
def get_product(
    product_id: str, response: Response, backend: Ledger = Depends(get_ledger),
):
    tx_id, product = run_invocation(
        backend, lambda ctx: _contract.query_product(ctx, product_id),
        Operation.QUERY_PRODUCT.value,
    )
    response.headers[TX_ID_HEADER] = tx_id
    return product


@router.put("/{product_id}", response_model=Product)
def update_product(
    product_id: str, body: ProductUpdate, response: Response,
    backend: Ledger = Depends(get_ledger),
):
    """Overwrite status, owner, description and category; 404 if absent."""
    def _update(ctx: TransactionContext) -> Product:
        _contract.update_product(
            ctx, product_id, body.status, body.owner, body.description, body.category,
        )
        return _contract.query_product(ctx, product_id)

    tx_id, product = run_invocation(
        backend, _update, Operation.UPDATE_PRODUCT.value,
    )
    response.headers[TX_ID_HEADER] = tx_id
    return product


@router.post("/{product_id}/transfer", response_model=Product)
def transfer_ownership(
    product_id: str, body: OwnershipTransfer, response: Response,
    backend: Ledger = Depends(get_ledger),
):
    """Hand the product to a new owner; 404 if absent."""
    def _transfer(ctx: TransactionContext) -> Product:
        _contract.transfer_ownership(ctx, product_id, body.new_owner)
        return _contract.query_product(ctx, product_id)

    tx_id, product = run_invocation(
        backend, _transfer, Operation.TRANSFER_OWNERSHIP.value,
    )
    response.headers[TX_ID_HEADER] = tx_id
    return product
