"""Product Contract — create, update, transfer, query and enumerate product records.

Invariants:
    - Stateless: every operation gets its TransactionContext as a parameter
    - bootstrap() writes the seed set WITHOUT an existence check (re-run overwrites)
    - create_product() fails with ProductAlreadyExistsError on an existing id
    - create_product() rejects an empty or over-long id with InvalidProductIdError;
      ids are stored exactly as given (no trimming)
    - update_product(), transfer_ownership(), query_product() fail with
      ProductNotFoundError on an absent id
    - Every successful mutation sets updated_at to the transaction timestamp, even
      when no field value changes; created_at is never touched after creation
    - At most one put per record per call; errors before put leave state unchanged
    - No delete operation exists

Design Decisions:
    - Distinct operations over a generic upsert: each has its own precondition
      (ADR: asymmetric overwrite semantics are observable behavior)
    - Neither update_product() nor transfer_ownership() short-circuits on an
      unchanged owner: both end with owner == new owner and a fresh updated_at
"""

import logging

from supplychain.core.domain_types import MAX_PRODUCT_ID_LENGTH, ProductStatus
from supplychain.core.errors import (
    InvalidProductIdError, ProductAlreadyExistsError, ProductNotFoundError,
)
from supplychain.core.product import Product
from supplychain.core.product_store import ProductStore
from supplychain.core.repository_protocols import TransactionContext
from supplychain.core.seed_products import SEED_PRODUCTS
from supplychain.core.tx_timestamp import current_timestamp

logger = logging.getLogger(__name__)


class ProductContract:
    """Lifecycle rules for product records. One method per logical operation."""

    def bootstrap(self, ctx: TransactionContext) -> None:
        """Seed the ledger. Overwrites any existing record at the seed ids."""
        timestamp = current_timestamp(ctx)
        store = ProductStore(ctx)
        for seed in SEED_PRODUCTS:
            store.put(Product(**seed, created_at=timestamp, updated_at=timestamp))
        logger.info(
            f"Ledger seeded with {len(SEED_PRODUCTS)} products",
            extra={"tx_id": ctx.tx_id, "operation": "InitLedger"},
        )

    def create_product(
        self, ctx: TransactionContext,
        product_id: str, name: str, owner: str, description: str, category: str,
    ) -> None:
        _check_new_id(product_id)
        store = ProductStore(ctx)
        if store.exists(product_id):
            raise ProductAlreadyExistsError(product_id)

        timestamp = current_timestamp(ctx)
        store.put(Product(
            id=product_id,
            name=name,
            status=ProductStatus.MANUFACTURED.value,
            owner=owner,
            created_at=timestamp,
            updated_at=timestamp,
            category=category,
            description=description,
        ))
        logger.info(
            f"Product {product_id} created",
            extra={"tx_id": ctx.tx_id, "operation": "CreateProduct", "product_id": product_id},
        )

    def update_product(
        self, ctx: TransactionContext,
        product_id: str, new_status: str, new_owner: str,
        new_description: str, new_category: str,
    ) -> None:
        store = ProductStore(ctx)
        if not store.exists(product_id):
            raise ProductNotFoundError(product_id)

        timestamp = current_timestamp(ctx)
        existing = store.get(product_id)
        store.put(existing.model_copy(update={
            "status": new_status,
            "owner": new_owner,
            "description": new_description,
            "category": new_category,
            "updated_at": timestamp,
        }))
        logger.info(
            f"Product {product_id} updated",
            extra={"tx_id": ctx.tx_id, "operation": "UpdateProduct", "product_id": product_id},
        )

    def transfer_ownership(
        self, ctx: TransactionContext, product_id: str, new_owner: str,
    ) -> None:
        store = ProductStore(ctx)
        if not store.exists(product_id):
            raise ProductNotFoundError(product_id)

        timestamp = current_timestamp(ctx)
        existing = store.get(product_id)
        store.put(existing.model_copy(
            update={"owner": new_owner, "updated_at": timestamp},
        ))
        logger.info(
            f"Product {product_id} transferred from {existing.owner} to {new_owner}",
            extra={"tx_id": ctx.tx_id, "operation": "TransferOwnership", "product_id": product_id},
        )

    def query_product(self, ctx: TransactionContext, product_id: str) -> Product:
        store = ProductStore(ctx)
        if not store.exists(product_id):
            raise ProductNotFoundError(product_id)
        return store.get(product_id)

    def product_exists(self, ctx: TransactionContext, product_id: str) -> bool:
        return ProductStore(ctx).exists(product_id)

    def get_all_products(self, ctx: TransactionContext) -> list[Product]:
        """Every stored record, in key-lexicographic order."""
        return list(ProductStore(ctx).range_scan("", ""))


def _check_new_id(product_id: str) -> None:
    if not product_id:
        raise InvalidProductIdError(product_id, "must not be empty")
    if len(product_id) > MAX_PRODUCT_ID_LENGTH:
        raise InvalidProductIdError(
            product_id, f"longer than {MAX_PRODUCT_ID_LENGTH} characters",
        )
