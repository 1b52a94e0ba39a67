"""Seed Products — the fixed record set written by InitLedger.

Invariants:
    - Seeds carry no timestamps: bootstrap stamps created_at/updated_at per call
    - Ids are unique and sorted, so GetAllProducts after bootstrap lists them in order
"""

from supplychain.core.domain_types import ProductStatus

SEED_PRODUCTS: tuple[dict[str, str], ...] = (
    {
        "id": "p1",
        "name": "Laptop",
        "status": ProductStatus.MANUFACTURED.value,
        "owner": "CompanyA",
        "description": "High-end gaming laptop",
        "category": "Electronics",
    },
    {
        "id": "p2",
        "name": "Smartphone",
        "status": ProductStatus.MANUFACTURED.value,
        "owner": "CompanyB",
        "description": "Latest model smartphone",
        "category": "Electronics",
    },
)

SEED_PRODUCT_IDS: tuple[str, ...] = tuple(seed["id"] for seed in SEED_PRODUCTS)
