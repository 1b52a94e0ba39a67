"""Product Store — get/put/exists/range-scan of Product records over the world state.

Invariants:
    - Key = product id (raw string); value = canonical JSON from encode_product
    - exists() is true iff a non-empty value is stored under the key
    - put() overwrites unconditionally — existence rules live in the contract
    - range_scan() closes the backend cursor on every exit path: exhaustion,
      early generator close, decode error, or read error mid-scan
    - Backend failures propagate as StorageReadError/StorageWriteError untouched

Design Decisions:
    - Built per invocation around the TransactionContext: holds no state of its own
    - Generator + contextlib.closing over materialized list: scan stays lazy,
      cleanup guaranteed by the with-block even when the caller stops early
"""

from contextlib import closing
from typing import Iterator

from supplychain.core.errors import ProductNotFoundError
from supplychain.core.product import Product, decode_product, encode_product
from supplychain.core.repository_protocols import TransactionContext


class ProductStore:
    """Record store accessor bound to one transaction."""

    def __init__(self, ctx: TransactionContext):
        self._ctx = ctx

    def exists(self, product_id: str) -> bool:
        return bool(self._ctx.get_state(product_id))

    def get(self, product_id: str) -> Product:
        raw = self._ctx.get_state(product_id)
        if not raw:
            raise ProductNotFoundError(product_id)
        return decode_product(product_id, raw)

    def put(self, product: Product) -> None:
        self._ctx.put_state(product.id, encode_product(product))

    def range_scan(self, start: str = "", end: str = "") -> Iterator[Product]:
        """Yield every product with start <= id < end, in key order.

        Empty bounds are open: range_scan() walks the whole key space.
        """
        with closing(self._ctx.get_state_by_range(start, end)) as cursor:
            for key, raw in cursor:
                yield decode_product(key, raw)
