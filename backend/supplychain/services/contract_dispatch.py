"""Contract Dispatch — explicit routing from operation name to contract method.

Invariants:
    - Every name->handler mapping is visible — no getattr magic, no auto-discovery
    - Unknown names raise UnknownOperationError; wrong arity raises InvalidArgumentsError
    - Arguments are positional strings, in the order listed in each entry
    - Results are JSON-ready: None, bool, product dict, or list of product dicts
    - No delete operation is registered

Design Decisions:
    - Explicit dict over getattr: every mapping visible in one place
      (ADR: ExMA no convention-over-config)
    - Parameter names stored beside each handler: arity check and error
      messages without inspect.signature
"""

import logging
from typing import Any, Callable

from supplychain.core.domain_types import Operation
from supplychain.core.errors import (
    ErrorContext, InvalidArgumentsError, SupplyChainError, UnknownOperationError,
)
from supplychain.core.product import Product
from supplychain.core.repository_protocols import TransactionContext
from supplychain.services.product_contract import ProductContract

logger = logging.getLogger(__name__)


class ContractDispatch:
    """Routes operation name -> contract method. Explicit registration."""

    def __init__(self, contract: ProductContract | None = None):
        contract = contract or ProductContract()

        # ADR: every mapping explicit — adding an operation requires editing this dict
        self._handlers: dict[str, tuple[Callable[..., Any], tuple[str, ...]]] = {
            Operation.INIT_LEDGER.value: (contract.bootstrap, ()),
            Operation.CREATE_PRODUCT.value: (
                contract.create_product,
                ("id", "name", "owner", "description", "category"),
            ),
            Operation.UPDATE_PRODUCT.value: (
                contract.update_product,
                ("id", "newStatus", "newOwner", "newDescription", "newCategory"),
            ),
            Operation.TRANSFER_OWNERSHIP.value: (
                contract.transfer_ownership, ("id", "newOwner"),
            ),
            Operation.QUERY_PRODUCT.value: (contract.query_product, ("id",)),
            Operation.PRODUCT_EXISTS.value: (contract.product_exists, ("id",)),
            Operation.GET_ALL_PRODUCTS.value: (contract.get_all_products, ()),
        }

    def operations(self) -> list[str]:
        return list(self._handlers)

    def invoke(
        self, ctx: TransactionContext, function: str, args: list[str],
    ) -> Any:
        """Run one named operation inside the caller's transaction."""
        entry = self._handlers.get(function)
        if entry is None:
            raise UnknownOperationError(
                function, ErrorContext(tx_id=ctx.tx_id, operation=function),
            )
        handler, params = entry
        if len(args) != len(params):
            raise InvalidArgumentsError(
                function, params, len(args),
                ErrorContext(tx_id=ctx.tx_id, operation=function),
            )

        try:
            result = handler(ctx, *args)
        except SupplyChainError as e:
            e.context.tx_id = e.context.tx_id or ctx.tx_id
            e.context.operation = e.context.operation or function
            logger.warning(
                f"{function} failed: {e.message}",
                extra={"tx_id": ctx.tx_id, "operation": function, "error_code": e.code},
            )
            raise
        return _to_payload(result)


def _to_payload(result: Any) -> Any:
    """Convert contract return values into JSON-ready structures."""
    if isinstance(result, Product):
        return result.model_dump()
    if isinstance(result, list):
        return [_to_payload(item) for item in result]
    return result
