"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - ProductId and TxId wrap str — the ledger key space is raw strings
    - TxTimestamp is the (seconds, nanos) pair supplied by the ordering service
    - Product status is free-form; ProductStatus only names the labels this code sets

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - NamedTuple for TxTimestamp: immutable, unpacks like the protobuf pair it mirrors
    - str Enum for known statuses: serializes to JSON without custom encoders,
      but never used to validate caller-supplied status labels
"""

from enum import Enum
from typing import NamedTuple, NewType


# ─── Identity Types ──────────────────────────────────────────────

ProductId = NewType("ProductId", str)
TxId = NewType("TxId", str)

# Longest key the world_state table holds
MAX_PRODUCT_ID_LENGTH: int = 255


# ─── Value Types ─────────────────────────────────────────────────

class TxTimestamp(NamedTuple):
    """Consensus time of a transaction, seconds + nanos since the Unix epoch."""
    seconds: int
    nanos: int = 0


NANOS_PER_SECOND: int = 1_000_000_000


# ─── Enums ───────────────────────────────────────────────────────

class ProductStatus(str, Enum):
    """Status labels written by the contract itself. Update accepts any string."""
    MANUFACTURED = "Manufactured"


class Operation(str, Enum):
    """Logical contract operations, named as invokers call them."""
    INIT_LEDGER = "InitLedger"
    CREATE_PRODUCT = "CreateProduct"
    UPDATE_PRODUCT = "UpdateProduct"
    TRANSFER_OWNERSHIP = "TransferOwnership"
    QUERY_PRODUCT = "QueryProduct"
    PRODUCT_EXISTS = "ProductExists"
    GET_ALL_PRODUCTS = "GetAllProducts"
