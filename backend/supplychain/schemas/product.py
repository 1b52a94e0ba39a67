"""Product Schemas — Pydantic request/response models for the HTTP gateway.

Invariants:
    - ProductCreate.id is passed through verbatim: the contract validates ids, so
      REST and /invoke store the same key for the same input
    - Every other field is a free-form string, empty allowed (the contract accepts any string)
    - InvokeRequest.args are strings, matching the ledger's positional string arguments

Design Decisions:
    - Responses reuse core Product: the persisted field names are the wire names
"""

from typing import Any

from pydantic import BaseModel, Field


class ProductCreate(BaseModel):
    """CreateProduct arguments."""
    id: str
    name: str
    owner: str
    description: str = ""
    category: str = ""


class ProductUpdate(BaseModel):
    """UpdateProduct arguments. Every field is written, none are optional."""
    status: str
    owner: str
    description: str
    category: str


class OwnershipTransfer(BaseModel):
    """TransferOwnership arguments."""
    new_owner: str


class InvokeRequest(BaseModel):
    """Raw contract invocation by operation name."""
    function: str = Field(min_length=1)
    args: list[str] = Field(default_factory=list)


class InvokeResponse(BaseModel):
    """Result of a raw invocation plus the transaction that produced it."""
    tx_id: str
    function: str
    result: Any = None


class LedgerInitResponse(BaseModel):
    tx_id: str
    seeded: list[str]
