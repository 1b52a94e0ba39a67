"""Product Record — the single ledger entity and its canonical encoding.

Invariants:
    - Encoded value is compact UTF-8 JSON with exactly: id, name, status, owner,
      created_at, updated_at, category, description (in that order)
    - All fields are strings; decode rejects missing fields and non-string values
    - Records are frozen: mutations produce a new copy via model_copy(update=...)

Design Decisions:
    - Pydantic model over hand-written dict mapping: field order drives the
      JSON layout, StrictStr replaces manual type checks
    - Unknown keys ignored on decode: tolerant of fields added by later writers
"""

from pydantic import BaseModel, ConfigDict, StrictStr, ValidationError

from supplychain.core.errors import ProductDecodeError, ProductEncodeError


class Product(BaseModel):
    """A physical good tracked on the ledger."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    id: StrictStr
    name: StrictStr
    status: StrictStr
    owner: StrictStr
    created_at: StrictStr
    updated_at: StrictStr
    category: StrictStr
    description: StrictStr


def encode_product(product: Product) -> bytes:
    """Serialize to the canonical world state value."""
    try:
        return product.model_dump_json().encode("utf-8")
    except (ValueError, UnicodeEncodeError) as e:
        raise ProductEncodeError(product.id, str(e)) from e


def decode_product(key: str, raw: bytes) -> Product:
    """Parse a world state value back into a Product."""
    try:
        return Product.model_validate_json(raw)
    except ValidationError as e:
        reason = "; ".join(
            f"{'.'.join(str(loc) for loc in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        )
        raise ProductDecodeError(key, reason) from e
