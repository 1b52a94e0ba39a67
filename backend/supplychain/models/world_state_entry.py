"""WorldStateEntry ORM — one committed key/value pair of the ledger world state.

Invariants:
    - key is the primary key (product id, raw string)
    - value holds the canonical record bytes; the table knows nothing of products
    - Rows are inserted or overwritten, never deleted

Design Decisions:
    - LargeBinary over JSON column: the store owns the exact byte representation,
      no dialect re-serializes it
"""

from datetime import datetime, timezone

from sqlalchemy import String, LargeBinary, DateTime
from sqlalchemy.orm import Mapped, mapped_column

from supplychain.core.domain_types import MAX_PRODUCT_ID_LENGTH
from supplychain.db.base import Base


class WorldStateEntry(Base):
    """Committed world state entry."""
    __tablename__ = "world_state"

    key: Mapped[str] = mapped_column(String(MAX_PRODUCT_ID_LENGTH), primary_key=True)
    value: Mapped[bytes] = mapped_column(LargeBinary, nullable=False)
    last_tx_id: Mapped[str | None] = mapped_column(String(64), nullable=True)
    committed_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
    )
