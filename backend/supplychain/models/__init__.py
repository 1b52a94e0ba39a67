"""ORM Models — SQLAlchemy declarative models backing the world state.

Invariants:
    - All models inherit from Base (db/base.py)
    - The world state is a flat key/value table; products live in its value bytes

Design Decisions:
    - All models imported here so Base.metadata is complete before create_all
      or Alembic autogenerate runs (ADR: standard SQLAlchemy pattern)
"""

from supplychain.models.world_state_entry import WorldStateEntry  # noqa: F401
