"""Core Layer — product lifecycle rules, no IO of its own, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Ledger and clock reached only through the Protocols in repository_protocols.py

Design Decisions:
    - Functional core separated from imperative shell (ADR: ExMA impureim sandwich)
"""
