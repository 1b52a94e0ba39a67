"""Infrastructure Layer — ledger backends, logging, and other IO adapters.

Invariants:
    - Backends implement the Protocols in core/repository_protocols.py
    - Backend exceptions are translated to StorageReadError/StorageWriteError here
"""
