"""Services Layer — contract operations and invocation dispatch.

Invariants:
    - Services receive a TransactionContext per call and keep no state between calls
    - Services raise SupplyChainError subclasses; the gateway maps them to HTTP
"""
