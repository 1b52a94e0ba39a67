"""Error Hierarchy — typed, categorized exceptions for all ledger failure modes.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - Every error aborts the current invocation; nothing in core retries

Design Decisions:
    - Single hierarchy with SupplyChainError base: gateway handler catches all (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    RESOURCE_NOT_FOUND = "resource_not_found"
    CONFLICT = "conflict"
    STORAGE = "storage"
    SERIALIZATION = "serialization"
    CLOCK = "clock"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    tx_id: str | None = None
    operation: str | None = None
    product_id: str | None = None
    debug_info: dict[str, Any] | None = None


class SupplyChainError(Exception):
    """Base exception for all supply chain ledger errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "tx_id": self.context.tx_id,
                    "operation": self.context.operation,
                    "product_id": self.context.product_id,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class ProductNotFoundError(SupplyChainError):
    """Operation targets an id with no stored record."""
    def __init__(self, product_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.product_id = product_id
        super().__init__(
            f"the product with ID {product_id} does not exist",
            "PRODUCT_NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.product_id = product_id


class ProductAlreadyExistsError(SupplyChainError):
    """Create targets an id that already has a stored record."""
    def __init__(self, product_id: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.product_id = product_id
        super().__init__(
            f"product with ID {product_id} already exists",
            "PRODUCT_ALREADY_EXISTS", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, ctx, 409,
        )
        self.product_id = product_id


class UnknownOperationError(SupplyChainError):
    """Invocation names an operation the contract does not register."""
    def __init__(self, function: str, context: ErrorContext | None = None):
        super().__init__(
            f"Operation '{function}' does not exist",
            "UNKNOWN_OPERATION", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.function = function


class InvalidArgumentsError(SupplyChainError):
    """Invocation passes the wrong number of arguments."""
    def __init__(
        self, function: str, expected: tuple[str, ...], received: int,
        context: ErrorContext | None = None,
    ):
        super().__init__(
            f"{function} expects {len(expected)} argument(s) "
            f"({', '.join(expected) or 'none'}), received {received}",
            "INVALID_ARGUMENTS", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.function = function
        self.expected = expected
        self.received = received


class InvalidProductIdError(SupplyChainError):
    """Create names an id the world state cannot key a record by."""
    def __init__(self, product_id: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.product_id = product_id
        super().__init__(
            f"invalid product ID {product_id!r}: {reason}",
            "INVALID_PRODUCT_ID", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, ctx, 400,
        )
        self.product_id = product_id
        self.reason = reason


class TransactionConflictError(SupplyChainError):
    """A concurrent commit changed state this transaction read; nothing was applied."""
    def __init__(self, key: str, context: ErrorContext | None = None):
        super().__init__(
            f"transaction read stale state at key {key!r}; retry the invocation",
            "TRANSACTION_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )
        self.key = key


# ─── Infrastructure Errors (500-level) ──────────────────────────

class StorageReadError(SupplyChainError):
    """World state read or range scan failed in the backend."""
    def __init__(self, message: str, key: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            f"failed to read from world state: {message}",
            "STORAGE_READ_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.key = key


class StorageWriteError(SupplyChainError):
    """World state write or commit failed in the backend."""
    def __init__(self, message: str, key: str | None = None, context: ErrorContext | None = None):
        super().__init__(
            f"failed to put product into ledger: {message}",
            "STORAGE_WRITE_ERROR", ErrorCategory.STORAGE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.key = key


class ProductEncodeError(SupplyChainError):
    """Record could not be serialized to its canonical encoding."""
    def __init__(self, product_id: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.product_id = product_id
        super().__init__(
            f"failed to marshal product {product_id}: {reason}",
            "ENCODE_ERROR", ErrorCategory.SERIALIZATION,
            ErrorSeverity.CRITICAL, ctx, 500,
        )


class ProductDecodeError(SupplyChainError):
    """Stored bytes do not decode into the product schema."""
    def __init__(self, key: str, reason: str, context: ErrorContext | None = None):
        ctx = context or ErrorContext()
        ctx.product_id = key
        super().__init__(
            f"failed to unmarshal product JSON at key {key}: {reason}",
            "DECODE_ERROR", ErrorCategory.SERIALIZATION,
            ErrorSeverity.CRITICAL, ctx, 500,
        )
        self.key = key


class TimestampUnavailableError(SupplyChainError):
    """No valid consensus time for the in-flight transaction."""
    def __init__(self, reason: str, context: ErrorContext | None = None):
        super().__init__(
            f"failed to get transaction timestamp: {reason}",
            "TIMESTAMP_UNAVAILABLE", ErrorCategory.CLOCK,
            ErrorSeverity.CRITICAL, context, 503,
        )
