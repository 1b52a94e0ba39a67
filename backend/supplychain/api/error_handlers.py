"""Error Handlers — map ledger, request and unexpected failures onto the REST envelope.

Invariants:
    - SupplyChainError → its own to_response(), status from the error, tx_id and
      operation from the invocation that raised it
    - RequestValidationError → 400 VALIDATION_ERROR with field-level details and
      the ledger operation the rejected request was aimed at
    - Exception (catch-all) → 500 INTERNAL_ERROR, never leaks internal details
    - Every envelope carries the same error keys: code, message, category, severity
    - CRITICAL errors log at ERROR, everything else at WARNING

Design Decisions:
    - Operation name derived from the matched route: requests rejected before
      run_invocation still log which ledger operation they targeted
    - Extracted from main.py (ADR: ExMA import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from supplychain.core.domain_types import Operation
from supplychain.core.errors import ErrorCategory, ErrorSeverity, SupplyChainError

logger = logging.getLogger(__name__)

# Route endpoint name -> ledger operation it runs
_ROUTE_OPERATIONS: dict[str, str] = {
    "create_product": Operation.CREATE_PRODUCT.value,
    "list_products": Operation.GET_ALL_PRODUCTS.value,
    "get_product": Operation.QUERY_PRODUCT.value,
    "update_product": Operation.UPDATE_PRODUCT.value,
    "transfer_ownership": Operation.TRANSFER_OWNERSHIP.value,
    "init_ledger": Operation.INIT_LEDGER.value,
}


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_ledger_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_ledger_error_handler(app: FastAPI) -> None:

    @app.exception_handler(SupplyChainError)
    async def ledger_error_handler(request: Request, exc: SupplyChainError):
        operation = exc.context.operation or _route_operation(request)
        exc.context.operation = operation
        logger.log(
            _log_level(exc.severity),
            f"{operation or request.url.path} failed: {exc.message}",
            extra={
                "error_code": exc.code,
                "path": request.url.path,
                "tx_id": exc.context.tx_id,
                "operation": operation,
                "product_id": exc.context.product_id,
            },
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Malformed request body or parameters; nothing reached the ledger."""
        operation = _route_operation(request)
        logger.warning(
            f"Rejected {operation or 'request'} on {request.url.path}: {exc.errors()}",
            extra={
                "error_code": "VALIDATION_ERROR",
                "path": request.url.path,
                "operation": operation,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_envelope(
                "VALIDATION_ERROR", "Invalid request data",
                ErrorCategory.VALIDATION.value, ErrorSeverity.ERROR,
                request, operation,
                details=[
                    {
                        "field": ".".join(str(loc) for loc in e["loc"]),
                        "message": e["msg"],
                        "type": e["type"],
                    }
                    for e in exc.errors()
                ],
            ),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        operation = _route_operation(request)
        logger.error(
            f"Unhandled {type(exc).__name__} in {operation or request.url.path}: {exc}",
            exc_info=True,
            extra={
                "error_code": "INTERNAL_ERROR",
                "path": request.url.path,
                "operation": operation,
            },
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content=_envelope(
                "INTERNAL_ERROR", "An unexpected error occurred",
                "internal", ErrorSeverity.CRITICAL, request, operation,
            ),
        )


def _route_operation(request: Request) -> str | None:
    route = request.scope.get("route")
    return _ROUTE_OPERATIONS.get(getattr(route, "name", None))


def _log_level(severity: ErrorSeverity) -> int:
    return logging.ERROR if severity is ErrorSeverity.CRITICAL else logging.WARNING


def _envelope(
    code: str, message: str, category: str, severity: ErrorSeverity,
    request: Request, operation: str | None, details: list | None = None,
) -> dict:
    error = {
        "code": code,
        "message": message,
        "category": category,
        "severity": severity.value,
        "context": {"operation": operation, "path": request.url.path},
    }
    if details is not None:
        error["details"] = details
    return {"error": error}
