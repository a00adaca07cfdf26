"""Domain error taxonomy and its HTTP rendering."""
import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class BackofficeError(Exception):
    """Base class for errors that map onto a client-visible HTTP response."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    code = "InternalError"

    def __init__(self, message: str, code: Optional[str] = None, **extra: Any):
        super().__init__(message)
        self.message = message
        if code is not None:
            self.code = code
        self.extra = extra

    def to_dict(self) -> Dict[str, Any]:
        return {"detail": self.message, "code": self.code, **self.extra}


class ValidationError(BackofficeError):
    """Malformed or out-of-range input. Raised before the store is touched."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "ValidationError"


class NegativeStockError(ValidationError):
    code = "NegativeStock"


class AuthorizationError(BackofficeError):
    """Unauthenticated, or authenticated with an insufficient role."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "Unauthorized"


class NotFoundError(BackofficeError):
    status_code = status.HTTP_404_NOT_FOUND
    code = "NotFound"


class ConflictError(BackofficeError):
    """Business-rule violation: stock, uniqueness or reference protection."""

    status_code = status.HTTP_409_CONFLICT
    code = "Conflict"


class ProductNotFound(ConflictError):
    """A product referenced by an order line does not exist."""

    code = "ProductNotFound"

    def __init__(self, product_id: int):
        super().__init__(f"Product not found: ID {product_id}", product_id=product_id)
        self.product_id = product_id


class InsufficientStock(ConflictError):
    code = "InsufficientStock"

    def __init__(self, product_id: int, available: int, name: Optional[str] = None):
        label = name or f"ID {product_id}"
        super().__init__(
            f"Insufficient stock: {label} (available: {available})",
            product_id=product_id,
            available=available,
        )
        self.product_id = product_id
        self.available = available


class InternalError(BackofficeError):
    """Store unavailable or unexpected failure. Never carries internal detail."""

    def __init__(self, message: str = "Internal error"):
        super().__init__(message)


def _first_validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return "Invalid request"
    first = errors[0]
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid value")
    return f"{location}: {message}" if location else message


def register_exception_handlers(app: FastAPI) -> None:
    """Attach handlers that render the error taxonomy as JSON responses."""

    @app.exception_handler(BackofficeError)
    async def handle_backoffice_error(request: Request, exc: BackofficeError):
        if exc.status_code >= 500:
            logger.error("[%s %s] %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def handle_request_validation(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": _first_validation_message(exc), "code": ValidationError.code},
        )

    @app.exception_handler(Exception)
    async def handle_unexpected(request: Request, exc: Exception):
        logger.exception("[%s %s] Unhandled error", request.method, request.url.path)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": "Internal error", "code": InternalError.code},
        )
