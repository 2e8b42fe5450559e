"""Exception handlers turning domain and service errors into JSON envelopes.

Every failure leaves the service as ``{"success": false, "error": <message>}``
with an optional ``details`` object.
"""

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import InvalidOperationError, ObjectNotFoundError, ValidationError
from shared.exceptions import InsufficientStock, PaymentError
from starlette.exceptions import HTTPException as StarletteHTTPException


def _flatten(messages) -> str:
    if isinstance(messages, dict):
        parts = []
        for value in messages.values():
            if isinstance(value, list | tuple):
                parts.extend(str(v) for v in value)
            else:
                parts.append(str(value))
        return "; ".join(parts)
    return str(messages)


def error_response(status_code: int, error: str, details: dict | None = None) -> JSONResponse:
    content = {"success": False, "error": error}
    if details:
        content["details"] = details
    return JSONResponse(status_code=status_code, content=jsonable_encoder(content))


async def insufficient_stock_handler(request: Request, exc: InsufficientStock) -> JSONResponse:
    return error_response(
        400,
        exc.message,
        {
            "product_id": exc.product_id,
            "variant_id": exc.variant_id,
            "available": exc.available,
            "requested": exc.requested,
        },
    )


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    messages = getattr(exc, "messages", None) or str(exc)
    return error_response(400, _flatten(messages), dict(messages) if isinstance(messages, dict) else None)


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    messages = getattr(exc, "messages", None) or str(exc)
    return error_response(404, _flatten(messages))


async def payment_error_handler(request: Request, exc: PaymentError) -> JSONResponse:
    return error_response(400, exc.message, exc.to_dict())


async def invalid_operation_handler(request: Request, exc: InvalidOperationError) -> JSONResponse:
    return error_response(409, str(exc))


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return error_response(400, "Invalid request payload", {"errors": exc.errors()})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(InsufficientStock, insufficient_stock_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
    app.add_exception_handler(PaymentError, payment_error_handler)
    app.add_exception_handler(InvalidOperationError, invalid_operation_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
