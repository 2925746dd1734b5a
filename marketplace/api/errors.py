# marketplace/api/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
import requests

from marketplace.domain.errors import (
    CartBusy,
    EmptyCart,
    InvalidInput,
    InvalidTransition,
    MarketplaceError,
    NotFound,
    ProductUnavailable,
    Unauthenticated,
    Unauthorized,
)
from marketplace.utils.logging import get_logger

logger = get_logger(__name__)

STATUS_CODES = {
    Unauthenticated: 401,
    Unauthorized: 403,
    NotFound: 404,
    InvalidInput: 422,
    EmptyCart: 400,
    ProductUnavailable: 409,
    InvalidTransition: 409,
    CartBusy: 503,
}


def status_code_for(exc: MarketplaceError) -> int:
    for cls in type(exc).__mro__:
        if cls in STATUS_CODES:
            return STATUS_CODES[cls]
    return 500


def error_body(exc: MarketplaceError) -> dict:
    content = {"detail": exc.message, "code": exc.code}
    content.update(exc.extra())
    return content


async def marketplace_error_handler(request: Request, exc: MarketplaceError):
    return JSONResponse(status_code=status_code_for(exc), content=error_body(exc))


async def validation_error_handler(request: Request, exc: RequestValidationError):
    # body.quantity -> quantity
    errors = [
        {
            "field": ".".join(str(p) for p in err["loc"] if p != "body"),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return await marketplace_error_handler(request, InvalidInput(errors))


async def catalog_unavailable_handler(request: Request, exc: requests.RequestException):
    logger.error(f"Product service unavailable: {exc}")
    return JSONResponse(
        status_code=502,
        content={"detail": "Product catalog unavailable", "code": "catalog_unavailable"},
    )


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(MarketplaceError, marketplace_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(requests.RequestException, catalog_unavailable_handler)
