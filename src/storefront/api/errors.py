"""Map storefront errors to HTTP responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from storefront.errors import ErrorCode, StorefrontError

logger = structlog.get_logger(__name__)

STATUS_BY_CODE = {
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.STOCK: 409,
    ErrorCode.PRICE_MISMATCH: 409,
    ErrorCode.BALANCE: 409,
    ErrorCode.TRANSITION: 409,
    ErrorCode.UPSTREAM_NOTIFY: 502,
}


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    logger.info("request_rejected", path=request.url.path, error=exc.code.value, message=exc.message)
    return JSONResponse(status_code=STATUS_BY_CODE.get(exc.code, 400), content=exc.to_dict())


async def validation_error_handler(request: Request, exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={"error": "validation_error", "message": "Invalid request", "details": exc.messages},
    )


async def not_found_handler(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content={"error": ErrorCode.NOT_FOUND.value, "message": str(exc)})


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(ValidationError, validation_error_handler)
    app.add_exception_handler(ObjectNotFoundError, not_found_handler)
