# storefront/api/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from storefront.domain.schemas import ErrorResponse
from storefront.exceptions import (
    ConflictError,
    NotFoundError,
    StorefrontError,
    ValidationError,
)
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

ERROR_STATUS_CODES = {
    NotFoundError: 404,
    ValidationError: 400,
    ConflictError: 409,
}

# documented on every router; 401/403 come from the identity dependencies
ERROR_RESPONSES = {
    code: {"model": ErrorResponse}
    for code in (400, 401, 403, 404, 409)
}


def status_code_for(exc: StorefrontError) -> int:
    for cls in type(exc).__mro__:
        if cls in ERROR_STATUS_CODES:
            return ERROR_STATUS_CODES[cls]
    return 500


def _failure(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(message=message).model_dump())


def register_exception_handlers(app: FastAPI) -> None:

    @app.exception_handler(StorefrontError)
    async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
        status_code = status_code_for(exc)
        logger.info(f"{request.method} {request.url.path} -> {status_code} {exc!r}")
        return _failure(status_code, exc.message)

    @app.exception_handler(HTTPException)
    async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
        return _failure(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = exc.errors()
        if errors:
            first = errors[0]
            field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
            message = f"{field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
        else:
            message = "Invalid request"
        return _failure(400, message)

    @app.exception_handler(Exception)
    async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.exception(f"Unhandled error on {request.method} {request.url.path}")
        return _failure(500, "Something went wrong, please try again later")
