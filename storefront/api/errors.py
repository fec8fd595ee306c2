# storefront/api/errors.py
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from storefront.domain.exceptions import StorefrontError
from storefront.domain.schemas import ErrorOut
from storefront.utils.logging import get_logger

logger = get_logger(__name__)

UNEXPECTED_MESSAGE = "An unexpected error occurred."

#dla dokumentacji OpenAPI
ERROR_RESPONSES = {
    400: {"model": ErrorOut},
    404: {"model": ErrorOut},
    409: {"model": ErrorOut},
    500: {"model": ErrorOut},
}


def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "message": message},
    )


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    logger.info(f"{request.method} {request.url.path} -> {exc.status_code} {exc.code}")
    return error_response(exc.status_code, exc.message)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    #bledy pydantic tez jako 400, z pierwszym komunikatem
    errors = exc.errors()
    if errors:
        first = errors[0]
        field = ".".join(str(p) for p in first.get("loc", ()) if p != "body")
        message = f"Invalid field {field}: {first.get('msg')}" if field else first.get("msg", "Invalid request")
    else:
        message = "Invalid request"
    return error_response(400, message)


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}")
    return error_response(500, UNEXPECTED_MESSAGE)


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)
