"""Global exception handlers.

Three layers: domain errors (RateMyStoreError), request validation
(pydantic), and a catch-all that never leaks internal details. Validation
failures always answer 400.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from ratemystore.core.errors import ErrorCategory, RateMyStoreError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    _register_domain_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_domain_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RateMyStoreError)
    async def domain_error_handler(request: Request, exc: RateMyStoreError):
        logger.warning(
            f"{exc.code}: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())


def _register_validation_error_handler(app: FastAPI) -> None:

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
            extra={"error_code": "VALIDATION_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
            extra={"error_code": "INTERNAL_ERROR", "path": request.url.path},
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "statusCode": 500,
                "success": False,
                "message": "An unexpected error occurred",
                "error": {
                    "code": "INTERNAL_ERROR",
                    "category": ErrorCategory.INTERNAL.value,
                },
            },
        )


def build_validation_error_response(exc: RequestValidationError) -> dict:
    return {
        "statusCode": 400,
        "success": False,
        "message": "Invalid request data",
        "error": {
            "code": "VALIDATION_ERROR",
            "category": ErrorCategory.VALIDATION.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
