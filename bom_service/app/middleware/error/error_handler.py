import traceback
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from bom_service.app.core.exceptions import BomServiceError
from bom_service.app.utils.logging import setup_bom_logging

logger = setup_bom_logging("bom_service_error_handler")


def _validation_details(exc: Any) -> list[dict[str, str]]:
    return [
        {
            "field": ".".join(str(loc) for loc in error["loc"]),
            "message": error["msg"],
            "type": error["type"],
        }
        for error in exc.errors()
    ]


class BomServiceErrorHandler:
    """Class to setup error handling for the BOM Service."""

    @staticmethod
    def setup_error_handlers(app: FastAPI) -> None:
        """Setup error handlers for the FastAPI application."""

        @app.exception_handler(BomServiceError)
        async def bom_service_error_handler(  # type: ignore
            request: Request, exc: BomServiceError
        ) -> JSONResponse:
            """Render domain errors with their own status and type."""

            if exc.status_code >= 500:
                logger.error(
                    "Service error occurred",
                    extra={
                        "correlation_id": getattr(
                            request.state, "correlation_id", "unknown"
                        ),
                        "path": request.url.path,
                        "method": request.method,
                        "exception_type": type(exc).__name__,
                        "event_type": "service_error",
                    },
                    exc_info=exc,
                )
                message = "An internal server error occurred"
            else:
                message = exc.message

            return BomServiceErrorHandler._create_error_response(
                request=request,
                status_code=exc.status_code,
                error_type=exc.error_type,
                message=message,
                details=exc.details,
            )

        @app.exception_handler(StarletteHTTPException)
        async def http_exception_handler(  # type: ignore
            request: Request, exc: StarletteHTTPException
        ) -> JSONResponse:
            """Handle HTTP exceptions."""

            return BomServiceErrorHandler._create_error_response(
                request=request,
                status_code=exc.status_code,
                error_type="http_error",
                message=str(exc.detail),
            )

        @app.exception_handler(RequestValidationError)
        async def validation_exception_handler(  # type: ignore
            request: Request, exc: RequestValidationError
        ) -> JSONResponse:
            """Handle request validation errors."""

            return BomServiceErrorHandler._create_error_response(
                request=request,
                status_code=422,
                error_type="validation_error",
                message="Request validation failed",
                details={"validation_errors": _validation_details(exc)},
            )

        @app.exception_handler(ValidationError)
        async def pydantic_validation_exception_handler(  # type: ignore
            request: Request, exc: ValidationError
        ) -> JSONResponse:
            """Handle Pydantic validation errors raised inside services."""

            return BomServiceErrorHandler._create_error_response(
                request=request,
                status_code=400,
                error_type="data_validation_error",
                message="Data validation failed",
                details={"validation_errors": _validation_details(exc)},
            )

        @app.exception_handler(Exception)
        async def general_exception_handler(  # type: ignore
            request: Request, exc: Exception
        ) -> JSONResponse:
            """Handle all uncaught exceptions."""

            logger.error(
                "Unhandled exception occurred",
                extra={
                    "correlation_id": getattr(
                        request.state, "correlation_id", "unknown"
                    ),
                    "user_id": getattr(request.state, "user_id", None),
                    "path": request.url.path,
                    "method": request.method,
                    "exception_type": type(exc).__name__,
                    "exception_message": str(exc),
                    "traceback": traceback.format_exc(),
                    "service": "bom_service",
                    "event_type": "unhandled_exception",
                },
                exc_info=True,
            )

            return BomServiceErrorHandler._create_error_response(
                request=request,
                status_code=500,
                error_type="internal_server_error",
                message="An internal server error occurred",
            )

    @staticmethod
    def _create_error_response(
        request: Request,
        status_code: int,
        error_type: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> JSONResponse:
        """Create a standardized error response."""

        correlation_id = getattr(request.state, "correlation_id", "unknown")
        user_id = getattr(request.state, "user_id", None) or "anonymous"

        error_response: Dict[str, Any] = {
            "error": {
                "type": error_type,
                "message": message,
                "correlation_id": correlation_id,
                "user_id": user_id,
                "timestamp": datetime.now(timezone.utc).isoformat(),
                "path": request.url.path,
                "method": request.method,
            }
        }

        if details:
            error_response["error"]["details"] = details

        if status_code < 500:
            logger.warning(
                f"Client error: {error_type}",
                extra={
                    "correlation_id": correlation_id,
                    "user_id": user_id,
                    "status_code": status_code,
                    "error_type": error_type,
                    "path": request.url.path,
                    "method": request.method,
                    "service": "bom_service",
                    "event_type": "client_error",
                },
            )

        return JSONResponse(status_code=status_code, content=error_response)


def setup_bom_error_handling(app: FastAPI) -> None:
    """Setup error handling for the BOM Service."""

    error_handler = BomServiceErrorHandler()
    error_handler.setup_error_handlers(app)

    logger.info(
        "BOM Service error handling configured",
        extra={"service": "bom_service", "event_type": "error_handler_setup"},
    )
