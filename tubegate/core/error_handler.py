"""Error classification between logged internal detail and public responses"""

import logging
from typing import Dict, Tuple

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError as FastAPIValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .exceptions import GatewayError
from ..models.video_models import ErrorResponse

logger = logging.getLogger(__name__)


class ErrorHandler:
    """
    Maps exceptions to (status, ErrorResponse) pairs.

    GatewayError subclasses carry their own status and public message. Any
    other exception is an internal failure and collapses to a bare 500. The
    exception text and traceback only ever reach the log.
    """

    INTERNAL_ERROR_MESSAGE = "Internal server error"

    def __init__(self):
        self.error_counts: Dict[str, int] = {}

    def classify(self, error: Exception) -> Tuple[int, ErrorResponse]:
        """Return the HTTP status and public body for an exception"""
        if isinstance(error, GatewayError):
            return error.status_code, ErrorResponse(error=error.public_message)
        return 500, ErrorResponse(error=self.INTERNAL_ERROR_MESSAGE)

    def handle_error(self, error: Exception, request: Request = None) -> JSONResponse:
        """Log an exception with full detail and build the public response"""
        error_type = type(error).__name__
        self.error_counts[error_type] = self.error_counts.get(error_type, 0) + 1

        status_code, body = self.classify(error)
        where = f"{request.method} {request.url.path}" if request is not None else "request"

        if status_code >= 500:
            cause = error.__cause__
            logger.error(
                f"{where} failed with {error_type}: {error}"
                + (f" (caused by {type(cause).__name__}: {cause})" if cause else ""),
                exc_info=error
            )
        else:
            logger.info(f"{where} rejected with {status_code}: {body.error}")

        return self.to_response(status_code, body)

    @staticmethod
    def to_response(status_code: int, body: ErrorResponse, headers: Dict[str, str] = None) -> JSONResponse:
        """Serialize an ErrorResponse"""
        return JSONResponse(status_code=status_code, content=body.model_dump(), headers=headers)

    def get_error_stats(self) -> Dict[str, int]:
        """Get error occurrence statistics"""
        return self.error_counts.copy()

    def reset_stats(self):
        """Reset error statistics"""
        self.error_counts.clear()


# Global error handler instance
error_handler = ErrorHandler()


def get_error_handler() -> ErrorHandler:
    """Get the global error handler instance"""
    return error_handler


def register_exception_handlers(app: FastAPI, handler: ErrorHandler = None) -> None:
    """Install the error mapping on a FastAPI application"""
    handler = handler or error_handler

    @app.exception_handler(GatewayError)
    async def gateway_error_handler(request: Request, exc: GatewayError):
        return handler.handle_error(exc, request)

    @app.exception_handler(FastAPIValidationError)
    async def validation_error_handler(request: Request, exc: FastAPIValidationError):
        logger.info(f"{request.method} {request.url.path} rejected: {exc.errors()}")
        return handler.to_response(400, ErrorResponse(error="Invalid request parameters"))

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code == 404:
            return JSONResponse(
                status_code=404,
                content={"error": "Not found", "path": str(request.url.path)}
            )
        return handler.to_response(
            exc.status_code,
            ErrorResponse(error=str(exc.detail)),
            headers=getattr(exc, "headers", None)
        )

    @app.exception_handler(Exception)
    async def internal_error_handler(request: Request, exc: Exception):
        return handler.handle_error(exc, request)
