"""Ingress middleware: security headers, rate limiting, API key, request logging"""

import hmac
import time
import logging
from typing import Callable, Iterable, Optional
from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

from ..core.error_handler import ErrorHandler, get_error_handler
from ..core.exceptions import RateLimitExceededError, UnauthorizedError
from ..core.rate_limiter import FixedWindowRateLimiter
from ..models.video_models import ErrorResponse

logger = logging.getLogger(__name__)

API_KEY_HEADER = "x-api-key"
API_KEY_QUERY_PARAM = "api_key"

# Same defaults helmet applies
SECURITY_HEADERS = {
    "Content-Security-Policy": (
        "default-src 'self';base-uri 'self';font-src 'self' https: data:;"
        "form-action 'self';frame-ancestors 'self';img-src 'self' data:;"
        "object-src 'none';script-src 'self';script-src-attr 'none';"
        "style-src 'self' https: 'unsafe-inline';upgrade-insecure-requests"
    ),
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
    "Origin-Agent-Cluster": "?1",
    "Referrer-Policy": "no-referrer",
    "Strict-Transport-Security": "max-age=31536000; includeSubDomains",
    "X-Content-Type-Options": "nosniff",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Frame-Options": "SAMEORIGIN",
    "X-Permitted-Cross-Domain-Policies": "none",
    "X-XSS-Protection": "0",
}


def client_address(request: Request) -> str:
    """Address the rate limiter keys on"""
    return request.client.host if request.client else "unknown"


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware for request logging and timing"""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start_time = time.time()

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            f"{request.method} {request.url.path} from {client_address(request)} "
            f"- Status: {response.status_code} "
            f"- Time: {process_time:.3f}s"
        )
        response.headers["X-Process-Time"] = f"{process_time:.6f}"

        return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """
    Add security headers to every response, rejections included.

    Exceptions that escaped the route handlers are turned into the generic
    500 response here, so even those carry the headers.
    """

    def __init__(self, app, error_handler: Optional[ErrorHandler] = None):
        super().__init__(app)
        self.error_handler = error_handler or get_error_handler()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            response = await call_next(request)
        except Exception as e:
            response = self.error_handler.handle_error(e, request)

        for name, value in SECURITY_HEADERS.items():
            response.headers[name] = value

        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Refuse requests once a client exhausts its window"""

    def __init__(
        self,
        app,
        limiter: FixedWindowRateLimiter,
        error_handler: Optional[ErrorHandler] = None
    ):
        super().__init__(app)
        self.limiter = limiter
        self.error_handler = error_handler or get_error_handler()

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        client_ip = client_address(request)
        decision = self.limiter.hit(client_ip)

        headers = {
            "X-RateLimit-Limit": str(decision.limit),
            "X-RateLimit-Remaining": str(decision.remaining),
        }

        if not decision.allowed:
            logger.warning(f"Rate limit exceeded for {client_ip}")
            headers["Retry-After"] = str(decision.retry_after)
            return self.error_handler.to_response(
                RateLimitExceededError.status_code,
                ErrorResponse(error=RateLimitExceededError.public_message),
                headers=headers
            )

        response = await call_next(request)
        response.headers.update(headers)
        return response


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """
    Require the shared API key on every request.

    The key is read from the `x-api-key` header, falling back to the
    `api_key` query parameter when the header is missing or empty.
    """

    def __init__(
        self,
        app,
        api_key: str,
        exempt_paths: Iterable[str] = (),
        error_handler: Optional[ErrorHandler] = None
    ):
        super().__init__(app)
        self._expected = api_key.encode("utf-8")
        self.exempt_paths = frozenset(exempt_paths)
        self.error_handler = error_handler or get_error_handler()

    def is_authorized(self, request: Request) -> bool:
        """Check the presented key against the configured secret"""
        presented = (
            request.headers.get(API_KEY_HEADER) or
            request.query_params.get(API_KEY_QUERY_PARAM)
        )
        if not presented:
            return False
        return hmac.compare_digest(presented.encode("utf-8"), self._expected)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path not in self.exempt_paths and not self.is_authorized(request):
            logger.info(
                f"Rejected unauthenticated {request.method} {request.url.path} "
                f"from {client_address(request)}"
            )
            return self.error_handler.to_response(
                UnauthorizedError.status_code,
                ErrorResponse(error=UnauthorizedError.public_message)
            )

        return await call_next(request)
