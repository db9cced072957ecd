"""Custom exceptions for the video gateway.

Every exception carries the HTTP status it maps to and a message that is
safe to return to callers. Anything more specific belongs in the logs.
"""


class GatewayError(Exception):
    """Base exception for the video gateway"""
    status_code = 500
    public_message = "Internal server error"

    def __init__(self, message: str = None):
        super().__init__(message or self.public_message)
        if message is not None and self.status_code < 500:
            # Client errors are produced by us and already safe to echo
            self.public_message = message


class RequestValidationError(GatewayError):
    """Exception raised for missing or invalid query parameters"""
    status_code = 400
    public_message = "Invalid request"


class UnauthorizedError(GatewayError):
    """Exception raised when the API key is missing or wrong"""
    status_code = 401
    public_message = "Unauthorized: Invalid or missing API key"


class FormatNotFoundError(GatewayError):
    """Exception raised when no format matches the requested media type"""
    status_code = 404
    public_message = "Suitable format not found"


class RateLimitExceededError(GatewayError):
    """Exception raised when a client exhausts its request window"""
    status_code = 429
    public_message = "Too many requests, please try again later."


class ConfigurationError(GatewayError):
    """Exception raised for configuration errors"""
    pass


class UpstreamError(GatewayError):
    """Exception raised for failures inside an upstream provider"""
    pass


class SearchProviderError(UpstreamError):
    """Exception raised when the search provider fails"""
    public_message = "Failed to fetch search results"


class FormatProviderError(UpstreamError):
    """Exception raised when the format provider fails"""
    public_message = "Failed to fetch download info"
