"""Custom exceptions for object-store clients."""


class ClientError(Exception):
    """Base exception for all client errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class ConnectionError(ClientError):
    """Raised when the object store cannot be reached."""

    pass


class APIError(ClientError):
    """Raised when the object store rejects a request."""

    def __init__(self, message: str, status_code: int | None = None, code: str | None = None, *args, **kwargs):
        self.status_code = status_code
        self.code = code
        super().__init__(message, *args, **kwargs)


class RateLimitError(APIError):
    """Raised when the object store throttles requests."""

    def __init__(self, message: str = "Rate limit exceeded", code: str | None = "SlowDown"):
        super().__init__(message, status_code=503, code=code)


class NotFoundError(APIError):
    """Raised when an object or bucket does not exist."""

    def __init__(self, message: str = "Resource not found", code: str | None = "NoSuchKey"):
        super().__init__(message, status_code=404, code=code)
