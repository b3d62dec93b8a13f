"""Tests for client exception classes."""


from crawl_distiller.clients import (
    APIError,
    ClientError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
)


class TestClientError:
    """Tests for the base ClientError exception."""

    def test_instantiation_with_message(self):
        """ClientError stores the error message."""
        error = ClientError("Something went wrong")

        assert error.message == "Something went wrong"
        assert str(error) == "Something went wrong"

    def test_inheritance(self):
        """ClientError is an Exception."""
        assert isinstance(ClientError("test"), Exception)


class TestConnectionError:
    """Tests for ConnectionError exception."""

    def test_inheritance(self):
        """ConnectionError inherits from ClientError."""
        error = ConnectionError("Endpoint unreachable")

        assert isinstance(error, ClientError)
        assert error.message == "Endpoint unreachable"


class TestAPIError:
    """Tests for APIError exception."""

    def test_stores_status_and_code(self):
        """APIError stores message, status code and error code."""
        error = APIError("Access denied", status_code=403, code="AccessDenied")

        assert error.message == "Access denied"
        assert error.status_code == 403
        assert error.code == "AccessDenied"
        assert isinstance(error, ClientError)


class TestRateLimitError:
    """Tests for RateLimitError exception."""

    def test_defaults(self):
        """RateLimitError defaults to a SlowDown throttle."""
        error = RateLimitError()

        assert error.message == "Rate limit exceeded"
        assert error.status_code == 503
        assert error.code == "SlowDown"
        assert isinstance(error, APIError)


class TestNotFoundError:
    """Tests for NotFoundError exception."""

    def test_defaults(self):
        """NotFoundError defaults to a missing key."""
        error = NotFoundError()

        assert error.message == "Resource not found"
        assert error.status_code == 404
        assert error.code == "NoSuchKey"

    def test_custom_code(self):
        """NotFoundError keeps a custom error code."""
        error = NotFoundError("no bucket", code="NoSuchBucket")

        assert error.code == "NoSuchBucket"
        assert isinstance(error, APIError)
