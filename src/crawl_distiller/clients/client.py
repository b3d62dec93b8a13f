"""Base client for object-store requests."""

import logging
from abc import ABC, abstractmethod
from typing import Any

import boto3
from botocore.config import Config
from botocore.exceptions import (
    ClientError as BotoClientError,
    ConnectTimeoutError,
    EndpointConnectionError,
    ReadTimeoutError,
)

from .exceptions import (
    APIError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
)

logger = logging.getLogger(__name__)

NOT_FOUND_CODES = {"404", "NoSuchKey", "NoSuchBucket", "NotFound"}
THROTTLE_CODES = {"SlowDown", "Throttling", "ThrottlingException", "RequestLimitExceeded", "TooManyRequests"}
TRANSIENT_ERRORS = (EndpointConnectionError, ConnectTimeoutError, ReadTimeoutError)


class Client(ABC):
    """Base class for object-store clients.

    Provides a lazily created boto3 client with context manager support,
    configurable timeout, retries, region and endpoint via dict config.

    Config keys:
        bucket (required): Bucket all requests are made against
        region: AWS region name (default: from the environment)
        endpoint_url: Custom endpoint, e.g. for S3-compatible stores
        timeout: Connect/read timeout in seconds (default: 30)
        retry_attempts: Total attempts per request, including throttling and
            5xx responses (default: 3)
        retry_mode: botocore retry mode, ``standard`` or ``adaptive``
            (default: standard)
    """

    service_name = "s3"

    def __init__(self, config: dict, session: boto3.session.Session | None = None):
        if "bucket" not in config:
            raise ValueError("config must include 'bucket'")

        self._config = config
        self._session = session
        self._client: Any = None

    @property
    def bucket(self) -> str:
        return str(self._config["bucket"])

    @property
    def region(self) -> str | None:
        return self._config.get("region")

    @property
    def endpoint_url(self) -> str | None:
        return self._config.get("endpoint_url")

    @property
    def timeout(self) -> float:
        return float(self._config.get("timeout", 30))

    @property
    def retry_attempts(self) -> int:
        return int(self._config.get("retry_attempts", 3))

    @property
    def retry_mode(self) -> str:
        return str(self._config.get("retry_mode", "standard"))

    @property
    def client(self) -> Any:
        """Lazy-initialized boto3 client."""
        if self._client is None:
            session = self._session or boto3.session.Session()
            self._client = session.client(
                self.service_name,
                region_name=self.region,
                endpoint_url=self.endpoint_url,
                config=Config(
                    connect_timeout=self.timeout,
                    read_timeout=self.timeout,
                    retries={"max_attempts": self.retry_attempts, "mode": self.retry_mode},
                ),
            )
        return self._client

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    def close(self) -> None:
        """Close the underlying boto3 client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def _handle_error(self, operation: str, error: BotoClientError) -> APIError:
        """Map a botocore error response to a client exception.

        Args:
            operation: Name of the failed operation
            error: The botocore error

        Returns:
            NotFoundError, RateLimitError or APIError
        """
        details = error.response.get("Error", {})
        code = str(details.get("Code", ""))
        message = details.get("Message") or str(error)
        status_code = error.response.get("ResponseMetadata", {}).get("HTTPStatusCode")

        if code in NOT_FOUND_CODES or status_code == 404:
            return NotFoundError(f"{operation}: {message}", code=code)
        if code in THROTTLE_CODES:
            return RateLimitError(f"{operation}: {message}", code=code)
        return APIError(
            f"{operation} failed ({code or status_code}): {message}",
            status_code=status_code,
            code=code,
        )

    def _call(self, operation: str, **kwargs) -> dict:
        """Invoke a client operation and map its errors.

        Retries of throttling, 5xx and connection failures happen inside
        botocore according to ``retry_attempts`` and ``retry_mode``.

        Args:
            operation: boto3 client method name (e.g. ``list_objects_v2``)
            **kwargs: Arguments for the operation

        Returns:
            The operation's response dict

        Raises:
            ConnectionError: If the store stays unreachable after all attempts
            APIError: If the store rejects the request
        """
        try:
            return getattr(self.client, operation)(**kwargs)
        except BotoClientError as e:
            raise self._handle_error(operation, e) from e
        except TRANSIENT_ERRORS as e:
            logger.warning(f"{operation} could not reach the store: {e}")
            msg = f"Connection failed after {self.retry_attempts} attempts"
            raise ConnectionError(msg) from e

    @abstractmethod
    def fetch(self, key: str) -> Any:
        """Fetch a single object. Must be implemented by subclasses."""
        pass
