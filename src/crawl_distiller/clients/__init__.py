"""Object-store clients."""

from .client import Client
from .exceptions import (
    APIError,
    ClientError,
    ConnectionError,
    NotFoundError,
    RateLimitError,
)
from .protocols import ObjectFetcher, ObjectLister
from .s3_client import S3Client, filter_modified_after

__all__ = [
    "Client",
    "S3Client",
    "ObjectFetcher",
    "ObjectLister",
    "filter_modified_after",
    "ClientError",
    "ConnectionError",
    "APIError",
    "RateLimitError",
    "NotFoundError",
]
