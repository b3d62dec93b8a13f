"""Parsing and validation of crawl metadata documents."""

import json
import logging
from datetime import datetime
from typing import Any
from urllib.parse import urlparse

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from schemas.metadata import (
    INVALID_JSON_SENTINEL,
    EssentialMetadata,
    MetadataInvalid,
    MetadataValid,
    MetadataValidation,
)

logger = logging.getLogger(__name__)

ESSENTIAL_FIELDS = ("url", "crawl_time", "depth")

_datetime_adapter = TypeAdapter(datetime)


def parse_metadata(text: str) -> tuple[dict[str, Any], str | None]:
    """Parse a metadata document.

    Returns:
        Tuple of (metadata, error). On failure the metadata is a copy of the
        invalid-JSON sentinel and error describes the problem.
    """
    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        logger.debug(f"Metadata is not valid JSON: {e}")
        return dict(INVALID_JSON_SENTINEL), INVALID_JSON_SENTINEL["error"]

    if not isinstance(data, dict):
        return dict(INVALID_JSON_SENTINEL), INVALID_JSON_SENTINEL["error"]

    return data, None


def is_absolute_url(value: str) -> bool:
    """True for a well-formed URL with a scheme and a host."""
    try:
        parsed = urlparse(value)
    except ValueError:
        return False
    return bool(parsed.scheme) and bool(parsed.netloc)


def validate_metadata(metadata: dict[str, Any] | None) -> MetadataValidation:
    """Check that metadata carries a usable absolute ``url``."""
    metadata = metadata or {}
    url = metadata.get("url")

    if url is None:
        return MetadataInvalid(reason="missing url", metadata=metadata)
    if not isinstance(url, str):
        return MetadataInvalid(reason="url is not a string", metadata=metadata)
    if not url.strip():
        return MetadataInvalid(reason="url is empty", metadata=metadata)
    if not is_absolute_url(url):
        return MetadataInvalid(reason=f"url is not an absolute URL: {url}", metadata=metadata)

    return MetadataValid(url=url, metadata=metadata)


def parse_crawl_datetime(crawl_time: str) -> datetime | None:
    """Parse a crawl time, returning None when it is not a recognizable date.

    ISO-8601 dates and datetimes are read directly; anything else (such as a
    Unix timestamp) goes through pydantic's datetime coercion.
    """
    try:
        return datetime.fromisoformat(crawl_time.strip())
    except ValueError:
        pass
    try:
        return _datetime_adapter.validate_python(crawl_time)
    except PydanticValidationError:
        logger.debug(f"Could not parse crawl_time: {crawl_time}")
        return None


def _as_text(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def extract_essential(metadata: dict[str, Any] | None) -> EssentialMetadata | None:
    """Extract the fields needed to build an article.

    Returns None when none of ``url``, ``crawl_time`` or ``depth`` is present.
    """
    if not metadata:
        return None
    if not any(field in metadata for field in ESSENTIAL_FIELDS):
        return None

    crawl_time = _as_text(metadata.get("crawl_time"))
    crawl_datetime = parse_crawl_datetime(crawl_time) if crawl_time else None

    return EssentialMetadata(
        url=_as_text(metadata.get("url")),
        crawl_time=crawl_time,
        crawl_datetime=crawl_datetime,
        depth=_as_text(metadata.get("depth")),
    )
