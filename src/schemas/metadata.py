"""Crawl metadata records and validation results."""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel

INVALID_JSON_SENTINEL: dict[str, Any] = {"error": "Invalid JSON"}


class MetadataValid(BaseModel):
    """Metadata carrying a well-formed absolute ``url``."""

    valid: Literal[True] = True
    url: str
    metadata: dict[str, Any]


class MetadataInvalid(BaseModel):
    """Metadata rejected by URL validation, with the reason."""

    valid: Literal[False] = False
    reason: str
    metadata: dict[str, Any]


MetadataValidation = MetadataValid | MetadataInvalid


class EssentialMetadata(BaseModel):
    """The subset of crawl metadata needed to build an article.

    At least one of ``url``, ``crawl_time`` and ``depth`` is present.
    """

    url: str | None = None
    crawl_time: str | None = None
    crawl_datetime: datetime | None = None
    depth: str | None = None


class ExtractedContent(BaseModel):
    """Readable content extracted from an HTML document.

    Attributes:
        title: Document title
        excerpt: Short description or lead paragraph
        text_content: Plain text of the main content
        content: HTML of the main content
        is_potentially_empty: Text is shorter than the minimum content length
    """

    title: str | None = None
    excerpt: str = ""
    text_content: str = ""
    content: str = ""
    is_potentially_empty: bool = False

    @property
    def text_length(self) -> int:
        return len(self.text_content.strip())
