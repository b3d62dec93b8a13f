"""Article record persisted once per pair identity."""

from datetime import datetime

from pydantic import BaseModel


class Article(BaseModel):
    """An extracted article, keyed by its pair identity.

    Attributes:
        pair_id: Identity key (``domain/content_hash``), also the stored key
        domain: Crawled domain
        content_hash: Content hash directory name
        title: Extracted title
        excerpt: Extracted excerpt (may be empty)
        content: Full extracted text
        content_length: Length of ``content``
        is_potentially_empty: Extracted text is shorter than the minimum length
        url: Source URL from the crawl metadata
        crawl_time: Raw crawl time from the crawl metadata
        crawl_datetime: Parsed ``crawl_time`` when it could be parsed
        depth: Crawl depth as reported by the crawler
    """

    pair_id: str
    domain: str
    content_hash: str
    title: str | None = None
    excerpt: str = ""
    content: str
    content_length: int
    is_potentially_empty: bool = False
    url: str = ""
    crawl_time: str = ""
    crawl_datetime: datetime | None = None
    depth: str = ""
