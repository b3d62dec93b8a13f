"""Pytest fixtures for crawl-distiller tests."""

import json
import re
from datetime import datetime, timezone

import pytest

from schemas.metadata import ExtractedContent
from schemas.storage import StorageObject

from crawl_distiller.clients.exceptions import NotFoundError
from crawl_distiller.config import Settings
from crawl_distiller.store import Database

FIRST_RUN = datetime(2024, 1, 1, tzinfo=timezone.utc)

ARTICLE_BODY = (
    "The city council approved the new transit plan on Monday, "
    "after months of debate over routes, fares and funding. "
) * 5


def make_object(key: str, last_modified: datetime = FIRST_RUN, size: int = 100) -> StorageObject:
    return StorageObject(key=key, size=size, last_modified=last_modified)


class FakeBucket:
    """In-memory object store implementing the lister and fetcher capabilities."""

    def __init__(self):
        self.objects: dict[str, StorageObject] = {}
        self.contents: dict[str, str] = {}
        self.failing: dict[str, Exception] = {}
        self.fetch_calls: list[str] = []
        self.list_calls: list[tuple[float, bool]] = []

    def put(self, key: str, content: str, last_modified: datetime = FIRST_RUN) -> StorageObject:
        obj = make_object(key, last_modified=last_modified, size=len(content.encode("utf-8")))
        self.objects[key] = obj
        self.contents[key] = content
        return obj

    def put_pair(
        self,
        prefix: str,
        html: str | None,
        metadata: dict | str | None,
        last_modified: datetime = FIRST_RUN,
    ) -> None:
        if html is not None:
            self.put(f"{prefix}/page.html", html, last_modified)
        if metadata is not None:
            body = metadata if isinstance(metadata, str) else json.dumps(metadata)
            self.put(f"{prefix}/metadata.json", body, last_modified)

    def list_recent(self, hours: float, exhaustive: bool = False) -> list[StorageObject]:
        self.list_calls.append((hours, exhaustive))
        return list(self.objects.values())

    def fetch(self, key: str) -> str:
        self.fetch_calls.append(key)
        if key in self.failing:
            raise self.failing[key]
        if key not in self.contents:
            raise NotFoundError(f"get_object: {key}")
        return self.contents[key]


class FakeExtractor:
    """Extractor that strips tags instead of running readability."""

    def __init__(self, min_content_length: int = 100):
        self.min_content_length = min_content_length
        self.calls: list[tuple[str, str]] = []

    def parse(self, html: str, base_url: str) -> ExtractedContent | None:
        self.calls.append((html, base_url))
        title_match = re.search(r"<title>(.*?)</title>", html)
        body = re.sub(r"<title>.*?</title>", "", html)
        text = " ".join(re.sub(r"<[^>]+>", " ", body).split())
        if not text:
            return None
        return ExtractedContent(
            title=title_match.group(1) if title_match else None,
            excerpt=text[:50],
            text_content=text,
            content=f"<div>{text}</div>",
            is_potentially_empty=len(text) < self.min_content_length,
        )


@pytest.fixture
def article_html():
    """HTML page with a ~500 character article body."""
    return (
        "<html><head><title>Transit plan approved</title></head>"
        f"<body><article><p>{ARTICLE_BODY}</p></article></body></html>"
    )


@pytest.fixture
def article_metadata():
    return {"url": "https://ex.com/a", "crawl_time": "2024-01-01", "depth": 1}


@pytest.fixture
def bucket():
    return FakeBucket()


@pytest.fixture
def extractor():
    return FakeExtractor()


@pytest.fixture
def settings(tmp_path):
    """Settings pointing at a temporary SQLite database."""
    return Settings(
        _env_file=None,
        database_url=f"sqlite:///{tmp_path / 'crawled_news.db'}",
    )


@pytest.fixture
def database(settings):
    """An open database with both tables created."""
    with Database.from_settings(settings) as db:
        yield db
