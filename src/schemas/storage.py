"""Object-store listing schemas.

The crawler writes one directory per crawled page:

    <bucket>/
    └── <domain>/
        └── <content_hash>/
            ├── page.html
            └── metadata.json

Keys are split on ``/`` with the first segment reserved for the root (or a
listing prefix), so ``/example.com/abc123/page.html`` yields the domain
``example.com``, the content hash ``abc123`` and the filename ``page.html``.
"""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, computed_field

from .timestamps import format_timestamp


class StorageObject(BaseModel):
    """A single object as reported by the object-store listing.

    Attributes:
        key: Full object key
        size: Object size in bytes
        last_modified: Last-modified timestamp reported by the store
    """

    key: str
    size: int = 0
    last_modified: datetime

    model_config = {"frozen": True}

    @classmethod
    def from_listing(cls, item: dict[str, Any]) -> "StorageObject":
        """Build from an S3 ``ListObjectsV2`` ``Contents`` entry."""
        return cls(
            key=item["Key"],
            size=item.get("Size", 0),
            last_modified=item["LastModified"],
        )

    @property
    def path_parts(self) -> list[str]:
        return self.key.split("/")

    @property
    def last_modified_iso(self) -> str:
        return format_timestamp(self.last_modified)


class PairFile(BaseModel):
    """A member file of a pair directory."""

    key: str
    filename: str
    size: int = 0
    last_modified: datetime


class FilePair(BaseModel):
    """The unit of work for one crawled page, identified by domain/hash.

    Attributes:
        domain: Crawled domain
        content_hash: Content hash directory name
        files: Member files, ordered by filename
        is_complete: Both the HTML and the metadata document are present
        is_broken: The HTML document is present but the metadata is missing
    """

    domain: str
    content_hash: str
    files: list[PairFile] = []
    is_complete: bool = False
    is_broken: bool = False

    @computed_field
    @property
    def pair_id(self) -> str:
        return make_pair_id(self.domain, self.content_hash)

    @property
    def filenames(self) -> list[str]:
        return [f.filename for f in self.files]


def make_pair_id(domain: str, content_hash: str) -> str:
    """Build the identity key shared by ledger rows and articles."""
    return f"{domain}/{content_hash}"


def split_pair_key(key: str) -> tuple[str, str, str] | None:
    """Split a member key into ``(domain, content_hash, filename)``.

    Only keys of exactly ``<root>/<domain>/<content_hash>/<filename>`` are
    pair members. Returns None for shallower or deeper keys.
    """
    parts = key.split("/")
    if len(parts) != 4 or not all(parts[1:]):
        return None
    return parts[1], parts[2], parts[3]
