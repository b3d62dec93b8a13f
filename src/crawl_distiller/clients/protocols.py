"""Capabilities the pipeline needs from an object store."""

from typing import Protocol

from schemas.storage import StorageObject


class ObjectLister(Protocol):
    def list_recent(self, hours: float, exhaustive: bool = False) -> list[StorageObject]:
        """List objects modified within the last ``hours``."""
        ...


class ObjectFetcher(Protocol):
    def fetch(self, key: str) -> str:
        """Return the object's content decoded as UTF-8."""
        ...
