"""S3 client for listing and reading crawler output."""

import logging
from datetime import datetime, timedelta, timezone

from schemas.storage import StorageObject
from schemas.timestamps import ensure_utc

from .client import Client

logger = logging.getLogger(__name__)


def filter_modified_after(
    objects: list[StorageObject],
    hours: float,
    now: datetime | None = None,
) -> list[StorageObject]:
    """Keep objects modified strictly after ``now - hours``."""
    now = ensure_utc(now or datetime.now(timezone.utc))
    cutoff = now - timedelta(hours=hours)
    return [obj for obj in objects if ensure_utc(obj.last_modified) > cutoff]


class S3Client(Client):
    """Client for the bucket the crawler writes page pairs into.

    Lists objects one page at a time or across every page using the
    continuation token, and reads object bodies as UTF-8 text.

    Example:
        config = {"bucket": "crawled-pages", "region": "us-east-1"}
        with S3Client(config) as client:
            objects = client.list_recent(hours=6, exhaustive=True)
            html = client.fetch(objects[0].key)
    """

    DEFAULT_MAX_KEYS = 1000

    @property
    def prefix(self) -> str | None:
        return self._config.get("prefix")

    @property
    def max_keys(self) -> int:
        return int(self._config.get("max_keys", self.DEFAULT_MAX_KEYS))

    @property
    def max_pages(self) -> int | None:
        value = self._config.get("max_pages")
        return int(value) if value else None

    def list_page(
        self, continuation_token: str | None = None
    ) -> tuple[list[StorageObject], str | None]:
        """List one page of objects.

        Args:
            continuation_token: Token returned by the previous page, if any

        Returns:
            Tuple of (objects on this page, token for the next page or None)
        """
        params: dict = {"Bucket": self.bucket, "MaxKeys": self.max_keys}
        if self.prefix:
            params["Prefix"] = self.prefix
        if continuation_token:
            params["ContinuationToken"] = continuation_token

        data = self._call("list_objects_v2", **params)
        objects = [StorageObject.from_listing(item) for item in data.get("Contents", [])]
        next_token = data.get("NextContinuationToken") if data.get("IsTruncated") else None
        return objects, next_token

    def list_first_page(self) -> list[StorageObject]:
        """List the first page of objects only."""
        objects, next_token = self.list_page()
        logger.info(f"Found {len(objects)} files in bucket {self.bucket}")
        if next_token:
            logger.info("More files exist but were not listed due to pagination limits")
        return objects

    def list_all(self) -> list[StorageObject]:
        """List every object, following continuation tokens.

        Stops early once ``max_pages`` pages have been read, if configured.
        """
        all_objects: list[StorageObject] = []
        page_count = 0
        token: str | None = None

        while True:
            objects, token = self.list_page(token)
            if objects:
                all_objects.extend(objects)
                page_count += 1
                logger.debug(
                    f"Retrieved page {page_count} with {len(objects)} files "
                    f"(total: {len(all_objects)})"
                )

            if self.max_pages is not None and page_count >= self.max_pages:
                logger.info(
                    f"Reached maximum page count ({self.max_pages}), stopping pagination"
                )
                break
            if token is None:
                break

        logger.info(f"Retrieved {len(all_objects)} total files from {page_count} pages")
        return all_objects

    def list_recent(self, hours: float, exhaustive: bool = False) -> list[StorageObject]:
        """List objects modified within the last ``hours``.

        Args:
            hours: Lookback window
            exhaustive: Read every listing page instead of only the first

        Returns:
            Objects modified after the cutoff
        """
        objects = self.list_all() if exhaustive else self.list_first_page()
        recent = filter_modified_after(objects, hours)
        logger.info(f"Found {len(recent)} files modified in the last {hours} hours")
        return recent

    def fetch(self, key: str) -> str:
        """Read an object and decode it as UTF-8.

        Raises:
            NotFoundError: If the object does not exist
            APIError: For other store errors
            ConnectionError: If the store cannot be reached
        """
        data = self._call("get_object", Bucket=self.bucket, Key=key)
        return data["Body"].read().decode("utf-8")
