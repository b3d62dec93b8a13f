"""Incremental skip logic and ledger record construction.

An object is skipped when the ledger already holds its exact key with a
last-modified string equal to the object's current one. Anything else,
including a re-upload with identical content, is fetched again.
"""

import logging
import time
from collections.abc import Iterable
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime, timezone

from schemas.ledger import FileRecord, ProcessedFileRecord, overall_status
from schemas.processing import (
    FetchBatch,
    FetchedFile,
    FileType,
    ProcessedObject,
    ProcessingResult,
)
from schemas.storage import StorageObject, make_pair_id, split_pair_key
from schemas.timestamps import parse_timestamp

from crawl_distiller.clients.protocols import ObjectFetcher
from crawl_distiller.config import DEFAULT_HTML_FILENAME, DEFAULT_METADATA_FILENAME

logger = logging.getLogger(__name__)

__all__ = ["ChangeTracker", "build_ledger_records", "overall_status"]


class ChangeTracker:
    """Decides which objects need fetching and fetches them.

    Attributes:
        processed_paths: Flattened ledger view, ``key -> last_modified``
        html_filename: Fixed name of the HTML document
        metadata_filename: Fixed name of the metadata document
        fetch_workers: Size of the fetch thread pool (1 fetches sequentially)
    """

    def __init__(
        self,
        processed_paths: dict[str, str],
        html_filename: str = DEFAULT_HTML_FILENAME,
        metadata_filename: str = DEFAULT_METADATA_FILENAME,
        fetch_workers: int = 1,
    ):
        self.processed_paths = processed_paths
        self.html_filename = html_filename
        self.metadata_filename = metadata_filename
        self.fetch_workers = max(1, fetch_workers)

    def file_type(self, key: str) -> FileType | None:
        """Classify a key as the HTML or metadata document, or neither.

        Keys nested deeper than the pair directory are neither.
        """
        split = split_pair_key(key)
        if split is None:
            return None
        filename = split[2]
        if filename == self.html_filename:
            return "html"
        if filename == self.metadata_filename:
            return "metadata"
        return None

    def is_unchanged(self, obj: StorageObject) -> bool:
        """True when the ledger has this exact key and timestamp string."""
        recorded = self.processed_paths.get(obj.key)
        return recorded is not None and recorded == obj.last_modified_iso

    def fetch_changed(
        self, objects: Iterable[StorageObject], fetcher: ObjectFetcher
    ) -> FetchBatch:
        """Fetch every HTML/metadata object that is new or has changed.

        A failed fetch is recorded against its object and does not stop
        the others.

        Args:
            objects: Candidate objects from the listing
            fetcher: Object-store read capability

        Returns:
            FetchBatch with contents, per-object results and the skip count
        """
        batch = FetchBatch()
        to_fetch: list[tuple[StorageObject, FileType]] = []

        for obj in objects:
            file_type = self.file_type(obj.key)
            if file_type is None:
                continue
            if self.is_unchanged(obj):
                batch.skipped_count += 1
                continue
            to_fetch.append((obj, file_type))

        if self.fetch_workers > 1 and len(to_fetch) > 1:
            with ThreadPoolExecutor(max_workers=self.fetch_workers) as pool:
                outcomes = list(
                    pool.map(lambda item: self._fetch_one(item[0], item[1], fetcher), to_fetch)
                )
        else:
            outcomes = [self._fetch_one(obj, file_type, fetcher) for obj, file_type in to_fetch]

        for processed, fetched in outcomes:
            batch.processed[processed.key] = processed
            if fetched is not None:
                batch.fetched.append(fetched)

        logger.info(
            f"Skipped {batch.skipped_count} previously processed files that haven't changed"
        )
        return batch

    def _fetch_one(
        self, obj: StorageObject, file_type: FileType, fetcher: ObjectFetcher
    ) -> tuple[ProcessedObject, FetchedFile | None]:
        start = time.monotonic()
        fetched: FetchedFile | None = None
        error: str | None = None

        try:
            content = fetcher.fetch(obj.key)
            fetched = FetchedFile(
                key=obj.key,
                file_type=file_type,
                last_modified=obj.last_modified,
                content=content,
            )
        except Exception as e:
            error = str(e) or e.__class__.__name__
            logger.error(f"Error processing file {obj.key}: {error}")

        elapsed_ms = int((time.monotonic() - start) * 1000)
        processed = ProcessedObject(
            key=obj.key,
            file_type=file_type,
            last_modified=obj.last_modified_iso,
            result=ProcessingResult(
                success=fetched is not None,
                error=error,
                processing_time_ms=elapsed_ms,
                file_size=obj.size,
            ),
        )
        return processed, fetched


def _file_record(processed: ProcessedObject) -> FileRecord:
    result = processed.result
    return FileRecord(
        path=processed.key,
        last_modified=processed.last_modified,
        last_modified_date=parse_timestamp(processed.last_modified),
        status="success" if result.success else "failed",
        error=result.error,
        size_bytes=result.file_size,
        processing_time_ms=result.processing_time_ms,
    )


def build_ledger_records(
    batch: FetchBatch,
    existing: dict[str, ProcessedFileRecord] | None = None,
    processed_at: datetime | None = None,
) -> list[ProcessedFileRecord]:
    """Group freshly processed objects into one ledger row per pair.

    Sub-records that were not fetched in this run are carried forward from
    the existing row, so a pair whose metadata was skipped as unchanged keeps
    its metadata entry when only the HTML is rewritten.

    Args:
        batch: Output of ``ChangeTracker.fetch_changed``
        existing: Current ledger rows for the affected pairs, by pair_id
        processed_at: Timestamp for the rows (default: now)

    Returns:
        Ledger rows to upsert, one per touched pair
    """
    existing = existing or {}
    processed_at = processed_at or datetime.now(timezone.utc)
    touched: dict[str, dict[str, FileRecord]] = {}
    identity: dict[str, tuple[str, str]] = {}

    for processed in batch.processed.values():
        split = split_pair_key(processed.key)
        if split is None:
            continue
        domain, content_hash, _ = split
        pair_id = make_pair_id(domain, content_hash)
        identity[pair_id] = (domain, content_hash)
        touched.setdefault(pair_id, {})[processed.file_type] = _file_record(processed)

    records: list[ProcessedFileRecord] = []
    for pair_id, files in touched.items():
        domain, content_hash = identity[pair_id]
        previous = existing.get(pair_id)
        html = files.get("html") or (previous.html if previous else None)
        metadata = files.get("metadata") or (previous.metadata if previous else None)
        records.append(
            ProcessedFileRecord(
                pair_id=pair_id,
                domain=domain,
                content_hash=content_hash,
                html=html,
                metadata=metadata,
                processed_at=processed_at,
            )
        )

    return records
