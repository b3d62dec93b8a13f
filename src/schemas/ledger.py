"""Processing ledger schemas.

The ledger holds one row per pair identity. Each row records the last
fetch of the pair's HTML and metadata objects; the flattened
``path -> last_modified`` view of all rows drives the incremental skip rule.
"""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, Field, computed_field

from .timestamps import utc_now

FileStatus = Literal["success", "failed"]
OverallStatus = Literal["success", "failed", "incomplete", "unknown"]


class FileRecord(BaseModel):
    """Ledger entry for one fetched object.

    Attributes:
        path: Object key
        last_modified: Last-modified string as compared by the skip rule
        last_modified_date: Parsed form of ``last_modified`` for range queries
        status: Fetch outcome
        error: Fetch error message, if any
        size_bytes: Object size from the listing
        processing_time_ms: Fetch duration
    """

    path: str
    last_modified: str
    last_modified_date: datetime | None = None
    status: FileStatus = "success"
    error: str | None = None
    size_bytes: int | None = None
    processing_time_ms: int | None = None


def overall_status(html: FileRecord | None, metadata: FileRecord | None) -> OverallStatus:
    """Derive a pair's overall status from its sub-records."""
    if html is None and metadata is None:
        return "unknown"
    if any(r is not None and r.status == "failed" for r in (html, metadata)):
        return "failed"
    if html is None or metadata is None:
        return "incomplete"
    return "success"


class ProcessedFileRecord(BaseModel):
    """One ledger row, keyed by ``pair_id``.

    ``has_both`` and ``status`` are computed from the sub-records so they
    can never disagree with them.
    """

    pair_id: str
    domain: str
    content_hash: str
    html: FileRecord | None = None
    metadata: FileRecord | None = None
    processed_at: datetime = Field(default_factory=utc_now)

    @computed_field
    @property
    def has_both(self) -> bool:
        return self.html is not None and self.metadata is not None

    @computed_field
    @property
    def status(self) -> OverallStatus:
        return overall_status(self.html, self.metadata)

    def file_records(self) -> list[FileRecord]:
        return [r for r in (self.html, self.metadata) if r is not None]


class LedgerQuery(BaseModel):
    """Filters for ledger lookups. Unset fields do not filter."""

    pair_id: str | None = None
    domain: str | None = None
    hash: str | None = None
    status: OverallStatus | None = None
    has_both: bool | None = None
    processed_after: datetime | None = None
    processed_before: datetime | None = None
    html_modified_after: datetime | None = None
    html_modified_before: datetime | None = None
    metadata_modified_after: datetime | None = None
    metadata_modified_before: datetime | None = None
    limit: int = Field(default=100, gt=0)
    skip: int = Field(default=0, ge=0)


class LedgerPage(BaseModel):
    """A page of ledger rows plus the total match count."""

    pairs: list[ProcessedFileRecord] = []
    total: int = 0
    limit: int = 100
    skip: int = 0


class LedgerStats(BaseModel):
    """Aggregated counters over a set of ledger rows."""

    total_pairs: int = 0
    success_pairs: int = 0
    failed_pairs: int = 0
    incomplete_pairs: int = 0
    complete_pairs: int = 0
    html_only_pairs: int = 0
    metadata_only_pairs: int = 0
    total_html_processing_time_ms: int = 0
    total_metadata_processing_time_ms: int = 0


class DomainStats(LedgerStats):
    domain: str


class TotalStats(LedgerStats):
    """Overall counters plus date bounds across the whole ledger."""

    min_processed_at: datetime | None = None
    max_processed_at: datetime | None = None
    min_html_modified: datetime | None = None
    max_html_modified: datetime | None = None
    min_metadata_modified: datetime | None = None
    max_metadata_modified: datetime | None = None


class LedgerSummary(BaseModel):
    domains: list[DomainStats] = []
    totals: TotalStats = Field(default_factory=TotalStats)
