"""Diagnostics and run summary schemas."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .article import Article
from .ledger import ProcessedFileRecord
from .processing import ProcessingResult
from .storage import FilePair
from .timestamps import utc_now


class InvalidMetadataEntry(BaseModel):
    """A pair whose metadata failed to parse or has no usable URL."""

    pair_id: str
    error: str | None = None
    reason: str | None = None
    metadata: dict[str, Any] | None = None


class ExtractionPreview(BaseModel):
    title: str | None = None
    excerpt: str | None = None
    content_length: int = 0


class FailedExtractionEntry(BaseModel):
    """A pair whose HTML yielded no content or too little content."""

    pair_id: str
    url: str = ""
    html_length: int = 0
    parsed: ExtractionPreview | None = None


class SaveResult(BaseModel):
    """Counts returned by an upsert batch."""

    inserted: int = 0
    updated: int = 0

    @property
    def total(self) -> int:
        return self.inserted + self.updated


class RunReport(BaseModel):
    """Summary of one processing run.

    Attributes:
        started_at: When the run started
        lookback_hours: Listing window
        persisted: Whether results were written to the store
        objects_listed: Number of objects in the listing window
        pairs: Grouped and classified pairs
        fetched_count: Objects fetched successfully
        skipped_count: Objects skipped as unchanged
        processing_results: Per-object fetch outcome
        invalid_metadata: Metadata diagnostics
        failed_extractions: Extraction diagnostics
        new_articles: Articles written (or to be written on a dry run)
        skipped_articles: Candidates whose identity is already stored
        ledger_records: Ledger rows written in this run
        article_save: Counts from the article upsert
    """

    started_at: datetime = Field(default_factory=utc_now)
    lookback_hours: float = 1
    persisted: bool = True
    objects_listed: int = 0
    pairs: dict[str, FilePair] = {}
    fetched_count: int = 0
    skipped_count: int = 0
    processing_results: dict[str, ProcessingResult] = {}
    invalid_metadata: list[InvalidMetadataEntry] = []
    failed_extractions: list[FailedExtractionEntry] = []
    new_articles: list[Article] = []
    skipped_articles: list[Article] = []
    ledger_records: list[ProcessedFileRecord] = []
    article_save: SaveResult | None = None

    @property
    def complete_pairs(self) -> list[FilePair]:
        return [p for p in self.pairs.values() if p.is_complete]

    @property
    def broken_pairs(self) -> list[FilePair]:
        return [p for p in self.pairs.values() if p.is_broken]

    @property
    def failures(self) -> dict[str, ProcessingResult]:
        return {k: r for k, r in self.processing_results.items() if not r.success}
