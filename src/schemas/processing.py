"""Per-object fetch results produced by the change tracker."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel

FileType = Literal["html", "metadata"]


class ProcessingResult(BaseModel):
    """Outcome of fetching a single object.

    Attributes:
        success: Whether the content was retrieved
        error: Error message when the fetch failed
        processing_time_ms: Wall-clock duration of the fetch
        file_size: Object size from the listing
    """

    success: bool
    error: str | None = None
    processing_time_ms: int = 0
    file_size: int = 0


class FetchedFile(BaseModel):
    """Content of a successfully fetched HTML or metadata object."""

    key: str
    file_type: FileType
    last_modified: datetime
    content: str


class ProcessedObject(BaseModel):
    """An object that was fetched (successfully or not) during a run.

    Carries the exact last-modified string that is written to the ledger and
    compared by the skip rule on later runs.
    """

    key: str
    file_type: FileType
    last_modified: str
    result: ProcessingResult


class FetchBatch(BaseModel):
    """Everything the change tracker produced for one pass.

    Attributes:
        fetched: Successfully fetched file contents
        processed: Every object that was attempted, keyed by object key
        skipped_count: Objects skipped because the ledger already had them
    """

    fetched: list[FetchedFile] = []
    processed: dict[str, ProcessedObject] = {}
    skipped_count: int = 0

    @property
    def results(self) -> dict[str, ProcessingResult]:
        return {key: obj.result for key, obj in self.processed.items()}

    @property
    def success_count(self) -> int:
        return sum(1 for obj in self.processed.values() if obj.result.success)

    @property
    def failure_count(self) -> int:
        return sum(1 for obj in self.processed.values() if not obj.result.success)

    @property
    def total_processing_time_ms(self) -> int:
        return sum(obj.result.processing_time_ms for obj in self.processed.values())

    @property
    def total_size_bytes(self) -> int:
        return sum(obj.result.file_size for obj in self.processed.values())
