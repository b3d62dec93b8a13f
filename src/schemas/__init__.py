"""Schema definitions for crawl-distiller."""

from .article import Article
from .ledger import (
    DomainStats,
    FileRecord,
    LedgerPage,
    LedgerQuery,
    LedgerStats,
    LedgerSummary,
    ProcessedFileRecord,
    TotalStats,
    overall_status,
)
from .metadata import (
    INVALID_JSON_SENTINEL,
    EssentialMetadata,
    ExtractedContent,
    MetadataInvalid,
    MetadataValid,
    MetadataValidation,
)
from .processing import FetchBatch, FetchedFile, ProcessedObject, ProcessingResult
from .report import (
    ExtractionPreview,
    FailedExtractionEntry,
    InvalidMetadataEntry,
    RunReport,
    SaveResult,
)
from .storage import FilePair, PairFile, StorageObject, make_pair_id, split_pair_key

__all__ = [
    "Article",
    "DomainStats",
    "EssentialMetadata",
    "ExtractedContent",
    "ExtractionPreview",
    "FailedExtractionEntry",
    "FetchBatch",
    "FetchedFile",
    "FilePair",
    "FileRecord",
    "INVALID_JSON_SENTINEL",
    "InvalidMetadataEntry",
    "LedgerPage",
    "LedgerQuery",
    "LedgerStats",
    "LedgerSummary",
    "MetadataInvalid",
    "MetadataValid",
    "MetadataValidation",
    "PairFile",
    "ProcessedFileRecord",
    "ProcessedObject",
    "ProcessingResult",
    "RunReport",
    "SaveResult",
    "StorageObject",
    "TotalStats",
    "make_pair_id",
    "split_pair_key",
    "overall_status",
]
