"""Transformers from fetched crawler output to article records."""

from .article_assembler import AssemblyResult, ContentAssembler, PairContent
from .metadata import (
    extract_essential,
    is_absolute_url,
    parse_crawl_datetime,
    parse_metadata,
    validate_metadata,
)
from .readability_extractor import Extractor, ReadabilityExtractor

__all__ = [
    "AssemblyResult",
    "ContentAssembler",
    "Extractor",
    "PairContent",
    "ReadabilityExtractor",
    "extract_essential",
    "is_absolute_url",
    "parse_crawl_datetime",
    "parse_metadata",
    "validate_metadata",
]
