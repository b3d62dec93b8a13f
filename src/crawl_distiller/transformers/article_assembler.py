"""Assembly of article candidates from fetched HTML and metadata.

For each pair touched in a run, the metadata document (if fetched) is
parsed and validated first, then the HTML document is run through the
extractor using the metadata URL as base URL when it is valid. A candidate
article needs both essential metadata and a non-null extraction result.
"""

import logging
from collections.abc import Iterable
from typing import Any

from pydantic import BaseModel

from schemas.article import Article
from schemas.metadata import (
    ExtractedContent,
    MetadataInvalid,
    MetadataValid,
    MetadataValidation,
)
from schemas.processing import FetchedFile
from schemas.report import ExtractionPreview, FailedExtractionEntry, InvalidMetadataEntry
from schemas.storage import make_pair_id, split_pair_key

from crawl_distiller.config import DEFAULT_MIN_CONTENT_LENGTH, DEFAULT_PLACEHOLDER_URL

from .metadata import extract_essential, parse_metadata, validate_metadata
from .readability_extractor import Extractor

logger = logging.getLogger(__name__)


class PairContent(BaseModel):
    """Fetched and derived content for one pair within a run."""

    domain: str
    content_hash: str
    metadata: dict[str, Any] | None = None
    metadata_error: str | None = None
    validation: MetadataValidation | None = None
    html: str | None = None
    parsed: ExtractedContent | None = None

    @property
    def pair_id(self) -> str:
        return make_pair_id(self.domain, self.content_hash)

    @property
    def valid_url(self) -> str | None:
        if isinstance(self.validation, MetadataValid):
            return self.validation.url
        return None


class AssemblyResult(BaseModel):
    """Output of ``ContentAssembler.assemble``.

    Attributes:
        contents: Per-pair content, by pair_id
        candidates: Articles that could be built
        invalid_metadata: Pairs with unparseable metadata or no usable URL
        failed_extractions: Pairs whose HTML yielded no or too little text
    """

    contents: dict[str, PairContent] = {}
    candidates: list[Article] = []
    invalid_metadata: list[InvalidMetadataEntry] = []
    failed_extractions: list[FailedExtractionEntry] = []


class ContentAssembler:
    """Builds article candidates from the files fetched in a run.

    Attributes:
        extractor: Readable-content extraction capability
        min_content_length: Texts shorter than this are reported as failed
            extractions (and flagged potentially empty by the extractor)
        placeholder_url: Base URL used when the metadata URL is not usable
    """

    def __init__(
        self,
        extractor: Extractor,
        min_content_length: int = DEFAULT_MIN_CONTENT_LENGTH,
        placeholder_url: str = DEFAULT_PLACEHOLDER_URL,
    ):
        self.extractor = extractor
        self.min_content_length = min_content_length
        self.placeholder_url = placeholder_url

    def assemble(self, files: Iterable[FetchedFile]) -> AssemblyResult:
        """Assemble article candidates from fetched files.

        Args:
            files: HTML and metadata contents fetched in this run

        Returns:
            AssemblyResult with candidates and diagnostics
        """
        result = AssemblyResult()

        # Metadata first so the HTML of the same pair can use its URL.
        ordered = sorted(files, key=lambda f: 0 if f.file_type == "metadata" else 1)

        for fetched in ordered:
            content = self._content_for(fetched.key, result)
            if content is None:
                continue
            if fetched.file_type == "metadata":
                self._apply_metadata(content, fetched, result)
            else:
                self._apply_html(content, fetched, result)

        for content in result.contents.values():
            article = self.build_article(content)
            if article is not None:
                result.candidates.append(article)

        return result

    def build_article(self, content: PairContent) -> Article | None:
        """Build an article when essential metadata and extraction succeeded."""
        if content.metadata is None or content.parsed is None:
            return None

        essential = extract_essential(content.metadata)
        if essential is None:
            return None

        parsed = content.parsed
        return Article(
            pair_id=content.pair_id,
            domain=content.domain,
            content_hash=content.content_hash,
            title=parsed.title,
            excerpt=parsed.excerpt or "",
            content=parsed.text_content,
            content_length=len(parsed.text_content),
            is_potentially_empty=parsed.is_potentially_empty,
            url=essential.url or "",
            crawl_time=essential.crawl_time or "",
            crawl_datetime=essential.crawl_datetime,
            depth=essential.depth or "",
        )

    def _content_for(self, key: str, result: AssemblyResult) -> PairContent | None:
        split = split_pair_key(key)
        if split is None:
            return None
        domain, content_hash, _ = split
        pair_id = make_pair_id(domain, content_hash)
        if pair_id not in result.contents:
            result.contents[pair_id] = PairContent(domain=domain, content_hash=content_hash)
        return result.contents[pair_id]

    def _apply_metadata(
        self, content: PairContent, fetched: FetchedFile, result: AssemblyResult
    ) -> None:
        metadata, error = parse_metadata(fetched.content)
        content.metadata = metadata
        content.metadata_error = error

        if error is not None:
            logger.error(f"Error parsing metadata JSON for {content.pair_id}: {error}")
            content.validation = MetadataInvalid(reason=error, metadata=metadata)
            result.invalid_metadata.append(
                InvalidMetadataEntry(pair_id=content.pair_id, error=error)
            )
            return

        content.validation = validate_metadata(metadata)
        if isinstance(content.validation, MetadataInvalid):
            result.invalid_metadata.append(
                InvalidMetadataEntry(
                    pair_id=content.pair_id,
                    reason=content.validation.reason,
                    metadata=metadata,
                )
            )

    def _apply_html(
        self, content: PairContent, fetched: FetchedFile, result: AssemblyResult
    ) -> None:
        content.html = fetched.content
        url = content.valid_url
        parsed = self.extractor.parse(fetched.content, url or self.placeholder_url)
        content.parsed = parsed

        if parsed is None or not parsed.content or parsed.text_length < self.min_content_length:
            preview = None
            if parsed is not None:
                preview = ExtractionPreview(
                    title=parsed.title,
                    excerpt=parsed.excerpt,
                    content_length=parsed.text_length,
                )
            result.failed_extractions.append(
                FailedExtractionEntry(
                    pair_id=content.pair_id,
                    url=url or "",
                    html_length=len(fetched.content),
                    parsed=preview,
                )
            )
