"""Readable-content extraction backed by readability-lxml.

The extraction heuristics are readability's own; this module only adapts
its output to ``ExtractedContent`` and flags results that are too short.
"""

import logging
from typing import Protocol

from lxml import etree
from lxml import html as lxml_html
from readability import Document
from readability.readability import Unparseable

from schemas.metadata import ExtractedContent

from crawl_distiller.config import DEFAULT_MIN_CONTENT_LENGTH

logger = logging.getLogger(__name__)

DESCRIPTION_XPATH = (
    '//meta[@name="description" or @property="og:description"]/@content'
)


class Extractor(Protocol):
    def parse(self, html: str, base_url: str) -> ExtractedContent | None:
        """Extract readable content, or None when nothing was found."""
        ...


def _normalize_text(text: str) -> str:
    lines = (" ".join(line.split()) for line in text.splitlines())
    return "\n".join(line for line in lines if line)


class ReadabilityExtractor:
    """Extracts the main article content from an HTML document.

    Example:
        extractor = ReadabilityExtractor(min_content_length=100)
        extracted = extractor.parse(html, "https://example.com/story")
    """

    def __init__(self, min_content_length: int = DEFAULT_MIN_CONTENT_LENGTH):
        self.min_content_length = min_content_length

    def parse(self, html: str, base_url: str) -> ExtractedContent | None:
        """Extract title, excerpt and text from ``html``.

        Args:
            html: Raw HTML document
            base_url: Absolute URL used to resolve relative links

        Returns:
            ExtractedContent, or None when the document could not be parsed
            or produced no text at all
        """
        if not html or not html.strip():
            return None

        try:
            document = Document(html, url=base_url)
            summary_html = document.summary(html_partial=True)
            title = document.short_title() or document.title()
        except (Unparseable, etree.ParserError, ValueError) as e:
            logger.warning(f"Readability could not parse document from {base_url}: {e}")
            return None

        if not summary_html or not summary_html.strip():
            return None

        try:
            summary = lxml_html.fromstring(summary_html)
        except (etree.ParserError, ValueError):
            return None

        text_content = _normalize_text(summary.text_content())
        if not text_content:
            return None

        excerpt = self._excerpt(html, summary)
        text_length = len(text_content)
        is_potentially_empty = text_length < self.min_content_length
        if is_potentially_empty:
            logger.warning(
                f"Very short article content ({text_length} chars) for URL: {base_url}"
            )

        return ExtractedContent(
            title=title or None,
            excerpt=excerpt,
            text_content=text_content,
            content=summary_html,
            is_potentially_empty=is_potentially_empty,
        )

    def _excerpt(self, html: str, summary: lxml_html.HtmlElement) -> str:
        """Use the page description, falling back to the first paragraph."""
        try:
            page = lxml_html.fromstring(html)
            descriptions = [d.strip() for d in page.xpath(DESCRIPTION_XPATH) if d.strip()]
            if descriptions:
                return descriptions[0]
        except (etree.ParserError, ValueError):
            pass

        for paragraph in summary.iter("p"):
            text = " ".join(paragraph.text_content().split())
            if text:
                return text
        return ""
