"""Tests for article assembly and readable-content extraction."""

import json

import pytest

from schemas.processing import FetchedFile

from crawl_distiller.transformers import ContentAssembler, ReadabilityExtractor

from conftest import ARTICLE_BODY, FIRST_RUN, FakeExtractor

HTML_KEY = "/ex.com/h1/page.html"
METADATA_KEY = "/ex.com/h1/metadata.json"


def html_file(content: str, key: str = HTML_KEY) -> FetchedFile:
    return FetchedFile(key=key, file_type="html", last_modified=FIRST_RUN, content=content)


def metadata_file(metadata, key: str = METADATA_KEY) -> FetchedFile:
    content = metadata if isinstance(metadata, str) else json.dumps(metadata)
    return FetchedFile(key=key, file_type="metadata", last_modified=FIRST_RUN, content=content)


@pytest.fixture
def assembler(extractor):
    return ContentAssembler(extractor, min_content_length=100)


class TestContentAssembler:
    """Tests for ContentAssembler.assemble."""

    def test_builds_article_from_complete_pair(self, assembler, article_html, article_metadata):
        """HTML plus valid metadata yields one candidate and no diagnostics."""
        result = assembler.assemble([html_file(article_html), metadata_file(article_metadata)])

        assert len(result.candidates) == 1
        article = result.candidates[0]
        assert article.pair_id == "ex.com/h1"
        assert article.domain == "ex.com"
        assert article.content_hash == "h1"
        assert article.title == "Transit plan approved"
        assert article.url == "https://ex.com/a"
        assert article.crawl_time == "2024-01-01"
        assert article.depth == "1"
        assert article.content_length == len(article.content)
        assert article.content_length == len(" ".join(ARTICLE_BODY.split()))
        assert article.is_potentially_empty is False
        assert result.invalid_metadata == []
        assert result.failed_extractions == []

    def test_metadata_processed_before_html(self, assembler, extractor, article_html, article_metadata):
        """The metadata URL is the base URL regardless of file order."""
        assembler.assemble([html_file(article_html), metadata_file(article_metadata)])

        assert extractor.calls[0][1] == "https://ex.com/a"

    def test_placeholder_url_without_valid_metadata(self, assembler, extractor, article_html):
        """HTML without usable metadata is parsed against the placeholder URL."""
        result = assembler.assemble([html_file(article_html)])

        assert extractor.calls[0][1] == "https://example.com"
        assert result.candidates == []

    def test_invalid_json_is_reported(self, assembler, article_html):
        """Unparseable metadata is reported and no article is built."""
        result = assembler.assemble([html_file(article_html), metadata_file("{broken")])

        assert len(result.invalid_metadata) == 1
        entry = result.invalid_metadata[0]
        assert entry.pair_id == "ex.com/h1"
        assert entry.error == "Invalid JSON"
        assert result.candidates == []
        assert result.contents["ex.com/h1"].metadata == {"error": "Invalid JSON"}

    def test_invalid_url_is_reported_but_article_kept(self, assembler, extractor, article_html):
        """A relative URL is reported while essential metadata still builds an article."""
        metadata = {"url": "/relative", "crawl_time": "2024-01-01"}

        result = assembler.assemble([html_file(article_html), metadata_file(metadata)])

        assert [e.pair_id for e in result.invalid_metadata] == ["ex.com/h1"]
        assert result.invalid_metadata[0].reason.startswith("url is not an absolute URL")
        assert extractor.calls[0][1] == "https://example.com"
        assert len(result.candidates) == 1
        assert result.candidates[0].url == "/relative"

    def test_missing_essential_metadata_excludes_article(self, assembler, article_html):
        """Metadata without url, crawl_time or depth cannot build an article."""
        result = assembler.assemble([html_file(article_html), metadata_file({"title": "x"})])

        assert result.candidates == []

    def test_null_extraction_is_reported(self, assembler, article_metadata):
        """HTML that yields nothing is a failed extraction with no preview."""
        result = assembler.assemble([html_file("<html></html>"), metadata_file(article_metadata)])

        assert result.candidates == []
        assert len(result.failed_extractions) == 1
        entry = result.failed_extractions[0]
        assert entry.url == "https://ex.com/a"
        assert entry.html_length == len("<html></html>")
        assert entry.parsed is None

    def test_short_extraction_is_reported_and_flagged(self, assembler, article_metadata):
        """Too-short text is reported and the article is flagged potentially empty."""
        html = "<html><head><title>Brief</title></head><body><p>Short note.</p></body></html>"

        result = assembler.assemble([html_file(html), metadata_file(article_metadata)])

        assert len(result.failed_extractions) == 1
        preview = result.failed_extractions[0].parsed
        assert preview.title == "Brief"
        assert preview.content_length == len("Short note.")
        assert len(result.candidates) == 1
        assert result.candidates[0].is_potentially_empty is True

    def test_metadata_only_pair_builds_nothing(self, assembler, article_metadata):
        """Metadata alone never becomes an article."""
        result = assembler.assemble([metadata_file(article_metadata)])

        assert result.candidates == []
        assert result.failed_extractions == []

    def test_pairs_are_kept_separate(self, assembler, article_html, article_metadata):
        """Files of different pairs are assembled independently."""
        other_metadata = {"url": "https://other.org/b", "depth": 3}
        result = assembler.assemble([
            html_file(article_html),
            metadata_file(article_metadata),
            html_file(article_html, key="/other.org/h9/page.html"),
            metadata_file(other_metadata, key="/other.org/h9/metadata.json"),
        ])

        by_id = {a.pair_id: a for a in result.candidates}
        assert set(by_id) == {"ex.com/h1", "other.org/h9"}
        assert by_id["other.org/h9"].url == "https://other.org/b"
        assert by_id["other.org/h9"].crawl_time == ""

    def test_short_keys_are_ignored(self, assembler):
        """Files whose keys cannot be split into a pair are skipped."""
        result = assembler.assemble([html_file("<p>x</p>", key="page.html")])

        assert result.contents == {}

    def test_nested_keys_are_ignored(self, assembler):
        """Files nested below a pair directory do not join that pair."""
        result = assembler.assemble([html_file("<p>x</p>", key="/ex.com/h1/archive/page.html")])

        assert result.contents == {}


class TestReadabilityExtractor:
    """Tests for ReadabilityExtractor."""

    def test_extracts_article_text(self, article_html):
        """The article body and title are extracted."""
        extracted = ReadabilityExtractor(min_content_length=100).parse(
            article_html, "https://ex.com/a"
        )

        assert extracted is not None
        assert "city council approved the new transit plan" in extracted.text_content
        assert extracted.text_length > 100
        assert extracted.title == "Transit plan approved"
        assert extracted.is_potentially_empty is False

    def test_uses_meta_description_as_excerpt(self):
        """The page description becomes the excerpt."""
        html = (
            "<html><head><title>Story</title>"
            '<meta name="description" content="A short summary."></head>'
            f"<body><article><p>{ARTICLE_BODY}</p></article></body></html>"
        )

        extracted = ReadabilityExtractor().parse(html, "https://ex.com/a")

        assert extracted.excerpt == "A short summary."

    def test_empty_document_returns_none(self):
        """Blank HTML yields no result."""
        assert ReadabilityExtractor().parse("", "https://ex.com/a") is None
        assert ReadabilityExtractor().parse("   ", "https://ex.com/a") is None

    def test_short_content_is_flagged(self):
        """Text under the minimum length is flagged potentially empty."""
        html = "<html><body><p>Only a few words here.</p></body></html>"

        extracted = ReadabilityExtractor(min_content_length=100).parse(html, "https://ex.com/a")

        if extracted is not None:
            assert extracted.is_potentially_empty is True
