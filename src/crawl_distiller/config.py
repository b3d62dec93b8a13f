"""Runtime configuration loaded from the environment."""

from typing import Literal

from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_HTML_FILENAME = "page.html"
DEFAULT_METADATA_FILENAME = "metadata.json"
DEFAULT_MIN_CONTENT_LENGTH = 100
DEFAULT_PLACEHOLDER_URL = "https://example.com"


class Settings(BaseSettings):
    """Settings for a crawl-distiller run.

    Values come from environment variables (case-insensitive) or a ``.env``
    file. One instance is built by the CLI and handed to each component;
    nothing reads it ambiently.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Object store
    s3_bucket: str = "crawled-pages"
    aws_region: str | None = None
    s3_endpoint_url: str | None = None
    s3_prefix: str | None = None
    list_page_size: int = 1000
    list_max_pages: int | None = None
    retry_attempts: int = 3
    retry_mode: Literal["standard", "adaptive"] = "standard"

    # Document store
    database_url: str = "sqlite:///crawled_news.db"
    articles_table: str = "crawled_articles"
    ledger_table: str = "crawled_processed_files"

    # Crawl layout
    html_filename: str = DEFAULT_HTML_FILENAME
    metadata_filename: str = DEFAULT_METADATA_FILENAME

    # Extraction
    min_content_length: int = DEFAULT_MIN_CONTENT_LENGTH
    placeholder_url: str = DEFAULT_PLACEHOLDER_URL

    # Processing
    fetch_workers: int = 1
    retry_failed: bool = True

    def s3_config(self) -> dict:
        """Config dict for ``S3Client``."""
        config: dict = {
            "bucket": self.s3_bucket,
            "max_keys": self.list_page_size,
            "retry_attempts": self.retry_attempts,
            "retry_mode": self.retry_mode,
        }
        if self.aws_region:
            config["region"] = self.aws_region
        if self.s3_endpoint_url:
            config["endpoint_url"] = self.s3_endpoint_url
        if self.s3_prefix:
            config["prefix"] = self.s3_prefix
        if self.list_max_pages:
            config["max_pages"] = self.list_max_pages
        return config
