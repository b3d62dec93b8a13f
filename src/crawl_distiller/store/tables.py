"""Table definitions for articles and the processing ledger.

Ledger sub-records are stored as flat ``html_*`` / ``metadata_*`` columns so
their modification dates can be filtered and aggregated directly.
"""

from dataclasses import dataclass

from sqlalchemy import (
    BigInteger,
    Boolean,
    Column,
    DateTime,
    Integer,
    MetaData,
    String,
    Table,
    Text,
)

SUB_RECORDS = ("html", "metadata")


@dataclass
class Tables:
    metadata: MetaData
    articles: Table
    ledger: Table


def _file_columns(prefix: str) -> list[Column]:
    return [
        Column(f"{prefix}_path", Text, nullable=True),
        Column(f"{prefix}_last_modified", String(40), nullable=True),
        Column(f"{prefix}_last_modified_date", DateTime, nullable=True, index=True),
        Column(f"{prefix}_status", String(16), nullable=True),
        Column(f"{prefix}_error", Text, nullable=True),
        Column(f"{prefix}_size_bytes", BigInteger, nullable=True),
        Column(f"{prefix}_processing_time_ms", Integer, nullable=True),
    ]


def build_tables(articles_table: str, ledger_table: str) -> Tables:
    """Define both tables on a fresh MetaData under the configured names."""
    metadata = MetaData()

    articles = Table(
        articles_table,
        metadata,
        Column("pair_id", String(512), primary_key=True),
        Column("domain", String(255), nullable=False, index=True),
        Column("content_hash", String(255), nullable=False),
        Column("title", Text, nullable=True),
        Column("excerpt", Text, nullable=False, default=""),
        Column("content", Text, nullable=False),
        Column("content_length", Integer, nullable=False),
        Column("is_potentially_empty", Boolean, nullable=False, default=False),
        Column("url", Text, nullable=False, default=""),
        Column("crawl_time", String(64), nullable=False, default=""),
        Column("crawl_datetime", DateTime, nullable=True),
        Column("depth", String(32), nullable=False, default=""),
        Column("created_at", DateTime, nullable=False),
    )

    ledger = Table(
        ledger_table,
        metadata,
        Column("pair_id", String(512), primary_key=True),
        Column("domain", String(255), nullable=False, index=True),
        Column("content_hash", String(255), nullable=False, index=True),
        *_file_columns("html"),
        *_file_columns("metadata"),
        Column("has_both", Boolean, nullable=False, default=False, index=True),
        Column("status", String(16), nullable=False, index=True),
        Column("processed_at", DateTime, nullable=False, index=True),
    )

    return Tables(metadata=metadata, articles=articles, ledger=ledger)
