"""Incremental extraction of crawled pages into article records."""

__version__ = "0.1.0"
