"""Database engine lifecycle for the document store."""

import logging
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from sqlalchemy import Connection, Engine, Insert, Table, create_engine
from sqlalchemy.dialects import mysql, postgresql, sqlite
from sqlalchemy.engine import make_url
from sqlalchemy.exc import SQLAlchemyError

from crawl_distiller.config import Settings

from .exceptions import StoreConnectionError, StoreError
from .tables import Tables, build_tables

logger = logging.getLogger(__name__)


class Database:
    """Scoped access to the article and ledger tables.

    The engine is created on ``open()`` (or on entering the context
    manager) and disposed on ``close()``, so every run acquires and releases
    its own connections.

    Example:
        with Database("sqlite:///crawled_news.db") as db:
            with db.begin() as conn:
                conn.execute(...)
    """

    def __init__(
        self,
        url: str,
        articles_table: str = "crawled_articles",
        ledger_table: str = "crawled_processed_files",
        echo: bool = False,
    ):
        self.url = url
        self.echo = echo
        self.tables: Tables = build_tables(articles_table, ledger_table)
        self._engine: Engine | None = None

    @classmethod
    def from_settings(cls, settings: Settings) -> "Database":
        return cls(
            settings.database_url,
            articles_table=settings.articles_table,
            ledger_table=settings.ledger_table,
        )

    @property
    def engine(self) -> Engine:
        if self._engine is None:
            raise StoreConnectionError("database is not open")
        return self._engine

    def open(self) -> "Database":
        """Create the engine and make sure both tables exist.

        Raises:
            StoreConnectionError: If the database cannot be reached
        """
        if self._engine is not None:
            return self

        logger.debug(f"Connecting to database at {self._safe_url()}")
        try:
            engine = create_engine(self.url, echo=self.echo)
            self.tables.metadata.create_all(engine)
        except SQLAlchemyError as e:
            raise StoreConnectionError(f"Could not open database {self._safe_url()}: {e}") from e

        self._engine = engine
        return self

    def close(self) -> None:
        """Dispose of the engine and its connection pool."""
        if self._engine is not None:
            self._engine.dispose()
            self._engine = None

    def __enter__(self) -> "Database":
        return self.open()

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False

    @contextmanager
    def connect(self) -> Iterator[Connection]:
        """Connection for reads."""
        with self.engine.connect() as conn:
            yield conn

    @contextmanager
    def begin(self) -> Iterator[Connection]:
        """Connection inside a transaction, committed on success."""
        with self.engine.begin() as conn:
            yield conn

    def upsert_statement(self, table: Table, key: str, preserve: Iterable[str] = ()) -> Insert:
        """Build an INSERT that updates the row when ``key`` already exists.

        Columns named in ``preserve`` keep their stored value on conflict.

        Raises:
            StoreError: If the database dialect has no native upsert
        """
        keep = {key, *preserve}
        columns = [c.name for c in table.columns if c.name not in keep]
        dialect = self.engine.dialect.name

        if dialect == "sqlite":
            stmt = sqlite.insert(table)
        elif dialect == "postgresql":
            stmt = postgresql.insert(table)
        elif dialect in ("mysql", "mariadb"):
            stmt = mysql.insert(table)
            return stmt.on_duplicate_key_update({c: stmt.inserted[c] for c in columns})
        else:
            raise StoreError(f"Upsert is not supported for the {dialect} dialect")

        return stmt.on_conflict_do_update(
            index_elements=[key], set_={c: stmt.excluded[c] for c in columns}
        )

    def _safe_url(self) -> str:
        try:
            return make_url(self.url).render_as_string(hide_password=True)
        except SQLAlchemyError:
            return "<invalid url>"
