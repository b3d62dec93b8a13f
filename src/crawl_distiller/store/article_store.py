"""Persistence of article records keyed by pair identity."""

import logging
from collections.abc import Iterable
from datetime import datetime, timezone

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from schemas.article import Article
from schemas.report import SaveResult
from schemas.timestamps import to_storage

from .database import Database
from .exceptions import PersistenceError, StoreError

logger = logging.getLogger(__name__)


class ArticleStore:
    """Reads and writes the articles table.

    Example:
        with Database(url) as db:
            store = ArticleStore(db)
            existing = store.existing_ids(["example.com/abc123"])
    """

    def __init__(self, database: Database):
        self.database = database
        self.table = database.tables.articles

    def existing_ids(self, pair_ids: Iterable[str]) -> set[str]:
        """Return the subset of ``pair_ids`` that already has an article.

        Raises:
            StoreError: If the lookup fails
        """
        ids = list(dict.fromkeys(pair_ids))
        if not ids:
            return set()

        logger.debug(f"Checking {len(ids)} articles for existing entries")
        stmt = select(self.table.c.pair_id).where(self.table.c.pair_id.in_(ids))
        try:
            with self.database.connect() as conn:
                found = set(conn.execute(stmt).scalars())
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to check existing articles: {e}") from e

        logger.info(f"Found {len(found)} articles already in the database")
        return found

    def save_articles(self, articles: list[Article]) -> SaveResult:
        """Upsert articles by pair_id in a single transaction.

        Either every article in the batch is written or none is.

        Raises:
            PersistenceError: If any write in the batch fails
        """
        if not articles:
            logger.info("No articles to save")
            return SaveResult()

        now = to_storage(datetime.now(timezone.utc))
        rows = {a.pair_id: {**self._to_row(a), "created_at": now} for a in articles}
        t = self.table

        try:
            with self.database.begin() as conn:
                existing = set(
                    conn.execute(select(t.c.pair_id).where(t.c.pair_id.in_(list(rows)))).scalars()
                )
                stmt = self.database.upsert_statement(t, "pair_id", preserve=["created_at"])
                conn.execute(stmt, list(rows.values()))
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to save {len(rows)} articles: {e}", batch_size=len(rows)
            ) from e

        result = SaveResult(inserted=len(rows) - len(existing), updated=len(existing))
        logger.info(f"Inserted: {result.inserted}, Updated: {result.updated}")
        return result

    def get(self, pair_id: str) -> Article | None:
        stmt = select(self.table).where(self.table.c.pair_id == pair_id)
        try:
            with self.database.connect() as conn:
                row = conn.execute(stmt).mappings().first()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load article {pair_id}: {e}") from e
        return self._from_row(row) if row is not None else None

    def count(self) -> int:
        try:
            with self.database.connect() as conn:
                return conn.execute(select(func.count()).select_from(self.table)).scalar_one()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to count articles: {e}") from e

    @staticmethod
    def _to_row(article: Article) -> dict:
        row = article.model_dump()
        row["crawl_datetime"] = to_storage(article.crawl_datetime)
        return row

    @staticmethod
    def _from_row(row) -> Article:
        data = {k: v for k, v in row.items() if k != "created_at"}
        return Article.model_validate(data)
