"""At-most-once article writes keyed by pair identity."""

import logging

from pydantic import BaseModel

from schemas.article import Article
from schemas.report import SaveResult

from crawl_distiller.store.article_store import ArticleStore

logger = logging.getLogger(__name__)


class Reconciliation(BaseModel):
    """Candidates split by whether their identity is already stored."""

    new: list[Article] = []
    skipped: list[Article] = []


class ArticleReconciler:
    """Filters out already-stored articles and persists the rest.

    Skipped candidates are never re-submitted for write, even though their
    content was recomputed in this run.
    """

    def __init__(self, article_store: ArticleStore):
        self.article_store = article_store

    def partition(self, candidates: list[Article]) -> Reconciliation:
        """Split candidates into new and skipped with one existence query."""
        if not candidates:
            return Reconciliation()

        existing = self.article_store.existing_ids(a.pair_id for a in candidates)
        reconciliation = Reconciliation()
        seen: set[str] = set()
        for article in candidates:
            if article.pair_id in existing or article.pair_id in seen:
                reconciliation.skipped.append(article)
            else:
                seen.add(article.pair_id)
                reconciliation.new.append(article)

        logger.info(
            f"Found {len(reconciliation.new)} new articles to save, "
            f"{len(reconciliation.skipped)} already exist"
        )
        return reconciliation

    def persist(self, reconciliation: Reconciliation) -> SaveResult:
        """Write the new articles as one batch.

        Raises:
            PersistenceError: If the batch could not be written
        """
        return self.article_store.save_articles(reconciliation.new)
