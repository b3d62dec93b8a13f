"""Tests for at-most-once article reconciliation."""

from unittest.mock import MagicMock

from schemas.report import SaveResult

from crawl_distiller.pipeline import ArticleReconciler, Reconciliation
from crawl_distiller.store import ArticleStore

from test_article_store import make_article


class TestPartition:
    """Tests for ArticleReconciler.partition."""

    def test_splits_new_and_existing(self, database):
        """Stored identities are skipped and the rest are new."""
        store = ArticleStore(database)
        store.save_articles([make_article("ex.com/h1")])

        reconciliation = ArticleReconciler(store).partition(
            [make_article("ex.com/h1"), make_article("ex.com/h2")]
        )

        assert [a.pair_id for a in reconciliation.new] == ["ex.com/h2"]
        assert [a.pair_id for a in reconciliation.skipped] == ["ex.com/h1"]

    def test_single_existence_query(self):
        """All candidates are checked with one lookup."""
        store = MagicMock()
        store.existing_ids.return_value = set()

        ArticleReconciler(store).partition(
            [make_article("ex.com/h1"), make_article("ex.com/h2"), make_article("ex.com/h3")]
        )

        store.existing_ids.assert_called_once()
        assert list(store.existing_ids.call_args.args[0]) == ["ex.com/h1", "ex.com/h2", "ex.com/h3"]

    def test_empty_candidates_skip_lookup(self):
        """No candidates means no query."""
        store = MagicMock()

        reconciliation = ArticleReconciler(store).partition([])

        assert reconciliation == Reconciliation()
        store.existing_ids.assert_not_called()

    def test_duplicate_candidates_written_once(self):
        """A repeated identity in one batch is only submitted once."""
        store = MagicMock()
        store.existing_ids.return_value = set()

        reconciliation = ArticleReconciler(store).partition(
            [make_article("ex.com/h1"), make_article("ex.com/h1")]
        )

        assert len(reconciliation.new) == 1
        assert len(reconciliation.skipped) == 1


class TestPersist:
    """Tests for ArticleReconciler.persist."""

    def test_saves_only_new_articles(self):
        """Skipped candidates are never submitted for write."""
        store = MagicMock()
        store.save_articles.return_value = SaveResult(inserted=1)
        reconciliation = Reconciliation(
            new=[make_article("ex.com/h2")], skipped=[make_article("ex.com/h1")]
        )

        result = ArticleReconciler(store).persist(reconciliation)

        store.save_articles.assert_called_once_with(reconciliation.new)
        assert result.inserted == 1

    def test_persisted_articles_are_stored(self, database):
        """New articles end up in the store."""
        store = ArticleStore(database)
        reconciler = ArticleReconciler(store)

        reconciler.persist(reconciler.partition([make_article("ex.com/h1")]))

        assert store.existing_ids(["ex.com/h1"]) == {"ex.com/h1"}
