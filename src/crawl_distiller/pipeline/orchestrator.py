"""Run orchestration for incremental crawl processing.

Wires the object store, change tracker, content assembler, reconciler and
ledger together and runs one pass over the recently modified objects.
"""

import logging
from datetime import datetime, timezone

from schemas.report import RunReport
from schemas.storage import make_pair_id, split_pair_key

from crawl_distiller.aggregators.pair_grouper import classify_pairs, group_objects
from crawl_distiller.clients.protocols import ObjectFetcher, ObjectLister
from crawl_distiller.config import Settings
from crawl_distiller.pipeline.change_tracker import ChangeTracker, build_ledger_records
from crawl_distiller.pipeline.reconciler import ArticleReconciler
from crawl_distiller.store.article_store import ArticleStore
from crawl_distiller.store.database import Database
from crawl_distiller.store.ledger_store import LedgerStore
from crawl_distiller.transformers.article_assembler import ContentAssembler
from crawl_distiller.transformers.readability_extractor import Extractor, ReadabilityExtractor

logger = logging.getLogger(__name__)

BYTES_PER_MB = 1024 * 1024


class Orchestrator:
    """End-to-end processing of one lookback window.

    Attributes:
        settings: Run configuration
        lister: Object-store listing capability
        fetcher: Object-store read capability
        articles: Article table access
        ledger: Processing ledger access
        assembler: Builds article candidates from fetched files
        reconciler: Filters and persists new articles
    """

    def __init__(
        self,
        settings: Settings,
        lister: ObjectLister,
        fetcher: ObjectFetcher,
        database: Database,
        extractor: Extractor | None = None,
    ):
        self.settings = settings
        self.lister = lister
        self.fetcher = fetcher
        self.articles = ArticleStore(database)
        self.ledger = LedgerStore(database)
        self.assembler = ContentAssembler(
            extractor or ReadabilityExtractor(settings.min_content_length),
            min_content_length=settings.min_content_length,
            placeholder_url=settings.placeholder_url,
        )
        self.reconciler = ArticleReconciler(self.articles)

    def process(
        self,
        lookback_hours: float = 1,
        exhaustive_listing: bool = False,
        persist: bool = True,
    ) -> RunReport:
        """Process objects modified within the last ``lookback_hours``.

        Per-object and per-pair problems are collected in the report. Store
        failures propagate, and a failed article save aborts the run before
        the ledger is written.

        Args:
            lookback_hours: Listing window
            exhaustive_listing: Follow continuation tokens instead of reading
                only the first listing page
            persist: When False, nothing is written and no existence check
                is made; every candidate is reported as new

        Returns:
            RunReport for this run

        Raises:
            ClientError: If the listing fails
            StoreError: If the ledger cannot be read or written
            PersistenceError: If the article batch cannot be saved
        """
        started_at = datetime.now(timezone.utc)
        report = RunReport(
            started_at=started_at,
            lookback_hours=lookback_hours,
            persisted=persist,
        )
        settings = self.settings

        logger.info(f"Processing files modified in the last {lookback_hours} hours")
        processed_paths = self.ledger.load_processed_paths(
            include_failed=not settings.retry_failed
        )

        objects = self.lister.list_recent(lookback_hours, exhaustive=exhaustive_listing)
        report.objects_listed = len(objects)
        logger.debug(f"Listed {len(objects)} candidate files")

        report.pairs = classify_pairs(
            group_objects(objects), settings.html_filename, settings.metadata_filename
        )
        logger.info(f"Grouped files into {len(report.pairs)} file pairs")

        tracker = ChangeTracker(
            processed_paths,
            html_filename=settings.html_filename,
            metadata_filename=settings.metadata_filename,
            fetch_workers=settings.fetch_workers,
        )
        batch = tracker.fetch_changed(objects, self.fetcher)
        report.skipped_count = batch.skipped_count
        report.fetched_count = len(batch.fetched)
        report.processing_results = batch.results

        assembly = self.assembler.assemble(batch.fetched)
        report.invalid_metadata = assembly.invalid_metadata
        report.failed_extractions = assembly.failed_extractions
        logger.info(f"Assembled {len(assembly.candidates)} articles from fetched files")

        if persist:
            reconciliation = self.reconciler.partition(assembly.candidates)
            report.new_articles = reconciliation.new
            report.skipped_articles = reconciliation.skipped
            report.article_save = self.reconciler.persist(reconciliation)
        else:
            report.new_articles = list(assembly.candidates)
            logger.info(f"Dry run: {len(report.new_articles)} articles not saved")

        touched = {
            make_pair_id(split[0], split[1])
            for split in map(split_pair_key, batch.processed)
            if split is not None
        }
        existing = self.ledger.get_records(touched) if touched else {}
        records = build_ledger_records(batch, existing=existing, processed_at=started_at)

        if persist:
            if records:
                self.ledger.save_records(records)
            else:
                logger.info("No processed files to save")
            report.ledger_records = records
        else:
            logger.info(f"Dry run: {len(records)} processed file pairs not saved")

        return report


def log_report(report: RunReport) -> None:
    """Write the run summary sections to the log."""
    results = report.processing_results
    failures = report.failures
    success_count = len(results) - len(failures)
    total_ms = sum(r.processing_time_ms for r in results.values())
    total_mb = sum(r.file_size for r in results.values()) / BYTES_PER_MB

    logger.info("=== Processing Summary ===")
    logger.info(f"Files listed: {report.objects_listed}")
    logger.info(
        f"File pairs: {len(report.pairs)} "
        f"(complete: {len(report.complete_pairs)}, broken: {len(report.broken_pairs)})"
    )
    logger.info(f"Files processed successfully: {success_count}")
    logger.info(f"Files failed: {len(failures)}")
    logger.info(f"Files skipped (unchanged): {report.skipped_count}")
    logger.info(f"Total processing time: {total_ms / 1000:.2f}s")
    logger.info(f"Total data processed: {total_mb:.2f} MB")

    if failures:
        logger.warning("Failed files:")
        for key, result in failures.items():
            logger.warning(f"  - {key}: {result.error}")

    if report.invalid_metadata:
        logger.warning(f"=== Invalid Metadata ({len(report.invalid_metadata)}) ===")
        for entry in report.invalid_metadata:
            logger.warning(f"  - {entry.pair_id}: {entry.error or entry.reason}")

    if report.failed_extractions:
        logger.warning(f"=== Failed Content Extraction ({len(report.failed_extractions)}) ===")
        for entry in report.failed_extractions:
            length = entry.parsed.content_length if entry.parsed else 0
            logger.warning(
                f"  - {entry.pair_id}: url={entry.url or 'n/a'}, "
                f"html={entry.html_length} chars, text={length} chars"
            )

    if report.broken_pairs:
        logger.warning(f"=== Broken Links ({len(report.broken_pairs)}) ===")
        for pair in report.broken_pairs:
            logger.warning(f"  - {pair.pair_id}: files={', '.join(pair.filenames)}")

    action = "saved" if report.persisted else "found (not saved)"
    logger.info(f"New articles {action}: {len(report.new_articles)}")
    if report.skipped_articles:
        logger.info(f"Articles already stored: {len(report.skipped_articles)}")
    if report.persisted:
        logger.info(f"Processed file pairs recorded: {len(report.ledger_records)}")
