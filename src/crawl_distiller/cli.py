"""Command-line interface for crawl-distiller."""

import argparse
import logging
import sys
from datetime import datetime

from pydantic import ValidationError

from schemas.ledger import LedgerQuery

from crawl_distiller.clients import ClientError, S3Client
from crawl_distiller.config import Settings
from crawl_distiller.pipeline.orchestrator import Orchestrator, log_report
from crawl_distiller.pipeline.scheduler import PeriodicRunner
from crawl_distiller.store import Database, LedgerStore, StoreError

DEFAULT_LOOKBACK_HOURS = 1.0
DEFAULT_INTERVAL_MINUTES = 60.0


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def run_process(settings: Settings, hours: float, all_pages: bool, persist: bool) -> None:
    """Run one processing pass with freshly scoped store connections.

    Raises:
        ClientError: If the object store cannot be listed
        StoreError: If the document store fails
    """
    with S3Client(settings.s3_config()) as s3, Database.from_settings(settings) as database:
        orchestrator = Orchestrator(settings, lister=s3, fetcher=s3, database=database)
        report = orchestrator.process(
            lookback_hours=hours,
            exhaustive_listing=all_pages,
            persist=persist,
        )
    log_report(report)


def process(args: argparse.Namespace) -> int:
    """Execute the process command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.hours <= 0:
        logger.error("--hours must be positive")
        return 1

    try:
        run_process(Settings(), args.hours, args.all_pages, not args.no_save)
        return 0

    except (ClientError, StoreError) as e:
        logger.error(f"Processing failed: {e}")
        return 1


def summary(args: argparse.Namespace) -> int:
    """Execute the summary command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        with Database.from_settings(Settings()) as database:
            result = LedgerStore(database).summarize()

    except StoreError as e:
        logger.error(f"Failed to summarize processed files: {e}")
        return 1

    totals = result.totals
    logger.info("=== Processed Files Summary ===")
    logger.info(f"Total file pairs: {totals.total_pairs}")
    logger.info(
        f"  Success: {totals.success_pairs}, Failed: {totals.failed_pairs}, "
        f"Incomplete: {totals.incomplete_pairs}"
    )
    logger.info(
        f"  Complete: {totals.complete_pairs}, HTML only: {totals.html_only_pairs}, "
        f"Metadata only: {totals.metadata_only_pairs}"
    )
    logger.info(
        f"  Processing time: html {totals.total_html_processing_time_ms} ms, "
        f"metadata {totals.total_metadata_processing_time_ms} ms"
    )
    if totals.min_processed_at is not None:
        logger.info(f"  Processed between {totals.min_processed_at} and {totals.max_processed_at}")

    for domain in result.domains:
        logger.info(
            f"{domain.domain}: {domain.total_pairs} pairs "
            f"(success {domain.success_pairs}, failed {domain.failed_pairs}, "
            f"incomplete {domain.incomplete_pairs})"
        )

    return 0


def query(args: argparse.Namespace) -> int:
    """Execute the query command, printing matching ledger rows as JSON.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        ledger_query = LedgerQuery(
            pair_id=args.pair_id,
            domain=args.domain,
            hash=args.hash,
            status=args.status,
            has_both=args.has_both,
            processed_after=args.processed_after,
            processed_before=args.processed_before,
            html_modified_after=args.html_modified_after,
            html_modified_before=args.html_modified_before,
            metadata_modified_after=args.metadata_modified_after,
            metadata_modified_before=args.metadata_modified_before,
            limit=args.limit,
            skip=args.skip,
        )
    except ValidationError as e:
        logger.error(f"Invalid query: {e}")
        return 1

    try:
        with Database.from_settings(Settings()) as database:
            page = LedgerStore(database).query(ledger_query)

    except StoreError as e:
        logger.error(f"Failed to query processed files: {e}")
        return 1

    print(page.model_dump_json(indent=2))
    return 0


def schedule(args: argparse.Namespace) -> int:
    """Execute the schedule command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    if args.interval <= 0 or args.hours <= 0:
        logger.error("--interval and --hours must be positive")
        return 1

    settings = Settings()

    def tick() -> None:
        run_process(settings, args.hours, args.all_pages, not args.no_save)

    runner = PeriodicRunner(tick, interval_minutes=args.interval)
    runner.run_forever()
    return 0


def _add_run_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--hours",
        type=float,
        default=DEFAULT_LOOKBACK_HOURS,
        help=f"Process files modified in the last N hours (default: {DEFAULT_LOOKBACK_HOURS:g})",
    )
    parser.add_argument(
        "--all-pages",
        action="store_true",
        help="List every page of the bucket instead of the first page only",
    )
    parser.add_argument(
        "--no-save",
        action="store_true",
        help="Dry run: do not write articles or processed-file records",
    )


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="crawl-distiller",
        description="Extract articles from crawled pages stored in S3",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    process_parser = subparsers.add_parser(
        "process",
        help="Process recently crawled pages once",
        description="List recently modified crawl output, fetch changed files, extract articles and record what was processed.",
    )
    _add_run_arguments(process_parser)
    process_parser.set_defaults(func=process)

    summary_parser = subparsers.add_parser(
        "summary",
        help="Summarize processed files per domain",
        description="Print per-domain and overall counts from the processed-files ledger.",
    )
    summary_parser.set_defaults(func=summary)

    query_parser = subparsers.add_parser(
        "query",
        help="Query processed file pairs",
        description="Find processed file pairs in the ledger and print them as JSON.",
    )
    query_parser.add_argument("--pair-id", help="Exact pair identity (domain/hash)")
    query_parser.add_argument("--domain", help="Crawled domain")
    query_parser.add_argument("--hash", help="Content hash")
    query_parser.add_argument(
        "--status",
        choices=["success", "failed", "incomplete", "unknown"],
        help="Overall pair status",
    )
    both_group = query_parser.add_mutually_exclusive_group()
    both_group.add_argument(
        "--has-both",
        dest="has_both",
        action="store_const",
        const=True,
        help="Only pairs with both HTML and metadata",
    )
    both_group.add_argument(
        "--missing-pair",
        dest="has_both",
        action="store_const",
        const=False,
        help="Only pairs missing the HTML or the metadata",
    )
    for name in ("processed", "html-modified", "metadata-modified"):
        for bound in ("after", "before"):
            query_parser.add_argument(
                f"--{name}-{bound}",
                type=datetime.fromisoformat,
                help=f"Only pairs {name.replace('-', ' ')} {bound} this time (ISO format)",
            )
    query_parser.add_argument(
        "--limit",
        type=int,
        default=100,
        help="Maximum number of pairs to return (default: 100)",
    )
    query_parser.add_argument(
        "--skip",
        type=int,
        default=0,
        help="Number of pairs to skip (default: 0)",
    )
    query_parser.set_defaults(func=query)

    schedule_parser = subparsers.add_parser(
        "schedule",
        help="Process recently crawled pages periodically",
        description="Run processing immediately and then every interval until interrupted.",
    )
    schedule_parser.add_argument(
        "--interval",
        type=float,
        default=DEFAULT_INTERVAL_MINUTES,
        help=f"Minutes between runs (default: {DEFAULT_INTERVAL_MINUTES:g})",
    )
    _add_run_arguments(schedule_parser)
    schedule_parser.set_defaults(func=schedule)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
