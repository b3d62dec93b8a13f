"""Persistence, lookup and aggregation of the processing ledger."""

import logging
from collections.abc import Iterable
from typing import Any

from sqlalchemy import and_, case, func, select
from sqlalchemy.exc import SQLAlchemyError

from schemas.ledger import (
    DomainStats,
    FileRecord,
    LedgerPage,
    LedgerQuery,
    LedgerSummary,
    ProcessedFileRecord,
    TotalStats,
)
from schemas.report import SaveResult
from schemas.timestamps import to_storage

from .database import Database
from .exceptions import PersistenceError, StoreError
from .tables import SUB_RECORDS

logger = logging.getLogger(__name__)

FILE_FIELDS = (
    "path",
    "last_modified",
    "last_modified_date",
    "status",
    "error",
    "size_bytes",
    "processing_time_ms",
)


class LedgerStore:
    """Reads and writes ledger rows, one per pair identity.

    Example:
        with Database(url) as db:
            ledger = LedgerStore(db)
            processed = ledger.load_processed_paths()
            page = ledger.query(LedgerQuery(domain="example.com", limit=10))
    """

    def __init__(self, database: Database):
        self.database = database
        self.table = database.tables.ledger

    def load_processed_paths(self, include_failed: bool = False) -> dict[str, str]:
        """Flatten every ledger sub-record into ``path -> last_modified``.

        Args:
            include_failed: Also include sub-records whose fetch failed. When
                False, failed objects are fetched again on the next run even
                if their timestamp is unchanged.

        Returns:
            Mapping of object key to its recorded last-modified string
        """
        t = self.table
        processed: dict[str, str] = {}
        try:
            with self.database.connect() as conn:
                rows = conn.execute(
                    select(
                        t.c.html_path,
                        t.c.html_last_modified,
                        t.c.html_status,
                        t.c.metadata_path,
                        t.c.metadata_last_modified,
                        t.c.metadata_status,
                    )
                ).mappings()
                pair_count = 0
                for row in rows:
                    pair_count += 1
                    for prefix in SUB_RECORDS:
                        path = row[f"{prefix}_path"]
                        last_modified = row[f"{prefix}_last_modified"]
                        if not path or not last_modified:
                            continue
                        if not include_failed and row[f"{prefix}_status"] == "failed":
                            continue
                        processed[path] = last_modified
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load processed files: {e}") from e

        logger.info(
            f"Loaded {len(processed)} previously processed files from database "
            f"({pair_count} file pairs)"
        )
        return processed

    def get(self, pair_id: str) -> ProcessedFileRecord | None:
        return self.get_records([pair_id]).get(pair_id)

    def get_records(self, pair_ids: Iterable[str]) -> dict[str, ProcessedFileRecord]:
        """Load ledger rows for the given identities."""
        ids = list(dict.fromkeys(pair_ids))
        if not ids:
            return {}

        stmt = select(self.table).where(self.table.c.pair_id.in_(ids))
        try:
            with self.database.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to load ledger rows: {e}") from e

        return {row["pair_id"]: self._from_row(row) for row in rows}

    def save_records(self, records: list[ProcessedFileRecord]) -> SaveResult:
        """Upsert ledger rows by pair_id in a single transaction.

        Raises:
            PersistenceError: If any write in the batch fails
        """
        if not records:
            return SaveResult()

        rows = {r.pair_id: self._to_row(r) for r in records}
        t = self.table

        try:
            with self.database.begin() as conn:
                existing = set(
                    conn.execute(select(t.c.pair_id).where(t.c.pair_id.in_(list(rows)))).scalars()
                )
                conn.execute(self.database.upsert_statement(t, "pair_id"), list(rows.values()))
        except SQLAlchemyError as e:
            raise PersistenceError(
                f"Failed to save {len(rows)} processed file pairs: {e}", batch_size=len(rows)
            ) from e

        result = SaveResult(inserted=len(rows) - len(existing), updated=len(existing))
        logger.info(
            f"Saved {len(rows)} processed file pairs to database "
            f"(Inserted: {result.inserted}, Updated: {result.updated})"
        )
        return result

    def query(self, query: LedgerQuery | None = None) -> LedgerPage:
        """Find ledger rows matching ``query``, newest ``processed_at`` first."""
        query = query or LedgerQuery()
        t = self.table
        conditions = self._conditions(query)

        stmt = (
            select(t)
            .where(*conditions)
            .order_by(t.c.processed_at.desc(), t.c.pair_id)
            .offset(query.skip)
            .limit(query.limit)
        )
        count_stmt = select(func.count()).select_from(t).where(*conditions)

        try:
            with self.database.connect() as conn:
                rows = conn.execute(stmt).mappings().all()
                total = conn.execute(count_stmt).scalar_one()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to query processed files: {e}") from e

        logger.info(f"Found {len(rows)} processed file pairs matching query (total: {total})")
        return LedgerPage(
            pairs=[self._from_row(row) for row in rows],
            total=total,
            limit=query.limit,
            skip=query.skip,
        )

    def summarize(self) -> LedgerSummary:
        """Aggregate ledger rows per domain and overall."""
        t = self.table
        stat_columns = self._stat_columns()
        domain_stmt = select(t.c.domain, *stat_columns).group_by(t.c.domain).order_by(t.c.domain)
        totals_stmt = select(
            *stat_columns,
            func.min(t.c.processed_at).label("min_processed_at"),
            func.max(t.c.processed_at).label("max_processed_at"),
            func.min(t.c.html_last_modified_date).label("min_html_modified"),
            func.max(t.c.html_last_modified_date).label("max_html_modified"),
            func.min(t.c.metadata_last_modified_date).label("min_metadata_modified"),
            func.max(t.c.metadata_last_modified_date).label("max_metadata_modified"),
        )

        try:
            with self.database.connect() as conn:
                domain_rows = conn.execute(domain_stmt).mappings().all()
                totals_row = conn.execute(totals_stmt).mappings().one()
        except SQLAlchemyError as e:
            raise StoreError(f"Failed to summarize processed files: {e}") from e

        return LedgerSummary(
            domains=[DomainStats(**self._stats(row), domain=row["domain"]) for row in domain_rows],
            totals=TotalStats(
                **self._stats(totals_row),
                min_processed_at=totals_row["min_processed_at"],
                max_processed_at=totals_row["max_processed_at"],
                min_html_modified=totals_row["min_html_modified"],
                max_html_modified=totals_row["max_html_modified"],
                min_metadata_modified=totals_row["min_metadata_modified"],
                max_metadata_modified=totals_row["max_metadata_modified"],
            ),
        )

    def _conditions(self, query: LedgerQuery) -> list:
        t = self.table
        conditions: list = []

        if query.pair_id:
            conditions.append(t.c.pair_id == query.pair_id)
        if query.domain:
            conditions.append(t.c.domain == query.domain)
        if query.hash:
            conditions.append(t.c.content_hash == query.hash)
        if query.status:
            conditions.append(t.c.status == query.status)
        if query.has_both is not None:
            conditions.append(t.c.has_both.is_(query.has_both))

        ranges = [
            (t.c.processed_at, query.processed_after, query.processed_before),
            (t.c.html_last_modified_date, query.html_modified_after, query.html_modified_before),
            (
                t.c.metadata_last_modified_date,
                query.metadata_modified_after,
                query.metadata_modified_before,
            ),
        ]
        for column, after, before in ranges:
            if after is not None:
                conditions.append(column >= to_storage(after))
            if before is not None:
                conditions.append(column <= to_storage(before))

        return conditions

    def _stat_columns(self) -> list:
        t = self.table
        html_present = t.c.html_path.is_not(None)
        metadata_present = t.c.metadata_path.is_not(None)

        def count_where(condition, label: str):
            return func.sum(case((condition, 1), else_=0)).label(label)

        return [
            func.count().label("total_pairs"),
            count_where(t.c.status == "success", "success_pairs"),
            count_where(t.c.status == "failed", "failed_pairs"),
            count_where(t.c.status == "incomplete", "incomplete_pairs"),
            count_where(t.c.has_both.is_(True), "complete_pairs"),
            count_where(and_(html_present, t.c.metadata_path.is_(None)), "html_only_pairs"),
            count_where(and_(t.c.html_path.is_(None), metadata_present), "metadata_only_pairs"),
            func.sum(t.c.html_processing_time_ms).label("total_html_processing_time_ms"),
            func.sum(t.c.metadata_processing_time_ms).label("total_metadata_processing_time_ms"),
        ]

    @staticmethod
    def _stats(row) -> dict[str, int]:
        keys = (
            "total_pairs",
            "success_pairs",
            "failed_pairs",
            "incomplete_pairs",
            "complete_pairs",
            "html_only_pairs",
            "metadata_only_pairs",
            "total_html_processing_time_ms",
            "total_metadata_processing_time_ms",
        )
        return {key: int(row[key] or 0) for key in keys}

    @staticmethod
    def _to_row(record: ProcessedFileRecord) -> dict[str, Any]:
        row: dict[str, Any] = {
            "pair_id": record.pair_id,
            "domain": record.domain,
            "content_hash": record.content_hash,
            "has_both": record.has_both,
            "status": record.status,
            "processed_at": to_storage(record.processed_at),
        }
        for prefix in SUB_RECORDS:
            sub: FileRecord | None = getattr(record, prefix)
            for field in FILE_FIELDS:
                value = getattr(sub, field) if sub is not None else None
                if field == "last_modified_date":
                    value = to_storage(value)
                row[f"{prefix}_{field}"] = value
        return row

    @staticmethod
    def _from_row(row) -> ProcessedFileRecord:
        subs: dict[str, FileRecord | None] = {}
        for prefix in SUB_RECORDS:
            if row[f"{prefix}_path"] is None:
                subs[prefix] = None
                continue
            subs[prefix] = FileRecord(
                **{field: row[f"{prefix}_{field}"] for field in FILE_FIELDS}
            )
        return ProcessedFileRecord(
            pair_id=row["pair_id"],
            domain=row["domain"],
            content_hash=row["content_hash"],
            html=subs["html"],
            metadata=subs["metadata"],
            processed_at=row["processed_at"],
        )
