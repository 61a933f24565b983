"""Primary-key diffing of a source and a target row set."""

from typing import Any, Iterable

import structlog

from dbsync.models.rows import Row
from dbsync.sync.models import TableDiff
from dbsync.sync.row_comparator import RowComparator

log = structlog.stdlib.get_logger()


class DiffEngine:
    """Partitions rows into insert, update, unchanged and target-only buckets."""

    def __init__(self, comparator: RowComparator | None = None):
        self._comparator: RowComparator = comparator or RowComparator()

    def diff(
        self,
        source_rows: Iterable[Row],
        target_rows: Iterable[Row],
        primary_key: str,
    ) -> TableDiff:
        """
        Diff two row sets by primary key.

        Args:
            source_rows: Rows read from the source database
            target_rows: Rows read from the target database
            primary_key: Column used to correlate rows

        Returns:
            TableDiff with the size of every bucket
        """
        source_by_key = self.index_by_key(source_rows, primary_key)
        target_by_key = self.index_by_key(target_rows, primary_key)

        # Build sets for efficient lookup
        source_keys = set(source_by_key)
        target_keys = set(target_by_key)

        insert_keys = source_keys - target_keys
        target_only_keys = target_keys - source_keys

        update_count = 0
        unchanged_count = 0
        for key in source_keys & target_keys:
            if self._comparator.rows_equal(source_by_key[key], target_by_key[key]):
                unchanged_count += 1
            else:
                update_count += 1

        table_diff = TableDiff(
            insert_count=len(insert_keys),
            update_count=update_count,
            unchanged_count=unchanged_count,
            target_only_count=len(target_only_keys),
        )

        log.info(
            "diff_computed",
            primary_key=primary_key,
            insert_count=table_diff.insert_count,
            update_count=table_diff.update_count,
            unchanged_count=table_diff.unchanged_count,
            target_only_count=table_diff.target_only_count,
        )

        return table_diff

    @staticmethod
    def index_by_key(rows: Iterable[Row], primary_key: str) -> dict[Any, Row]:
        """
        Index rows by their primary key value.

        When several rows share a key the last one wins.

        Args:
            rows: Rows to index
            primary_key: Key column

        Returns:
            Mapping of key value to row
        """
        indexed: dict[Any, Row] = {}
        duplicates = 0
        for row in rows:
            key = row.get(primary_key)
            if key in indexed:
                duplicates += 1
            indexed[key] = row

        if duplicates:
            log.debug("duplicate_primary_keys", primary_key=primary_key, duplicates=duplicates)

        return indexed
