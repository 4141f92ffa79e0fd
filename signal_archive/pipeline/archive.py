"""Archive writer and retention sweeper over the archive table.

The archive is append-only: ArchiveWriter adds one batch per run after the
current last row, RetentionSweeper removes rows whose ``Date`` is older than
the retention window in a single batched delete.
"""

from collections import Counter
from datetime import date, timedelta
from typing import Callable, List, Sequence

import pandas as pd

from signal_archive.core.errors import PersistenceError
from signal_archive.core.logger import logger
from signal_archive.models.datatypes import ARCHIVE_HEADERS, EnrichedRow
from signal_archive.sources.base import TabularDataSource

DEFAULT_RETENTION_DAYS = 30


class ArchiveWriter:
    """Appends validated rows to the archive, creating it with the fixed schema if absent."""

    def __init__(self, table: TabularDataSource) -> None:
        self.table = table

    def append(self, rows: Sequence[EnrichedRow], run_date: str) -> int:
        """Append one run's rows.

        Args:
            rows: Validated rows; every row must carry ``run_date``.
            run_date: The run's partition date (``YYYY-MM-DD``).

        Returns:
            Number of rows appended.

        Raises:
            PersistenceError: If the batch is inconsistent or the write fails.
        """
        foreign = [row.ticker for row in rows if row.date != run_date]
        if foreign:
            raise PersistenceError(f"ArchiveWriter: rows {foreign} are not dated {run_date}")
        repeated = [ticker for ticker, n in Counter(row.ticker for row in rows).items() if n > 1]
        if repeated:
            raise PersistenceError(
                f"ArchiveWriter: duplicate (date, ticker) pairs for {run_date}: {repeated}"
            )

        try:
            self.table.ensure_schema(ARCHIVE_HEADERS)
        except OSError as exc:
            raise PersistenceError(f"ArchiveWriter: cannot create archive: {exc}") from exc
        if not rows:
            logger.info(f"ArchiveWriter: nothing to append for {run_date}")
            return 0
        self.table.append_rows([row.to_archive_row() for row in rows])
        logger.info(f"ArchiveWriter: appended {len(rows)} rows for {run_date}")
        return len(rows)


class RetentionSweeper:
    """Deletes archive rows dated strictly before ``today - retention_days``."""

    def __init__(
        self,
        table: TabularDataSource,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.table = table
        self._today = today

    def sweep(self, retention_days: int = DEFAULT_RETENTION_DAYS) -> int:
        """Remove expired rows in one batched delete.

        Rows whose ``Date`` cannot be parsed are kept. Running twice with no
        writes in between removes nothing the second time.

        Returns:
            Number of rows removed.
        """
        if not self.table.exists():
            logger.info("RetentionSweeper: archive does not exist yet — nothing to sweep")
            return 0

        cutoff = self._today() - timedelta(days=retention_days)
        indices = self.expired_indices(self.table.read_all(), cutoff)
        if not indices:
            logger.info(f"RetentionSweeper: no rows older than {cutoff.isoformat()}")
            return 0

        removed = self.table.delete_rows(indices)
        logger.info(f"RetentionSweeper: removed {removed} rows older than {cutoff.isoformat()}")
        return removed

    @staticmethod
    def expired_indices(table: List[List[str]], cutoff: date) -> List[int]:
        """Return 0-based data-row indices whose ``Date`` is strictly before ``cutoff``."""
        if len(table) < 2:
            return []
        header = table[0]
        if "Date" not in header:
            logger.warning("RetentionSweeper: archive has no Date column — skipping sweep")
            return []
        position = header.index("Date")
        raw_dates = pd.Series([row[position] if position < len(row) else "" for row in table[1:]])
        dates = (
            pd.to_datetime(raw_dates, errors="coerce", utc=True, format="mixed")
            .dt.tz_localize(None)
            .dt.normalize()
        )
        unparsable = int(dates.isna().sum())
        if unparsable:
            logger.warning(f"RetentionSweeper: kept {unparsable} rows with unparsable Date")
        mask = dates < pd.Timestamp(cutoff)
        return [int(i) for i in mask[mask].index]

