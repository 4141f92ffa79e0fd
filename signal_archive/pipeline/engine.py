"""Pipeline engine: sequences one synchronization run end to end.

States:
  Idle → Reading → Validating(pre) → Merging → Validating(post)
       → Filtering → Archiving → Sweeping → Done

Any error moves the run to Failed; the error is written to the error ledger
and re-raised so the scheduler sees it. Archiving happens only after every
validation gate has passed, so a failed run never leaves a partial batch.
"""

from datetime import date, timedelta
from enum import Enum
from typing import Callable, List, Optional

from signal_archive.core.config import PipelineConfig
from signal_archive.core.errors import ConfigError
from signal_archive.core.lease import SQLiteRunLease
from signal_archive.core.logger import logger
from signal_archive.models.datatypes import RunReport
from signal_archive.pipeline.archive import ArchiveWriter, RetentionSweeper
from signal_archive.pipeline.dedup import dedupe_signals
from signal_archive.pipeline.ledger import ErrorLedger
from signal_archive.pipeline.merger import merge_signals
from signal_archive.pipeline.validator import (
    filter_valid_rows, validate_enriched, validate_sources,
)
from signal_archive.sources.base import TabularDataSource
from signal_archive.sources.catalog import TableCatalog
from signal_archive.sources.csv_table import CsvTable
from signal_archive.sources.readers import (
    read_fundamentals, read_header, read_name_map, read_sentiment, read_signals,
    read_technicals,
)


class PipelineState(str, Enum):
    IDLE = "Idle"
    READING = "Reading"
    VALIDATING_PRE = "Validating(pre)"
    MERGING = "Merging"
    VALIDATING_POST = "Validating(post)"
    FILTERING = "Filtering"
    ARCHIVING = "Archiving"
    SWEEPING = "Sweeping"
    DONE = "Done"
    FAILED = "Failed"


# Lease is not held yet (Idle) or already released (Done, Failed)
_UNLEASED_STATES = (PipelineState.IDLE, PipelineState.DONE, PipelineState.FAILED)


class PipelineEngine:
    """Runs the read → validate → merge → filter → archive → sweep pipeline.

    Args:
        config: Validated pipeline configuration.
        catalog: Source table lookup (built from ``config`` if omitted).
        archive_table: Archive sink (``CsvTable`` at ``config.archive_path`` if omitted).
        ledger_table: Error ledger sink (``CsvTable`` at ``config.error_ledger_path`` if omitted).
        lease: Run lease (``SQLiteRunLease`` at ``config.lease_path`` if omitted).
        today: Returns the current local date; drives the run date and retention cutoff.
    """

    def __init__(
        self,
        config: PipelineConfig,
        catalog: Optional[TableCatalog] = None,
        archive_table: Optional[TabularDataSource] = None,
        ledger_table: Optional[TabularDataSource] = None,
        lease: Optional[SQLiteRunLease] = None,
        today: Callable[[], date] = date.today,
    ) -> None:
        self.config = config
        self.catalog = catalog or TableCatalog.from_config(config)
        archive = archive_table or CsvTable(config.archive_path, name="archive")
        self.writer = ArchiveWriter(archive)
        self.sweeper = RetentionSweeper(archive, today=today)
        self.ledger = ErrorLedger(
            ledger_table or CsvTable(config.error_ledger_path, name="errors")
        )
        self.lease = lease or SQLiteRunLease(config.lease_path, config.lease_ttl_seconds)
        self._today = today
        self.state = PipelineState.IDLE
        self.history: List[PipelineState] = []

    # ── public ────────────────────────────────────────────────────────────────

    def run(self, run_date: Optional[str] = None) -> RunReport:
        """Execute one run.

        Args:
            run_date: Partition date ``YYYY-MM-DD``; defaults to today.

        Returns:
            :class:`RunReport` with stage counts and final state ``Done``.

        Raises:
            PipelineError: Any fatal failure, after it has been recorded in the ledger.
        """
        run_date = run_date or self._today().isoformat()
        report = RunReport(run_date=run_date)
        self.history = []
        self._transition(PipelineState.IDLE, report)
        logger.info(f"PipelineEngine: starting run for {run_date}")

        try:
            check_run_date(run_date, self._today(), self.config.retention_days)
            with self.lease.hold():
                self._execute(report)
        except Exception as exc:
            self._transition(PipelineState.FAILED, report)
            logger.error(f"PipelineEngine: run for {run_date} failed: {type(exc).__name__}: {exc}")
            self.ledger.record(exc)
            raise

        logger.info(
            f"PipelineEngine: run for {run_date} done — read={report.signals_read} "
            f"duplicates={report.duplicates_removed} rejected={report.rows_rejected} "
            f"archived={report.rows_archived} swept={report.rows_swept}"
        )
        return report

    # ── internal ──────────────────────────────────────────────────────────────

    def _execute(self, report: RunReport) -> None:
        tables = self.config.tables
        strict = self.config.strict_columns

        self._transition(PipelineState.READING, report)
        signals = read_signals(self.catalog, tables.signals, strict)
        signal_header = read_header(self.catalog, tables.signals)
        technicals = read_technicals(self.catalog, tables.technicals, strict)
        fundamentals = read_fundamentals(self.catalog, tables.fundamentals, strict)
        sentiment = read_sentiment(
            self.catalog, tables.sentiment, strict, self.config.sentiment_selection
        )
        name_map = read_name_map(self.catalog, tables.name_map, strict)
        report.signals_read = len(signals)

        self._transition(PipelineState.VALIDATING_PRE, report)
        validate_sources(signals, signal_header)

        self._transition(PipelineState.MERGING, report)
        unique, report.duplicates_removed = dedupe_signals(signals)
        rows = merge_signals(unique, technicals, fundamentals, sentiment, name_map, report.run_date)
        report.rows_merged = len(rows)

        self._transition(PipelineState.VALIDATING_POST, report)
        validate_enriched(rows, report.run_date)

        self._transition(PipelineState.FILTERING, report)
        valid_rows, rejections = filter_valid_rows(rows)
        report.rows_rejected = len(rejections)
        report.rejections = [str(rejection) for rejection in rejections]

        self._transition(PipelineState.ARCHIVING, report)
        report.rows_archived = self.writer.append(valid_rows, report.run_date)

        self._transition(PipelineState.SWEEPING, report)
        report.rows_swept = self.sweeper.sweep(self.config.retention_days)

        self._transition(PipelineState.DONE, report)

    def _transition(self, state: PipelineState, report: RunReport) -> None:
        if state not in _UNLEASED_STATES:
            self.lease.renew()
        self.state = state
        self.history.append(state)
        report.state = state.value


def check_run_date(run_date: str, today: date, retention_days: int) -> date:
    """Parse ``run_date`` and make sure its rows would survive this run's sweep.

    Raises:
        ConfigError: If ``run_date`` is not ``YYYY-MM-DD`` or is older than
            ``today - retention_days``.
    """
    try:
        parsed = date.fromisoformat(run_date)
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid run date {run_date!r}: expected YYYY-MM-DD") from exc
    cutoff = today - timedelta(days=retention_days)
    if parsed < cutoff:
        raise ConfigError(
            f"Run date {run_date} is outside the {retention_days}-day retention window "
            f"(earliest allowed {cutoff.isoformat()})"
        )
    return parsed


def run_once(config: PipelineConfig, run_date: Optional[str] = None) -> RunReport:
    """Single entrypoint shared by the scheduled trigger and manual invocation."""
    return PipelineEngine(config).run(run_date)
