"""Validation gates for a pipeline run.

Gates:
  1. validate_sources : raw signals are non-empty, the signals header carries
     every required column, and the first record has a ticker and decision
     (fatal: SourceValidationError). Blank cells are left to gate 3.
  2. validate_enriched: merge output is non-empty and the first row carries
     the key archive fields and the run date (fatal: EnrichedValidationError)
  3. filter_valid_rows: drops rows failing range/type checks; an empty
     result is fatal (NoValidSignalsError)
"""

from typing import Any, List, Sequence, Tuple

from signal_archive.core.errors import (
    EnrichedValidationError, NoValidSignalsError, RowRejected, SourceValidationError,
)
from signal_archive.core.logger import logger
from signal_archive.core.values import parse_timestamp
from signal_archive.models.datatypes import EnrichedRow, SignalRecord
from signal_archive.sources.readers import SIGNAL_COLUMNS, SIGNAL_REQUIRED

SIGNAL_KEY_FIELDS = ("ticker", "decision")
REQUIRED_ENRICHED_FIELDS = ("Date", "Ticker", "CompanyName", "Decision")

CONFIDENCE_MIN = 0.0
CONFIDENCE_MAX = 100.0


# ── field predicates ──────────────────────────────────────────────────────────

def is_present(value: Any) -> bool:
    """True for anything but ``None`` and blank strings."""
    if value is None:
        return False
    if isinstance(value, str):
        return bool(value.strip())
    return True


def is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value == value


def in_range(value: Any, low: float, high: float) -> bool:
    return is_number(value) and low <= value <= high


def is_positive(value: Any) -> bool:
    return is_number(value) and value > 0


def is_timestamp(value: Any) -> bool:
    return parse_timestamp(value) is not None


def missing_fields(record: Any, fields: Sequence[str]) -> List[str]:
    """Return the names in ``fields`` that ``record`` lacks (attribute or mapping key)."""
    if isinstance(record, dict):
        return [name for name in fields if not is_present(record.get(name))]
    return [name for name in fields if not is_present(getattr(record, name, None))]


# ── gates ─────────────────────────────────────────────────────────────────────

def validate_sources(signals: Sequence[SignalRecord], header: Sequence[str]) -> None:
    """Pre-merge gate: structure of the signals source, not the values of one row.

    Args:
        signals: BUY signals as read from the source.
        header: The source's header row.

    Raises:
        SourceValidationError: If there are no signals, a required column is
            absent from the header, or the first record has no ticker or decision.
    """
    if not signals:
        raise SourceValidationError("No BUY signals found in the signals source")
    absent = [
        SIGNAL_COLUMNS[field_name]
        for field_name in SIGNAL_REQUIRED
        if SIGNAL_COLUMNS[field_name] not in header
    ]
    if absent:
        raise SourceValidationError(f"Signals source is missing required columns {absent}")
    missing = missing_fields(signals[0], SIGNAL_KEY_FIELDS)
    if missing:
        raise SourceValidationError(
            f"First signal record is missing key fields {missing}"
        )
    logger.info(f"validate_sources: {len(signals)} raw signals passed structural check")


def validate_enriched(rows: Sequence[EnrichedRow], run_date: str) -> None:
    """Post-merge gate.

    Raises:
        EnrichedValidationError: If there are no rows, the first row lacks a
            required field, or it is not dated ``run_date``.
    """
    if not rows:
        raise EnrichedValidationError("Merge produced no rows")
    first = rows[0].to_archive_dict()
    missing = missing_fields(first, REQUIRED_ENRICHED_FIELDS)
    if missing:
        raise EnrichedValidationError(
            f"Enriched row for {first.get('Ticker')!r} is missing required fields {missing}"
        )
    if first["Date"] != run_date:
        raise EnrichedValidationError(
            f"Enriched row for {first['Ticker']!r} is dated {first['Date']!r}, expected {run_date}"
        )
    logger.info(f"validate_enriched: {len(rows)} enriched rows passed structural check")


def check_row(row: EnrichedRow) -> None:
    """Per-row range and type checks.

    Raises:
        RowRejected: On the first failing check.
    """
    if not is_present(row.ticker):
        raise RowRejected("<blank>", "empty ticker")
    if row.current_price is not None and not is_positive(row.current_price):
        raise RowRejected(row.ticker, f"CurrentPrice {row.current_price} is not positive")
    if row.sell_target is not None and not is_positive(row.sell_target):
        raise RowRejected(row.ticker, f"SellTarget {row.sell_target} is not positive")
    if not in_range(row.confidence, CONFIDENCE_MIN, CONFIDENCE_MAX):
        raise RowRejected(
            row.ticker,
            f"Confidence {row.confidence} outside [{CONFIDENCE_MIN:g}, {CONFIDENCE_MAX:g}]",
        )
    if is_present(row.timestamp) and not is_timestamp(row.timestamp):
        raise RowRejected(row.ticker, f"Timestamp {row.timestamp!r} is not a valid point in time")


def filter_valid_rows(rows: Sequence[EnrichedRow]) -> Tuple[List[EnrichedRow], List[RowRejected]]:
    """Drop rows failing :func:`check_row`.

    Returns:
        Tuple of ``(kept_rows, rejections)``.

    Raises:
        NoValidSignalsError: If every row was rejected.
    """
    kept: List[EnrichedRow] = []
    rejections: List[RowRejected] = []
    for row in rows:
        try:
            check_row(row)
        except RowRejected as rejection:
            logger.warning(f"filter_valid_rows: dropped {rejection}")
            rejections.append(rejection)
            continue
        kept.append(row)

    if not kept:
        raise NoValidSignalsError(
            f"No valid signals after validation ({len(rejections)} rows rejected)"
        )
    logger.info(f"filter_valid_rows: kept {len(kept)} rows, rejected {len(rejections)}")
    return kept, rejections
