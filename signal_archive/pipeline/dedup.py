"""Latest-wins deduplication of signal records by ticker."""

from typing import Dict, List, Optional, Sequence, Tuple

import pandas as pd

from signal_archive.core.logger import logger
from signal_archive.core.values import parse_timestamp
from signal_archive.models.datatypes import SignalRecord


def dedupe_signals(signals: Sequence[SignalRecord]) -> Tuple[List[SignalRecord], int]:
    """Collapse signals sharing a ticker to the one with the latest timestamp.

    An unparsable or blank timestamp ranks below every parsable one. On an
    exact tie the first occurrence in input order is kept. Output order is the
    order in which each ticker first appears.

    Args:
        signals: Signals in source-table order.

    Returns:
        Tuple of ``(unique_signals, removed_count)``.
    """
    best: Dict[str, Tuple[Optional[pd.Timestamp], SignalRecord]] = {}
    for signal in signals:
        ts = parse_timestamp(signal.timestamp)
        current = best.get(signal.ticker)
        if current is None or _is_later(ts, current[0]):
            best[signal.ticker] = (ts, signal)

    unique = [signal for _, signal in best.values()]
    removed = len(signals) - len(unique)
    if removed:
        logger.info(f"dedupe_signals: removed {removed} duplicate signals ({len(unique)} unique tickers)")
    return unique, removed


def _is_later(candidate: Optional[pd.Timestamp], incumbent: Optional[pd.Timestamp]) -> bool:
    """Strictly-later comparison where ``None`` is earlier than any timestamp."""
    if candidate is None:
        return False
    if incumbent is None:
        return True
    return candidate > incumbent
