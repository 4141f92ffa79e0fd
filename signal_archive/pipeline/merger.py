"""Join deduplicated signals with technical, fundamental, sentiment and name data."""

from dataclasses import asdict
from typing import Dict, List, Mapping, Optional, Sequence

from signal_archive.core.logger import logger
from signal_archive.models.datatypes import (
    EnrichedRow, FundamentalRecord, SentimentRecord, SignalRecord, TechnicalRecord,
)


def compute_upside(sell_target: Optional[float], current_price: Optional[float]) -> Optional[float]:
    """Percentage distance from current price to sell target, rounded to 0.1.

    Returns ``None`` when either input is missing or the price is zero.
    """
    if sell_target is None or current_price is None or current_price == 0:
        return None
    return round((sell_target - current_price) / current_price * 100, 1)


def merge_signals(
    signals: Sequence[SignalRecord],
    technicals: Mapping[str, TechnicalRecord],
    fundamentals: Mapping[str, FundamentalRecord],
    sentiment: Optional[SentimentRecord],
    name_map: Mapping[str, str],
    run_date: str,
) -> List[EnrichedRow]:
    """Build one :class:`EnrichedRow` per signal.

    Absent technical or fundamental records leave their fields ``None``; an
    absent display name falls back to the ticker. The same sentiment record is
    attached to every row.

    Args:
        signals: Deduplicated signals.
        technicals: Technical records keyed by ticker.
        fundamentals: Fundamental records keyed by ticker.
        sentiment: The run's single sentiment record, or ``None``.
        name_map: Ticker → company name.
        run_date: ``YYYY-MM-DD`` partition key used by retention.

    Returns:
        Enriched rows in signal order.
    """
    sentiment_fields = asdict(sentiment) if sentiment is not None else {}
    rows: List[EnrichedRow] = []
    missing_tech = 0
    missing_fund = 0

    for signal in signals:
        technical = technicals.get(signal.ticker)
        fundamental = fundamentals.get(signal.ticker)
        if technical is None:
            missing_tech += 1
        if fundamental is None:
            missing_fund += 1

        fields: Dict[str, object] = {}
        fields.update(_without_ticker(technical))
        fields.update(_without_ticker(fundamental))
        fields.update(sentiment_fields)
        fields.update(asdict(signal))
        fields["date"] = run_date
        fields["company_name"] = name_map.get(signal.ticker) or signal.ticker
        fields["upside"] = compute_upside(signal.sell_target, fields.get("current_price"))
        rows.append(EnrichedRow(**fields))

    logger.info(
        f"merge_signals: {len(rows)} rows for {run_date} "
        f"(no technicals: {missing_tech}, no fundamentals: {missing_fund})"
    )
    return rows


def _without_ticker(record: Optional[object]) -> Dict[str, object]:
    if record is None:
        return {}
    fields = asdict(record)
    fields.pop("ticker", None)
    return fields
