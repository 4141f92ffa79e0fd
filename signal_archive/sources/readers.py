"""Source readers: one per table, each mapping raw rows to typed records.

Every reader resolves its table through a :class:`TableCatalog`, maps header
names to positions by exact string match, and coerces cells by field type.
A declared column missing from the header is logged and yields ``None`` for
that field, unless ``strict`` is set, in which case a missing required column
raises :class:`SourceValidationError`.

Readers:
  - signals     : keeps only BUY decisions with a non-empty ticker
  - technicals  : keyed by ticker (later rows win)
  - fundamentals: keyed by ticker (later rows win)
  - sentiment   : exactly one record: the last row (or the latest ``Date``)
  - name map    : ticker → company name, blank entries skipped
"""

from typing import Any, Dict, Iterator, List, Optional, Sequence

from signal_archive.core.errors import SourceValidationError
from signal_archive.core.logger import logger
from signal_archive.core.values import parse_timestamp, to_float, to_text
from signal_archive.models.datatypes import (
    FundamentalRecord, SentimentRecord, SignalRecord, TechnicalRecord,
)
from signal_archive.sources.catalog import TableCatalog

BUY_DECISION = "BUY"

# field → source column header
SIGNAL_COLUMNS = {
    "timestamp": "Timestamp",
    "ticker": "Ticker",
    "decision": "Decision",
    "sell_target": "SellTarget",
    "target_horizon": "TargetHorizon",
    "confidence": "Confidence",
    "risk_level": "RiskLevel",
    "summary": "Summary",
    "macro_mood": "MacroMood",
    "tech_score": "TechScore",
}
SIGNAL_REQUIRED = ("timestamp", "ticker", "decision", "sell_target", "confidence")
SIGNAL_NUMERIC = {"sell_target", "confidence", "tech_score"}

TECHNICAL_COLUMNS = {
    "ticker": "Ticker",
    "current_price": "CurrentPrice",
    "week52_high": "Week52High",
    "week52_low": "Week52Low",
    "rsi": "RSI",
    "volume_spike": "VolumeSpike",
    "macd": "MACD",
    "gap_status": "GapStatus",
    "ma50": "MA50",
    "ma200": "MA200",
    "atr": "ATR",
    "technical_score": "TechnicalScore",
}
TECHNICAL_REQUIRED = ("ticker", "current_price")
TECHNICAL_NUMERIC = {
    "current_price", "week52_high", "week52_low", "rsi",
    "ma50", "ma200", "atr", "technical_score",
}

FUNDAMENTAL_COLUMNS = {
    "ticker": "Ticker",
    "market_cap": "MarketCap",
    "pe_ratio": "PERatio",
    "revenue_growth": "RevenueGrowth",
    "profit_margin": "ProfitMargin",
    "roe": "ROE",
    "eps_growth": "EPSGrowth",
    "debt_to_equity": "DebtToEquity",
    "peg": "PEG",
    "ev_ebitda": "EVEbitda",
    "fcf_share": "FCFShare",
    "sector": "Sector",
    "industry": "Industry",
    "current_ratio": "CurrentRatio",
}
FUNDAMENTAL_REQUIRED = ("ticker",)
FUNDAMENTAL_NUMERIC = {
    "market_cap", "pe_ratio", "revenue_growth", "profit_margin", "roe",
    "eps_growth", "debt_to_equity", "peg", "ev_ebitda", "fcf_share", "current_ratio",
}

SENTIMENT_COLUMNS = {
    "sentiment_date": "Date",
    "market_mood": "MarketMood",
    "macro_strength": "MacroStrength",
    "volatility_level": "VolatilityLevel",
    "sentiment_summary": "SentimentSummary",
}
SENTIMENT_REQUIRED = ("market_mood",)

NAME_MAP_COLUMNS = {"ticker": "Ticker", "company_name": "CompanyName"}
NAME_MAP_REQUIRED = ("ticker", "company_name")


# ── readers ───────────────────────────────────────────────────────────────────

def read_signals(
    catalog: TableCatalog, source_name: str, strict: bool = False,
) -> List[SignalRecord]:
    """Read BUY signals with a non-empty ticker, in table order.

    Raises:
        SourceNotFoundError: If the table does not exist.
        SourceValidationError: In strict mode, if a required column is missing.
    """
    records: List[SignalRecord] = []
    skipped = 0
    for values in _iter_rows(catalog, source_name, SIGNAL_COLUMNS, SIGNAL_REQUIRED, strict):
        fields = _coerce(values, SIGNAL_NUMERIC)
        ticker = fields.get("ticker")
        decision = (fields.get("decision") or "").upper()
        if not ticker or decision != BUY_DECISION:
            skipped += 1
            continue
        fields["decision"] = decision
        records.append(SignalRecord(**fields))

    logger.info(
        f"read_signals: {len(records)} BUY signals from '{source_name}' "
        f"({skipped} rows skipped)"
    )
    return records


def read_header(catalog: TableCatalog, source_name: str) -> List[str]:
    """Return the header row of a table, or an empty list for an empty table."""
    table = catalog.open_table(source_name).read_all()
    return list(table[0]) if table else []


def read_technicals(
    catalog: TableCatalog, source_name: str, strict: bool = False,
) -> Dict[str, TechnicalRecord]:
    """Read technical indicators keyed by ticker."""
    records = {
        rec.ticker: rec
        for rec in _keyed_records(
            catalog, source_name, TECHNICAL_COLUMNS, TECHNICAL_REQUIRED,
            TECHNICAL_NUMERIC, TechnicalRecord, strict,
        )
    }
    logger.info(f"read_technicals: {len(records)} tickers from '{source_name}'")
    return records


def read_fundamentals(
    catalog: TableCatalog, source_name: str, strict: bool = False,
) -> Dict[str, FundamentalRecord]:
    """Read fundamental ratios keyed by ticker."""
    records = {
        rec.ticker: rec
        for rec in _keyed_records(
            catalog, source_name, FUNDAMENTAL_COLUMNS, FUNDAMENTAL_REQUIRED,
            FUNDAMENTAL_NUMERIC, FundamentalRecord, strict,
        )
    }
    logger.info(f"read_fundamentals: {len(records)} tickers from '{source_name}'")
    return records


def read_sentiment(
    catalog: TableCatalog,
    source_name: str,
    strict: bool = False,
    selection: str = "last_row",
) -> Optional[SentimentRecord]:
    """Return the single sentiment record for the run.

    ``last_row`` picks the most recently listed row. ``latest_date`` picks the
    row with the greatest parsable ``Date`` (later rows win ties) and falls
    back to the last row when no date parses. An empty table yields ``None``.
    """
    rows = [
        _coerce(values, set())
        for values in _iter_rows(catalog, source_name, SENTIMENT_COLUMNS, SENTIMENT_REQUIRED, strict)
    ]
    if not rows:
        logger.warning(f"read_sentiment: '{source_name}' has no rows — sentiment fields will be empty")
        return None

    chosen = rows[-1]
    if selection == "latest_date":
        dated = [
            (parse_timestamp(row.get("sentiment_date")), i)
            for i, row in enumerate(rows)
        ]
        dated = [(ts, i) for ts, i in dated if ts is not None]
        if dated:
            chosen = rows[max(dated)[1]]
        else:
            logger.warning(f"read_sentiment: no parsable Date in '{source_name}', using last row")

    logger.info(f"read_sentiment: using entry dated {chosen.get('sentiment_date')!r}")
    return SentimentRecord(**chosen)


def read_name_map(
    catalog: TableCatalog, source_name: str, strict: bool = False,
) -> Dict[str, str]:
    """Build ticker → company name; rows with a blank ticker or name are skipped."""
    name_map: Dict[str, str] = {}
    for values in _iter_rows(catalog, source_name, NAME_MAP_COLUMNS, NAME_MAP_REQUIRED, strict):
        ticker = to_text(values.get("ticker"))
        name = to_text(values.get("company_name"))
        if ticker and name:
            name_map[ticker] = name
    logger.info(f"read_name_map: {len(name_map)} names from '{source_name}'")
    return name_map


# ── helpers ───────────────────────────────────────────────────────────────────

def column_map(
    header: Sequence[str],
    columns: Dict[str, str],
    required: Sequence[str],
    source_name: str,
    strict: bool = False,
) -> Dict[str, int]:
    """Map each declared field to its header position by exact string match.

    Missing columns are left out of the result. A missing required column is
    logged as a warning, or raised as :class:`SourceValidationError` in strict mode.
    """
    positions = {name: i for i, name in enumerate(header)}
    mapping: Dict[str, int] = {}
    missing: List[str] = []
    for field_name, column in columns.items():
        if column in positions:
            mapping[field_name] = positions[column]
        elif field_name in required:
            missing.append(column)

    if missing:
        message = f"'{source_name}' is missing required columns: {missing}"
        if strict:
            raise SourceValidationError(message)
        logger.warning(f"column_map: {message} — fields will be empty")
    return mapping


def _iter_rows(
    catalog: TableCatalog,
    source_name: str,
    columns: Dict[str, str],
    required: Sequence[str],
    strict: bool,
) -> Iterator[Dict[str, Any]]:
    """Yield one ``{field: raw cell}`` dict per data row; unmapped fields are ``None``."""
    table = catalog.open_table(source_name).read_all()
    if not table:
        return
    mapping = column_map(table[0], columns, required, source_name, strict)
    for row in table[1:]:
        yield {field_name: _cell(row, mapping.get(field_name)) for field_name in columns}


def _cell(row: Sequence[str], position: Optional[int]) -> Optional[str]:
    if position is None or position >= len(row):
        return None
    return row[position]


def _coerce(values: Dict[str, Any], numeric: set) -> Dict[str, Any]:
    return {
        key: to_float(raw) if key in numeric else to_text(raw)
        for key, raw in values.items()
    }


def _keyed_records(
    catalog: TableCatalog,
    source_name: str,
    columns: Dict[str, str],
    required: Sequence[str],
    numeric: set,
    record_type: type,
    strict: bool,
) -> Iterator[Any]:
    """Yield typed records for rows with a non-empty ticker."""
    for values in _iter_rows(catalog, source_name, columns, required, strict):
        fields = _coerce(values, numeric)
        if fields.get("ticker"):
            yield record_type(**fields)
