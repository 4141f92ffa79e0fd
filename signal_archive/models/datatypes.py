"""Data structures for the signal archive pipeline."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class SignalRecord:
    """
    One BUY decision read from the signals table. Key = ticker.
    """
    timestamp: Optional[str]
    ticker: str
    decision: str
    sell_target: Optional[float] = None
    target_horizon: Optional[str] = None
    confidence: Optional[float] = None
    risk_level: Optional[str] = None
    summary: Optional[str] = None
    macro_mood: Optional[str] = None
    tech_score: Optional[float] = None


@dataclass(frozen=True)
class TechnicalRecord:
    """Technical indicators for one ticker."""
    ticker: str
    current_price: Optional[float] = None
    week52_high: Optional[float] = None
    week52_low: Optional[float] = None
    rsi: Optional[float] = None
    volume_spike: Optional[str] = None
    macd: Optional[str] = None
    gap_status: Optional[str] = None
    ma50: Optional[float] = None
    ma200: Optional[float] = None
    atr: Optional[float] = None
    technical_score: Optional[float] = None


@dataclass(frozen=True)
class FundamentalRecord:
    """Fundamental ratios for one ticker."""
    ticker: str
    market_cap: Optional[float] = None
    pe_ratio: Optional[float] = None
    revenue_growth: Optional[float] = None
    profit_margin: Optional[float] = None
    roe: Optional[float] = None
    eps_growth: Optional[float] = None
    debt_to_equity: Optional[float] = None
    peg: Optional[float] = None
    ev_ebitda: Optional[float] = None
    fcf_share: Optional[float] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    current_ratio: Optional[float] = None


@dataclass(frozen=True)
class SentimentRecord:
    """
    Macro conditions for the day, shared by every signal in a run.
    """
    market_mood: Optional[str] = None
    macro_strength: Optional[str] = None
    volatility_level: Optional[str] = None
    sentiment_summary: Optional[str] = None
    sentiment_date: Optional[str] = None


@dataclass(frozen=True)
class EnrichedRow:
    """
    A signal joined with its technical, fundamental and sentiment data for one run.
    """
    date: str
    timestamp: Optional[str]
    ticker: str
    company_name: str
    decision: str
    sell_target: Optional[float] = None
    target_horizon: Optional[str] = None
    confidence: Optional[float] = None
    risk_level: Optional[str] = None
    summary: Optional[str] = None
    macro_mood: Optional[str] = None
    tech_score: Optional[float] = None
    current_price: Optional[float] = None
    week52_high: Optional[float] = None
    week52_low: Optional[float] = None
    rsi: Optional[float] = None
    volume_spike: Optional[str] = None
    macd: Optional[str] = None
    gap_status: Optional[str] = None
    ma50: Optional[float] = None
    ma200: Optional[float] = None
    atr: Optional[float] = None
    technical_score: Optional[float] = None
    market_cap: Optional[float] = None
    pe_ratio: Optional[float] = None
    revenue_growth: Optional[float] = None
    profit_margin: Optional[float] = None
    roe: Optional[float] = None
    eps_growth: Optional[float] = None
    debt_to_equity: Optional[float] = None
    peg: Optional[float] = None
    ev_ebitda: Optional[float] = None
    fcf_share: Optional[float] = None
    sector: Optional[str] = None
    industry: Optional[str] = None
    current_ratio: Optional[float] = None
    upside: Optional[float] = None
    market_mood: Optional[str] = None
    macro_strength: Optional[str] = None
    volatility_level: Optional[str] = None
    sentiment_summary: Optional[str] = None
    sentiment_date: Optional[str] = None

    def to_archive_dict(self) -> Dict[str, Any]:
        """Return the row keyed by archive column name, in archive column order."""
        return {column: getattr(self, attr) for column, attr in ARCHIVE_COLUMNS}

    def to_archive_row(self) -> List[str]:
        """Return the row as CSV cell strings in archive column order (``None`` → ``""``)."""
        return [
            "" if value is None else str(value)
            for value in self.to_archive_dict().values()
        ]


@dataclass(frozen=True)
class ErrorRecord:
    """One pipeline-level failure written to the error ledger."""
    timestamp: str
    message: str
    details: str = ""

    def to_row(self) -> List[str]:
        return [self.timestamp, self.message, self.details]


@dataclass
class RunReport:
    """
    Stage counts and final state of one pipeline run.
    """
    run_date: str
    state: str = "Idle"
    signals_read: int = 0
    duplicates_removed: int = 0
    rows_merged: int = 0
    rows_rejected: int = 0
    rows_archived: int = 0
    rows_swept: int = 0
    rejections: List[str] = field(default_factory=list)


# Archive column name → EnrichedRow attribute, in the fixed on-disk order.
ARCHIVE_COLUMNS = [
    ("Date", "date"),
    ("Timestamp", "timestamp"),
    ("Ticker", "ticker"),
    ("CompanyName", "company_name"),
    ("Decision", "decision"),
    ("SellTarget", "sell_target"),
    ("TargetHorizon", "target_horizon"),
    ("Confidence", "confidence"),
    ("RiskLevel", "risk_level"),
    ("Summary", "summary"),
    ("MacroMood", "macro_mood"),
    ("TechScore", "tech_score"),
    ("CurrentPrice", "current_price"),
    ("Week52High", "week52_high"),
    ("Week52Low", "week52_low"),
    ("RSI", "rsi"),
    ("VolumeSpike", "volume_spike"),
    ("MACD", "macd"),
    ("GapStatus", "gap_status"),
    ("MA50", "ma50"),
    ("MA200", "ma200"),
    ("ATR", "atr"),
    ("TechnicalScore", "technical_score"),
    ("MarketCap", "market_cap"),
    ("PERatio", "pe_ratio"),
    ("RevenueGrowth", "revenue_growth"),
    ("ProfitMargin", "profit_margin"),
    ("ROE", "roe"),
    ("EPSGrowth", "eps_growth"),
    ("DebtToEquity", "debt_to_equity"),
    ("PEG", "peg"),
    ("EVEbitda", "ev_ebitda"),
    ("FCFShare", "fcf_share"),
    ("Sector", "sector"),
    ("Industry", "industry"),
    ("CurrentRatio", "current_ratio"),
    ("Upside", "upside"),
    ("MarketMood", "market_mood"),
    ("MacroStrength", "macro_strength"),
    ("VolatilityLevel", "volatility_level"),
    ("SentimentSummary", "sentiment_summary"),
    ("SentimentDate", "sentiment_date"),
]

ARCHIVE_HEADERS = [column for column, _ in ARCHIVE_COLUMNS]

# Archive columns served back to consumers as numbers rather than strings.
NUMERIC_ARCHIVE_COLUMNS = frozenset({
    "SellTarget", "Confidence", "TechScore", "CurrentPrice", "Week52High",
    "Week52Low", "RSI", "MA50", "MA200", "ATR", "TechnicalScore", "MarketCap",
    "PERatio", "RevenueGrowth", "ProfitMargin", "ROE", "EPSGrowth",
    "DebtToEquity", "PEG", "EVEbitda", "FCFShare", "CurrentRatio", "Upside",
})

ERROR_HEADERS = ["Timestamp", "Error", "Details"]
