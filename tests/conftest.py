"""Shared fixtures: temp source tables, configs and a fixed clock."""

import csv
import os
import tempfile
from datetime import date
from pathlib import Path

# Keep test logs out of the working tree; must precede package imports.
os.environ.setdefault(
    "SIGNAL_ARCHIVE_LOG_FILE", str(Path(tempfile.gettempdir()) / "signal_archive_tests.log")
)

import pytest  # noqa: E402

from signal_archive.core.config import PipelineConfig  # noqa: E402
from signal_archive.sources.catalog import TableCatalog  # noqa: E402
from signal_archive.sources.readers import (  # noqa: E402
    FUNDAMENTAL_COLUMNS, NAME_MAP_COLUMNS, SENTIMENT_COLUMNS, SIGNAL_COLUMNS, TECHNICAL_COLUMNS,
)

TODAY = date(2026, 10, 19)

SIGNAL_HEADER = list(SIGNAL_COLUMNS.values())
TECHNICAL_HEADER = list(TECHNICAL_COLUMNS.values())
FUNDAMENTAL_HEADER = list(FUNDAMENTAL_COLUMNS.values())
SENTIMENT_HEADER = list(SENTIMENT_COLUMNS.values())
NAME_MAP_HEADER = list(NAME_MAP_COLUMNS.values())


def signal_row(
    ticker,
    timestamp="2026-10-19T09:00:00",
    decision="BUY",
    sell_target="120",
    confidence="80",
    summary="Breakout",
):
    """One signals-table row in SIGNAL_HEADER order."""
    return [timestamp, ticker, decision, sell_target, "3 months", confidence,
            "Low", summary, "Neutral", "7"]


def technical_row(ticker, current_price="100", rsi="55"):
    return [ticker, current_price, "130", "80", rsi, "1.5x", "Bullish", "Gap up",
            "95", "90", "2.5", "7"]


def fundamental_row(ticker, sector="Technology"):
    return [ticker, "1000000000", "25", "10", "20", "18", "12", "0.5", "1.8", "15",
            "4.2", sector, "Software", "1.4"]


def write_csv(path, header, rows):
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8", newline="") as f:
        writer = csv.writer(f)
        writer.writerow(header)
        writer.writerows(rows)
    return path


def read_csv(path):
    with open(path, encoding="utf-8", newline="") as f:
        return list(csv.reader(f))


@pytest.fixture
def sources_dir(tmp_path):
    path = tmp_path / "sources"
    path.mkdir()
    return path


@pytest.fixture
def write_table(sources_dir):
    """Write ``<sources_dir>/<name>.csv`` from a header and rows."""
    def _write(name, header, rows):
        return write_csv(sources_dir / f"{name}.csv", header, rows)
    return _write


@pytest.fixture
def catalog(sources_dir):
    return TableCatalog(sources_dir)


@pytest.fixture
def pipeline_config(tmp_path, sources_dir):
    return PipelineConfig(
        sources_dir=sources_dir,
        archive_path=tmp_path / "archive.csv",
        error_ledger_path=tmp_path / "errors.csv",
        lease_path=tmp_path / "lease.db",
    )


@pytest.fixture
def seed_sources(write_table):
    """Write a full set of source tables around the given signal rows.

    Technicals exist for AAPL and MSFT only, fundamentals for AAPL only.
    """
    def _seed(signal_rows):
        write_table("signals", SIGNAL_HEADER, signal_rows)
        write_table("technicals", TECHNICAL_HEADER, [
            technical_row("AAPL"),
            technical_row("MSFT", current_price="400"),
        ])
        write_table("fundamentals", FUNDAMENTAL_HEADER, [fundamental_row("AAPL")])
        write_table("sentiment", SENTIMENT_HEADER, [
            ["2026-10-18", "Cautious", "4", "Medium", "Mixed data"],
            ["2026-10-19", "Risk-on", "7", "Low", "Soft landing"],
        ])
        write_table("name_map", NAME_MAP_HEADER, [
            ["AAPL", "Apple Inc."],
            ["MSFT", "Microsoft Corporation"],
        ])
    return _seed
