"""
Seed sample source tables for a manual end-to-end run.

Writes signals / technicals / fundamentals / sentiment / name_map CSVs into
the configured sources directory, then prints what was written.

Run with:
    PYTHONPATH=. python scripts/seed_sample_tables.py [--config config.yaml]
"""

import argparse
from datetime import datetime, timedelta

from dotenv import load_dotenv

load_dotenv()

from signal_archive.core.config import PipelineConfig, load_config
from signal_archive.sources.csv_table import CsvTable
from signal_archive.sources.readers import (
    FUNDAMENTAL_COLUMNS, NAME_MAP_COLUMNS, SENTIMENT_COLUMNS, SIGNAL_COLUMNS, TECHNICAL_COLUMNS,
)

DIVIDER = "=" * 70


def _sample_tables(now: datetime) -> dict:
    earlier = (now - timedelta(hours=2)).isoformat(timespec="seconds")
    later = now.isoformat(timespec="seconds")
    return {
        "signals": (SIGNAL_COLUMNS, [
            [earlier, "AAPL", "BUY", "210", "3 months", "72", "Low", "Momentum breakout", "Neutral", "7"],
            [later, "AAPL", "BUY", "215", "3 months", "78", "Low", "Breakout confirmed", "Neutral", "8"],
            [later, "MSFT", "BUY", "480", "6 months", "150", "Medium", "Bad confidence", "Neutral", "6"],
            [later, "GOOGL", "BUY", "190", "6 months", "65", "Medium", "Cloud growth", "Neutral", "6"],
            [later, "TSLA", "HOLD", "300", "1 month", "50", "High", "Not a buy", "Neutral", "4"],
        ]),
        "technicals": (TECHNICAL_COLUMNS, [
            ["AAPL", "195.5", "220", "160", "61", "1.8x", "Bullish", "Gap up", "190", "180", "3.2", "7.5"],
            ["MSFT", "420", "470", "350", "55", "1.1x", "Neutral", "None", "410", "390", "6.1", "6"],
        ]),
        "fundamentals": (FUNDAMENTAL_COLUMNS, [
            ["AAPL", "3000000000000", "31", "8", "25", "150", "10", "1.5", "2.1", "22", "6.5",
             "Technology", "Consumer Electronics", "1.0"],
        ]),
        "sentiment": (SENTIMENT_COLUMNS, [
            [(now - timedelta(days=1)).date().isoformat(), "Cautious", "4", "Medium", "Mixed macro data"],
            [now.date().isoformat(), "Risk-on", "7", "Low", "Soft landing narrative"],
        ]),
        "name_map": (NAME_MAP_COLUMNS, [
            ["AAPL", "Apple Inc."],
            ["MSFT", "Microsoft Corporation"],
        ]),
    }


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--config", default=None)
    args = parser.parse_args()

    config = PipelineConfig.from_dict(load_config(args.config))
    table_names = {
        "signals": config.tables.signals,
        "technicals": config.tables.technicals,
        "fundamentals": config.tables.fundamentals,
        "sentiment": config.tables.sentiment,
        "name_map": config.tables.name_map,
    }

    print(f"\n{DIVIDER}")
    print(f"  Seeding sample tables  |  dir={config.sources_dir}")
    print(DIVIDER)

    for key, (columns, rows) in _sample_tables(datetime.now()).items():
        table = CsvTable(config.sources_dir / f"{table_names[key]}.csv", name=table_names[key])
        if table.exists():
            table.path.unlink()
        table.ensure_schema(list(columns.values()))
        table.append_rows(rows)
        print(f"  {table_names[key]:14}  {len(rows)} rows  →  {table.path}")
    print()


if __name__ == "__main__":
    main()
