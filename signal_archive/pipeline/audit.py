"""Archive auditor: checks an archive CSV against the archive invariants.

Checks:
  1. Header matches the fixed archive schema
  2. No duplicate (Date, Ticker) pair
  3. Confidence within [0, 100] for all rows
  4. CurrentPrice and SellTarget positive when present
  5. No row older than the retention window (plus one day of slack)

Usage:
    python -m signal_archive.pipeline.audit data/archive.csv [--retention-days 30]
"""

import argparse
import csv
import sys
from datetime import date, timedelta
from typing import List, Optional, Tuple

from signal_archive.core.values import parse_timestamp, to_float
from signal_archive.models.datatypes import ARCHIVE_HEADERS
from signal_archive.pipeline.archive import DEFAULT_RETENTION_DAYS


def audit(
    csv_path: str,
    retention_days: int = DEFAULT_RETENTION_DAYS,
    today: Optional[date] = None,
) -> Tuple[bool, List[str]]:
    """Run all audit checks against csv_path.

    Args:
        csv_path: Path to the archive CSV.
        retention_days: Window the sweeper is configured with.
        today: Reference date for the retention check (defaults to today).

    Returns:
        Tuple of ``(passed: bool, messages: list[str])``.
        ``messages`` contains PASS/FAIL lines for each check.
    """
    messages: List[str] = []
    passed = True

    # ── load ──────────────────────────────────────────────────────────────────
    try:
        with open(csv_path, encoding="utf-8", newline="") as f:
            reader = csv.DictReader(f)
            header = reader.fieldnames or []
            rows = list(reader)
    except FileNotFoundError:
        return False, [f"FAIL  file not found: {csv_path}"]
    except (OSError, csv.Error) as exc:
        return False, [f"FAIL  could not read CSV: {exc}"]

    # ── check 1: schema ───────────────────────────────────────────────────────
    if list(header) != ARCHIVE_HEADERS:
        missing = [c for c in ARCHIVE_HEADERS if c not in header]
        return False, [f"FAIL  header does not match archive schema (missing: {missing})"]
    messages.append(f"PASS  header matches archive schema ({len(ARCHIVE_HEADERS)} columns)")

    # ── check 2: unique (Date, Ticker) ────────────────────────────────────────
    seen = set()
    dupes = []
    for i, row in enumerate(rows, start=2):
        key = (row["Date"], row["Ticker"])
        if key in seen:
            dupes.append((i, key))
        seen.add(key)
    if not dupes:
        messages.append(f"PASS  {len(rows)} rows, no duplicate (Date, Ticker)")
    else:
        messages.append(f"FAIL  {len(dupes)} duplicate (Date, Ticker) rows: {dupes[:3]}")
        passed = False

    # ── check 3: Confidence in [0, 100] ───────────────────────────────────────
    bad_conf = []
    for i, row in enumerate(rows, start=2):
        value = to_float(row["Confidence"])
        if value is None or not (0.0 <= value <= 100.0):
            bad_conf.append((i, row["Confidence"]))
    if not bad_conf:
        messages.append("PASS  Confidence ∈ [0, 100] for all rows")
    else:
        messages.append(f"FAIL  Confidence out of range in {len(bad_conf)} rows: {bad_conf[:3]}")
        passed = False

    # ── check 4: positive prices when present ─────────────────────────────────
    for col in ("CurrentPrice", "SellTarget"):
        bad = [
            i for i, row in enumerate(rows, start=2)
            if (row[col] or "").strip() and not ((to_float(row[col]) or 0) > 0)
        ]
        if not bad:
            messages.append(f"PASS  {col}: positive wherever present")
        else:
            messages.append(f"FAIL  {col}: {len(bad)} non-positive value(s) at rows {bad[:5]}")
            passed = False

    # ── check 5: retention window ─────────────────────────────────────────────
    cutoff = (today or date.today()) - timedelta(days=retention_days + 1)
    stale = []
    for i, row in enumerate(rows, start=2):
        ts = parse_timestamp(row["Date"])
        if ts is not None and ts.date() < cutoff:
            stale.append((i, row["Date"]))
    if not stale:
        messages.append(f"PASS  no rows older than {cutoff.isoformat()}")
    else:
        messages.append(f"FAIL  {len(stale)} rows older than {cutoff.isoformat()}: {stale[:3]}")
        passed = False

    return passed, messages


def main(argv: Optional[List[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Audit a signal archive CSV.")
    parser.add_argument("csv_path")
    parser.add_argument("--retention-days", type=int, default=DEFAULT_RETENTION_DAYS)
    args = parser.parse_args(argv)

    passed, messages = audit(args.csv_path, args.retention_days)
    for msg in messages:
        print(msg)
    if passed:
        print("\nAUDIT PASSED ✓")
        return 0
    else:
        print("\nAUDIT FAILED ✗")
        return 1


if __name__ == "__main__":
    sys.exit(main())
