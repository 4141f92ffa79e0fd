"""Tests for the archive audit CLI."""

from dataclasses import replace

from signal_archive.models.datatypes import ARCHIVE_HEADERS, EnrichedRow
from signal_archive.pipeline.audit import audit, main
from tests.conftest import TODAY, write_csv

ROW = EnrichedRow(
    date=TODAY.isoformat(), timestamp="2026-10-19T09:00:00", ticker="AAPL",
    company_name="Apple Inc.", decision="BUY", sell_target=120.0, confidence=80.0,
    current_price=100.0,
)


def _write(path, rows):
    return write_csv(path, ARCHIVE_HEADERS, [r.to_archive_row() for r in rows])


def test_clean_archive_passes(tmp_path):
    path = _write(tmp_path / "archive.csv", [ROW, replace(ROW, ticker="MSFT")])

    passed, messages = audit(str(path), today=TODAY)

    assert passed is True
    assert all(m.startswith("PASS") for m in messages)


def test_duplicate_and_range_failures(tmp_path):
    path = _write(tmp_path / "archive.csv", [
        ROW,
        ROW,
        replace(ROW, ticker="MSFT", confidence=150.0, current_price=-1.0),
        replace(ROW, ticker="OLD", date="2026-08-01"),
    ])

    passed, messages = audit(str(path), today=TODAY)

    assert passed is False
    failures = [m for m in messages if m.startswith("FAIL")]
    assert any("duplicate" in m for m in failures)
    assert any("Confidence" in m for m in failures)
    assert any("CurrentPrice" in m for m in failures)
    assert any("older than" in m for m in failures)


def test_wrong_header_fails(tmp_path):
    path = write_csv(tmp_path / "archive.csv", ["Date", "Ticker"], [])

    passed, messages = audit(str(path))

    assert passed is False
    assert "header" in messages[0]


def test_main_exit_codes(tmp_path, capsys):
    assert main([str(tmp_path / "missing.csv")]) == 1
    assert "file not found" in capsys.readouterr().out
