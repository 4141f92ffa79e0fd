"""Tests for CsvTable, ArchiveWriter and RetentionSweeper."""

from dataclasses import replace
from datetime import timedelta

import pytest

from signal_archive.core.errors import PersistenceError
from signal_archive.models.datatypes import ARCHIVE_HEADERS, EnrichedRow
from signal_archive.pipeline.archive import ArchiveWriter, RetentionSweeper
from signal_archive.sources.csv_table import CsvTable
from tests.conftest import TODAY, read_csv

ROW = EnrichedRow(
    date=TODAY.isoformat(), timestamp="2026-10-19T09:00:00", ticker="AAPL",
    company_name="Apple Inc.", decision="BUY", sell_target=120.0, confidence=80.0,
)


def _archive_with_dates(path, dates):
    table = CsvTable(path)
    table.ensure_schema(ARCHIVE_HEADERS)
    table.append_rows([
        replace(ROW, date=d, ticker=f"T{i}").to_archive_row() for i, d in enumerate(dates)
    ])
    return table


def _days_ago(n):
    return (TODAY - timedelta(days=n)).isoformat()


class TestCsvTable:
    def test_ensure_schema_creates_once(self, tmp_path):
        table = CsvTable(tmp_path / "nested" / "t.csv")

        assert table.ensure_schema(["A", "B"]) is True
        table.append_rows([["1", "2"]])
        assert table.ensure_schema(["A", "B"]) is False
        assert table.read_all() == [["A", "B"], ["1", "2"]]

    def test_ensure_schema_rejects_different_header(self, tmp_path):
        table = CsvTable(tmp_path / "t.csv")
        table.ensure_schema(["A", "B"])

        with pytest.raises(PersistenceError, match="header differs"):
            table.ensure_schema(["A", "B", "C"])
        assert table.read_all() == [["A", "B"]]

    def test_append_to_missing_table_raises(self, tmp_path):
        with pytest.raises(PersistenceError):
            CsvTable(tmp_path / "missing.csv").append_rows([["x"]])

    def test_delete_rows_is_one_batch(self, tmp_path):
        table = CsvTable(tmp_path / "t.csv")
        table.ensure_schema(["N"])
        table.append_rows([[str(i)] for i in range(6)])

        removed = table.delete_rows([0, 1, 4, 99])

        assert removed == 3
        assert table.read_all() == [["N"], ["2"], ["3"], ["5"]]
        assert list(tmp_path.glob("*.tmp")) == []

    def test_last_modified(self, tmp_path):
        table = CsvTable(tmp_path / "t.csv")
        assert table.last_modified() is None
        table.ensure_schema(["N"])
        assert table.last_modified().tzinfo is not None


class TestArchiveWriter:
    def test_creates_archive_with_fixed_schema(self, tmp_path):
        path = tmp_path / "archive.csv"

        appended = ArchiveWriter(CsvTable(path)).append([ROW], ROW.date)

        rows = read_csv(path)
        assert appended == 1
        assert rows[0] == ARCHIVE_HEADERS
        assert rows[1][ARCHIVE_HEADERS.index("Ticker")] == "AAPL"

    def test_appends_after_existing_rows(self, tmp_path):
        path = tmp_path / "archive.csv"
        writer = ArchiveWriter(CsvTable(path))
        writer.append([replace(ROW, date="2026-10-18")], "2026-10-18")

        writer.append([ROW, replace(ROW, ticker="MSFT")], ROW.date)

        tickers = [r[ARCHIVE_HEADERS.index("Ticker")] for r in read_csv(path)[1:]]
        dates = [r[0] for r in read_csv(path)[1:]]
        assert tickers == ["AAPL", "AAPL", "MSFT"]
        assert dates == ["2026-10-18", ROW.date, ROW.date]

    def test_rejects_duplicate_ticker_in_batch(self, tmp_path):
        path = tmp_path / "archive.csv"

        with pytest.raises(PersistenceError, match="duplicate"):
            ArchiveWriter(CsvTable(path)).append([ROW, ROW], ROW.date)
        assert not path.exists()

    def test_refuses_archive_with_foreign_header(self, tmp_path):
        path = tmp_path / "archive.csv"
        path.write_text("Date,Ticker\n2026-10-18,AAPL\n", encoding="utf-8")

        with pytest.raises(PersistenceError, match="header differs"):
            ArchiveWriter(CsvTable(path)).append([ROW], ROW.date)
        assert read_csv(path) == [["Date", "Ticker"], ["2026-10-18", "AAPL"]]

    def test_rejects_rows_from_another_date(self, tmp_path):
        with pytest.raises(PersistenceError):
            ArchiveWriter(CsvTable(tmp_path / "a.csv")).append([ROW], "2026-10-18")


class TestRetentionSweeper:
    def test_removes_rows_older_than_window(self, tmp_path):
        table = _archive_with_dates(tmp_path / "archive.csv", [_days_ago(45), _days_ago(10)])

        removed = RetentionSweeper(table, today=lambda: TODAY).sweep(30)

        assert removed == 1
        assert [r[0] for r in table.read_all()[1:]] == [_days_ago(10)]

    def test_cutoff_is_strict(self, tmp_path):
        table = _archive_with_dates(
            tmp_path / "archive.csv", [_days_ago(31), _days_ago(30), _days_ago(29)]
        )

        RetentionSweeper(table, today=lambda: TODAY).sweep(30)

        assert [r[0] for r in table.read_all()[1:]] == [_days_ago(30), _days_ago(29)]

    def test_idempotent(self, tmp_path):
        table = _archive_with_dates(
            tmp_path / "archive.csv", [_days_ago(60), _days_ago(5), _days_ago(40), _days_ago(1)]
        )
        sweeper = RetentionSweeper(table, today=lambda: TODAY)

        first = sweeper.sweep(30)
        after_first = table.read_all()
        second = sweeper.sweep(30)

        assert first == 2
        assert second == 0
        assert table.read_all() == after_first

    def test_single_batched_delete(self, tmp_path):
        table = _archive_with_dates(
            tmp_path / "archive.csv",
            [_days_ago(50), _days_ago(49), _days_ago(2), _days_ago(48), _days_ago(1)],
        )
        calls = []
        original = table.delete_rows

        def spy(indices):
            calls.append(list(indices))
            return original(indices)

        table.delete_rows = spy
        RetentionSweeper(table, today=lambda: TODAY).sweep(30)

        assert calls == [[0, 1, 3]]

    def test_unparsable_and_timestamp_dates(self, tmp_path):
        table = _archive_with_dates(
            tmp_path / "archive.csv",
            ["garbage", "", f"{_days_ago(45)}T04:00:00.000Z", _days_ago(3)],
        )

        removed = RetentionSweeper(table, today=lambda: TODAY).sweep(30)

        assert removed == 1
        assert [r[0] for r in table.read_all()[1:]] == ["garbage", "", _days_ago(3)]

    def test_missing_archive_is_noop(self, tmp_path):
        assert RetentionSweeper(CsvTable(tmp_path / "none.csv")).sweep() == 0
