"""Tests for latest-wins signal deduplication."""

from signal_archive.models.datatypes import SignalRecord
from signal_archive.pipeline.dedup import dedupe_signals


def _signal(ticker, timestamp, summary=""):
    return SignalRecord(timestamp=timestamp, ticker=ticker, decision="BUY", summary=summary)


def test_latest_timestamp_wins():
    signals = [
        _signal("AAPL", "2026-10-19T09:00:00", "early"),
        _signal("AAPL", "2026-10-19T15:30:00", "late"),
        _signal("AAPL", "2026-10-19T12:00:00", "middle"),
    ]

    unique, removed = dedupe_signals(signals)

    assert [s.summary for s in unique] == ["late"]
    assert removed == 2


def test_at_most_one_record_per_ticker_and_it_is_the_max():
    signals = [
        _signal("AAPL", "2026-10-18"),
        _signal("MSFT", "2026-10-19"),
        _signal("AAPL", "2026-10-19"),
        _signal("MSFT", "2026-10-17"),
        _signal("NVDA", "2026-10-15"),
    ]

    unique, removed = dedupe_signals(signals)

    assert sorted(s.ticker for s in unique) == ["AAPL", "MSFT", "NVDA"]
    assert removed == 2
    for kept in unique:
        same = [s.timestamp for s in signals if s.ticker == kept.ticker]
        assert kept.timestamp == max(same)


def test_output_keeps_first_appearance_order():
    signals = [
        _signal("MSFT", "2026-10-18"),
        _signal("AAPL", "2026-10-18"),
        _signal("MSFT", "2026-10-19"),
    ]

    unique, _ = dedupe_signals(signals)

    assert [s.ticker for s in unique] == ["MSFT", "AAPL"]


def test_tie_keeps_first_occurrence():
    signals = [
        _signal("AAPL", "2026-10-19T10:00:00", "first"),
        _signal("AAPL", "2026-10-19T10:00:00", "second"),
    ]

    unique, removed = dedupe_signals(signals)

    assert unique[0].summary == "first"
    assert removed == 1


def test_parsable_timestamp_beats_unparsable():
    signals = [
        _signal("AAPL", "2026-10-01", "valid"),
        _signal("AAPL", "not a date", "garbage"),
        _signal("AAPL", None, "blank"),
    ]

    unique, _ = dedupe_signals(signals)

    assert unique[0].summary == "valid"


def test_unparsable_replaced_by_later_valid():
    signals = [
        _signal("AAPL", "??", "garbage"),
        _signal("AAPL", "2020-01-01", "valid"),
    ]

    unique, _ = dedupe_signals(signals)

    assert unique[0].summary == "valid"


def test_mixed_timezone_formats_compare():
    signals = [
        _signal("AAPL", "2026-10-19T10:00:00Z", "utc"),
        _signal("AAPL", "2026-10-19T08:00:00-04:00", "eastern"),
    ]

    unique, _ = dedupe_signals(signals)

    assert unique[0].summary == "eastern"


def test_empty_input():
    assert dedupe_signals([]) == ([], 0)
