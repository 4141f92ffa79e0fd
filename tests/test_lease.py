"""Tests for the SQLite run lease."""

import pytest

from signal_archive.core.errors import RunInProgressError
from signal_archive.core.lease import SQLiteRunLease


class _Clock:
    def __init__(self, now=1_000.0):
        self.now = now

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return _Clock()


def test_second_owner_is_blocked(tmp_path, clock):
    first = SQLiteRunLease(tmp_path / "lease.db", ttl_seconds=60, clock=clock)
    second = SQLiteRunLease(tmp_path / "lease.db", ttl_seconds=60, clock=clock)

    assert first.acquire() is True
    assert second.acquire() is False
    assert second.holder() == first.owner


def test_release_frees_lease(tmp_path, clock):
    first = SQLiteRunLease(tmp_path / "lease.db", clock=clock)
    second = SQLiteRunLease(tmp_path / "lease.db", clock=clock)

    first.acquire()
    first.release()

    assert second.acquire() is True


def test_expired_lease_is_taken_over(tmp_path, clock):
    dead = SQLiteRunLease(tmp_path / "lease.db", ttl_seconds=60, clock=clock)
    fresh = SQLiteRunLease(tmp_path / "lease.db", ttl_seconds=60, clock=clock)
    dead.acquire()

    clock.now += 61

    assert fresh.acquire() is True
    dead.release()
    assert fresh.holder() == fresh.owner


def test_hold_raises_when_busy(tmp_path, clock):
    first = SQLiteRunLease(tmp_path / "lease.db", clock=clock)
    second = SQLiteRunLease(tmp_path / "lease.db", clock=clock)

    with first.hold():
        with pytest.raises(RunInProgressError):
            with second.hold():
                pass
    assert first.holder() is None


def test_hold_releases_on_error(tmp_path, clock):
    lease = SQLiteRunLease(tmp_path / "lease.db", clock=clock)

    with pytest.raises(ValueError):
        with lease.hold():
            raise ValueError("stage failed")

    assert lease.holder() is None


def test_renew_pushes_expiry(tmp_path, clock):
    first = SQLiteRunLease(tmp_path / "lease.db", ttl_seconds=60, clock=clock)
    second = SQLiteRunLease(tmp_path / "lease.db", ttl_seconds=60, clock=clock)
    first.acquire()

    clock.now += 50
    first.renew()
    clock.now += 50

    assert second.acquire() is False
    assert first.holder() == first.owner


def test_renew_after_takeover_raises(tmp_path, clock):
    slow = SQLiteRunLease(tmp_path / "lease.db", ttl_seconds=60, clock=clock)
    fresh = SQLiteRunLease(tmp_path / "lease.db", ttl_seconds=60, clock=clock)
    slow.acquire()
    clock.now += 61
    fresh.acquire()

    with pytest.raises(RunInProgressError, match=fresh.owner):
        slow.renew()
    assert fresh.holder() == fresh.owner
