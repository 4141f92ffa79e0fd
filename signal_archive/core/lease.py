"""SQLite-backed run lease so at most one pipeline run writes the archive."""

import sqlite3
import time
import uuid
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Iterator, Optional

from signal_archive.core.errors import RunInProgressError
from signal_archive.core.logger import logger

_LEASE_NAME = "pipeline"


class SQLiteRunLease:
    """A single-row lock record with an owner id and an expiry timestamp."""

    def __init__(
        self,
        db_path: str | Path = "data/.run_lease.db",
        ttl_seconds: int = 900,
        clock: Callable[[], float] = time.time,
    ) -> None:
        """
        Initialize the run lease.

        Args:
            db_path (str | Path): Path to the SQLite database file.
            ttl_seconds (int): Seconds after which an unreleased lease is considered dead.
            clock (Callable): Returns the current epoch time in seconds.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        self.ttl_seconds = ttl_seconds
        self.owner = uuid.uuid4().hex
        self._clock = clock
        self._init_db()

    def _get_connection(self) -> sqlite3.Connection:
        """Get an autocommit connection so BEGIN IMMEDIATE is explicit."""
        return sqlite3.connect(self.db_path, isolation_level=None, timeout=10)

    def _init_db(self) -> None:
        """Create the lease table if it doesn't exist."""
        conn = self._get_connection()
        try:
            conn.execute(
                """
                CREATE TABLE IF NOT EXISTS run_lease (
                    name TEXT PRIMARY KEY,
                    owner TEXT NOT NULL,
                    expires_at REAL NOT NULL
                )
                """
            )
        finally:
            conn.close()

    def acquire(self) -> bool:
        """
        Try to take the lease.

        Returns:
            bool: ``True`` if this owner now holds the lease, ``False`` if another live run does.
        """
        now = self._clock()
        conn = self._get_connection()
        try:
            conn.execute("BEGIN IMMEDIATE")
            expired = conn.execute(
                "DELETE FROM run_lease WHERE name = ? AND expires_at <= ?",
                (_LEASE_NAME, now),
            ).rowcount
            if expired:
                logger.warning("SQLiteRunLease: took over an expired lease from a dead run")
            row = conn.execute(
                "SELECT owner FROM run_lease WHERE name = ?", (_LEASE_NAME,)
            ).fetchone()
            if row is not None and row[0] != self.owner:
                conn.execute("ROLLBACK")
                return False
            conn.execute(
                "INSERT OR REPLACE INTO run_lease (name, owner, expires_at) VALUES (?, ?, ?)",
                (_LEASE_NAME, self.owner, now + self.ttl_seconds),
            )
            conn.execute("COMMIT")
            return True
        except sqlite3.Error:
            if conn.in_transaction:
                conn.execute("ROLLBACK")
            raise
        finally:
            conn.close()

    def release(self) -> None:
        """Drop the lease if this owner still holds it."""
        conn = self._get_connection()
        try:
            conn.execute(
                "DELETE FROM run_lease WHERE name = ? AND owner = ?",
                (_LEASE_NAME, self.owner),
            )
        except sqlite3.Error as e:
            logger.warning(f"SQLiteRunLease: failed to release lease: {e}")
        finally:
            conn.close()

    def renew(self) -> None:
        """
        Push this owner's lease expiry to ``now + ttl_seconds``.

        Raises:
            RunInProgressError: If the lease was lost to another run.
        """
        conn = self._get_connection()
        try:
            renewed = conn.execute(
                "UPDATE run_lease SET expires_at = ? WHERE name = ? AND owner = ?",
                (self._clock() + self.ttl_seconds, _LEASE_NAME, self.owner),
            ).rowcount
        finally:
            conn.close()
        if not renewed:
            raise RunInProgressError(
                f"Lease in {self.db_path} was taken over by {self.holder() or 'nobody'}"
            )

    def holder(self) -> Optional[str]:
        """Return the owner id of the current live lease, if any."""
        conn = self._get_connection()
        try:
            row = conn.execute(
                "SELECT owner FROM run_lease WHERE name = ? AND expires_at > ?",
                (_LEASE_NAME, self._clock()),
            ).fetchone()
        finally:
            conn.close()
        return row[0] if row else None

    @contextmanager
    def hold(self) -> Iterator["SQLiteRunLease"]:
        """Hold the lease for the duration of a ``with`` block.

        Raises:
            RunInProgressError: If another run holds a live lease.
        """
        if not self.acquire():
            raise RunInProgressError(
                f"Pipeline run {self.holder()} holds the lease in {self.db_path}"
            )
        try:
            yield self
        finally:
            self.release()
