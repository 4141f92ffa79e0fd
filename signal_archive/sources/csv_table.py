"""Local CSV-file binding of TabularDataSource."""

import csv
import os
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from signal_archive.core.errors import PersistenceError
from signal_archive.core.logger import logger
from signal_archive.sources.base import TabularDataSource


class CsvTable(TabularDataSource):
    """A table stored as one CSV file; the first line is the header row."""

    def __init__(self, path: str | Path, name: Optional[str] = None) -> None:
        """
        Args:
            path: CSV file path. Parent directories are created on first write.
            name: Display name used in log lines (defaults to the file stem).
        """
        self.path = Path(path)
        self.name = name or self.path.stem

    def exists(self) -> bool:
        return self.path.is_file()

    def read_all(self) -> List[List[str]]:
        with open(self.path, encoding="utf-8", newline="") as f:
            return [row for row in csv.reader(f) if row]

    def append_rows(self, rows: Sequence[Sequence[str]]) -> None:
        if not rows:
            return
        if not self.exists():
            raise PersistenceError(f"CsvTable: cannot append to missing table {self.path}")
        try:
            # One open per batch: either the whole batch lands or the write raises
            with open(self.path, "a", encoding="utf-8", newline="") as f:
                writer = csv.writer(f)
                writer.writerows(rows)
        except (OSError, csv.Error) as exc:
            raise PersistenceError(f"CsvTable: append to {self.path} failed: {exc}") from exc
        logger.info(f"CsvTable: appended {len(rows)} rows to {self.name}")

    def delete_rows(self, indices: Sequence[int]) -> int:
        doomed = set(indices)
        if not doomed or not self.exists():
            return 0
        table = self.read_all()
        if not table:
            return 0
        header, data = table[0], table[1:]
        retained = [row for i, row in enumerate(data) if i not in doomed]
        removed = len(data) - len(retained)
        if removed:
            self._replace([header] + retained)
        return removed

    def ensure_schema(self, headers: Sequence[str]) -> bool:
        if self.exists():
            current = self.read_all()
            if current and current[0] != list(headers):
                raise PersistenceError(
                    f"CsvTable: {self.name} header differs from expected schema "
                    f"({len(current[0])} vs {len(headers)} columns)"
                )
            if current:
                return False
        self._replace([list(headers)])
        logger.info(f"CsvTable: created {self.name} with {len(headers)} columns at {self.path}")
        return True

    def last_modified(self) -> Optional[datetime]:
        if not self.exists():
            return None
        return datetime.fromtimestamp(self.path.stat().st_mtime, tz=timezone.utc)

    def _replace(self, table: List[List[str]]) -> None:
        """Write ``table`` to a temp file beside the target and swap it in atomically."""
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self.path.name}.", suffix=".tmp", dir=self.path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                csv.writer(f).writerows(table)
            os.replace(tmp_name, self.path)
        except (OSError, csv.Error) as exc:
            if os.path.exists(tmp_name):
                os.remove(tmp_name)
            raise PersistenceError(f"CsvTable: rewrite of {self.path} failed: {exc}") from exc
