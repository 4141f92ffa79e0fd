"""Read-only table fetched from a published CSV URL (e.g. a spreadsheet export)."""

import csv
import io
from typing import List, Optional, Sequence

import requests

from signal_archive.core.errors import PersistenceError, SourceNotFoundError
from signal_archive.core.logger import logger
from signal_archive.core.retry import with_retries
from signal_archive.sources.base import TabularDataSource

_TIMEOUT_SECONDS = 15


class HttpCsvTable(TabularDataSource):
    """HTTP GET binding. Mutators raise, so it can only back source tables."""

    def __init__(self, url: str, name: str, session: Optional[requests.Session] = None) -> None:
        """Args:
            url: Published CSV URL.
            name: Table name used in log lines and errors.
            session: Optional shared ``requests.Session``.
        """
        self.url = url
        self.name = name
        self.session = session or requests.Session()
        self._cache: Optional[List[List[str]]] = None

    def exists(self) -> bool:
        try:
            self.read_all()
        except SourceNotFoundError:
            return False
        return True

    def read_all(self) -> List[List[str]]:
        if self._cache is None:
            text = self._fetch()
            self._cache = [row for row in csv.reader(io.StringIO(text))]
            logger.info(f"HttpCsvTable: fetched {len(self._cache)} lines for {self.name}")
        return self._cache

    def append_rows(self, rows: Sequence[Sequence[str]]) -> None:
        raise PersistenceError(f"HttpCsvTable: {self.name} is read-only")

    def delete_rows(self, indices: Sequence[int]) -> int:
        raise PersistenceError(f"HttpCsvTable: {self.name} is read-only")

    def ensure_schema(self, headers: Sequence[str]) -> bool:
        raise PersistenceError(f"HttpCsvTable: {self.name} is read-only")

    @with_retries(max_retries=3, initial_delay=2, retry_on=(requests.ConnectionError, requests.Timeout))
    def _get(self) -> requests.Response:
        return self.session.get(self.url, timeout=_TIMEOUT_SECONDS)

    def _fetch(self) -> str:
        """GET the CSV body. 404/410 means the table is gone, other failures propagate."""
        try:
            resp = self._get()
        except requests.RequestException as exc:
            logger.error(f"HttpCsvTable: INFRA_FAILURE for {self.name}: {exc}")
            raise

        if resp.status_code in (404, 410):
            raise SourceNotFoundError(f"Source table '{self.name}' not found at {self.url}")
        resp.raise_for_status()
        return resp.text
