"""Resolve configured table names to concrete TabularDataSource instances."""

from pathlib import Path
from typing import Dict, Optional

import requests

from signal_archive.core.config import PipelineConfig
from signal_archive.core.errors import SourceNotFoundError
from signal_archive.sources.base import TabularDataSource
from signal_archive.sources.csv_table import CsvTable
from signal_archive.sources.remote import HttpCsvTable


class TableCatalog:
    """Looks up source tables by name: remote URL if configured, else ``<dir>/<name>.csv``."""

    def __init__(
        self,
        sources_dir: str | Path,
        remote_tables: Optional[Dict[str, str]] = None,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.sources_dir = Path(sources_dir)
        self.remote_tables = dict(remote_tables or {})
        self._session = session

    @classmethod
    def from_config(cls, config: PipelineConfig) -> "TableCatalog":
        return cls(config.sources_dir, config.remote_tables)

    def open_table(self, name: str) -> TabularDataSource:
        """
        Return the table called ``name``.

        Raises:
            SourceNotFoundError: If the table does not exist.
        """
        if name in self.remote_tables:
            if self._session is None:
                self._session = requests.Session()
            table: TabularDataSource = HttpCsvTable(self.remote_tables[name], name, self._session)
        else:
            table = CsvTable(self.sources_dir / f"{name}.csv", name=name)
        if not table.exists():
            raise SourceNotFoundError(f"Source table '{name}' does not exist")
        return table
