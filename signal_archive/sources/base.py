"""Abstract base class for tabular sources and sinks."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional, Sequence


class TabularDataSource(ABC):
    """Abstract interface over a named table: a header row followed by data rows."""

    name: str

    @abstractmethod
    def exists(self) -> bool:
        """
        Report whether the table exists.

        Returns:
            bool: ``True`` if the table can be read.
        """
        pass

    @abstractmethod
    def read_all(self) -> List[List[str]]:
        """
        Read the whole table.

        Returns:
            List[List[str]]: The header row followed by every data row, in stored order.
                             An existing but empty table returns ``[]``.
        """
        pass

    @abstractmethod
    def append_rows(self, rows: Sequence[Sequence[str]]) -> None:
        """
        Append data rows strictly after the current last row.

        Args:
            rows (Sequence[Sequence[str]]): Rows in header column order.
        """
        pass

    @abstractmethod
    def delete_rows(self, indices: Sequence[int]) -> int:
        """
        Delete data rows in a single batch.

        Args:
            indices (Sequence[int]): 0-based data-row indices (the header row is not counted).

        Returns:
            int: Number of rows actually removed.
        """
        pass

    @abstractmethod
    def ensure_schema(self, headers: Sequence[str]) -> bool:
        """
        Create the table with the given header row if it does not exist.

        Args:
            headers (Sequence[str]): Ordered column names.

        Returns:
            bool: ``True`` if the table was created by this call.

        Raises:
            PersistenceError: If the table exists with a different header row.
        """
        pass

    def last_modified(self) -> Optional[datetime]:
        """Return the time of the last write, if the backend knows it."""
        return None
