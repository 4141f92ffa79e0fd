"""Append-only ledger of pipeline-level failures."""

import traceback
from datetime import datetime, timezone
from typing import Callable, Optional

from signal_archive.core.logger import logger
from signal_archive.models.datatypes import ERROR_HEADERS, ErrorRecord
from signal_archive.sources.base import TabularDataSource


class ErrorLedger:
    """Writes one ``Timestamp, Error, Details`` row per failed run.

    Recording never raises: a failing ledger write is reported as a local
    warning so it cannot mask the error being recorded.
    """

    def __init__(
        self,
        table: TabularDataSource,
        clock: Callable[[], datetime] = lambda: datetime.now(timezone.utc),
    ) -> None:
        self.table = table
        self._clock = clock

    def record(self, error: BaseException, details: Optional[str] = None) -> Optional[ErrorRecord]:
        """Append ``error`` to the ledger.

        Args:
            error: The failure to record.
            details: Extra context; defaults to the formatted traceback.

        Returns:
            The written record, or ``None`` if the write failed.
        """
        entry = ErrorRecord(
            timestamp=self._clock().isoformat(),
            message=f"{type(error).__name__}: {error}",
            details=details if details is not None else _format_details(error),
        )
        try:
            self.table.ensure_schema(ERROR_HEADERS)
            self.table.append_rows([entry.to_row()])
        except Exception as exc:
            logger.warning(f"ErrorLedger: could not record {entry.message!r}: {exc}")
            return None
        logger.info(f"ErrorLedger: recorded {entry.message!r}")
        return entry


def _format_details(error: BaseException) -> str:
    lines = traceback.format_exception(type(error), error, error.__traceback__)
    return "".join(lines).strip()
