"""Pipeline exception hierarchy.

Run-level errors abort the remaining stages, are written to the error ledger
and re-raised to the caller. ``RowRejected`` is the only row-level error and
never leaves the per-row filter.
"""


class PipelineError(Exception):
    """Base exception for all signal-archive failures."""


class ConfigError(PipelineError):
    """Raised for invalid runtime configuration."""


class SourceNotFoundError(PipelineError):
    """Raised when a required source table does not exist."""


class SourceValidationError(PipelineError):
    """Raised when raw source data is empty or lacks required fields."""


class EnrichedValidationError(PipelineError):
    """Raised when merge output has the wrong shape."""


class RowRejected(PipelineError):
    """Raised for a single enriched row that fails range or type checks.

    Attributes:
        ticker: Ticker of the rejected row.
        reason: Human-readable rejection reason.
    """

    def __init__(self, ticker: str, reason: str) -> None:
        super().__init__(f"{ticker}: {reason}")
        self.ticker = ticker
        self.reason = reason


class NoValidSignalsError(PipelineError):
    """Raised when every enriched row was rejected."""


class PersistenceError(PipelineError):
    """Raised when an archive or ledger write fails."""


class RunInProgressError(PipelineError):
    """Raised when another pipeline run holds the run lease."""
