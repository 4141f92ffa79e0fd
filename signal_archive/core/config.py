"""Configuration module for loading project settings and environment variables."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Tuple

import yaml
from dotenv import load_dotenv

from signal_archive.core.errors import ConfigError

# Load environment variables from .env file
load_dotenv()

DEFAULT_CONFIG_PATH = "config.yaml"
SENTIMENT_SELECTION_MODES = ("last_row", "latest_date")


def load_config(config_path: str | Path | None = None) -> Dict[str, Any]:
    """
    Load configuration from the specified YAML file.

    Args:
        config_path (str | Path | None): Path to the configuration file. Defaults to
            ``$SIGNAL_ARCHIVE_CONFIG`` or ``config.yaml``.

    Returns:
        Dict[str, Any]: A dictionary containing the configuration settings.
    """
    config_file = Path(config_path or os.getenv("SIGNAL_ARCHIVE_CONFIG", DEFAULT_CONFIG_PATH))
    if not config_file.exists():
        raise FileNotFoundError(f"Configuration file not found at {config_file}")

    with open(config_file, "r", encoding="utf-8") as file:
        config_data = yaml.safe_load(file)

    if not config_data:
        raise ValueError(f"Configuration file {config_file} is empty or invalid.")

    return config_data


@dataclass(frozen=True)
class SourceTables:
    """Names of the source tables read on every run."""

    signals: str = "signals"
    technicals: str = "technicals"
    fundamentals: str = "fundamentals"
    sentiment: str = "sentiment"
    name_map: str = "name_map"


@dataclass(frozen=True)
class PipelineConfig:
    """Validated pipeline configuration handed to the engine at construction.

    Attributes:
        sources_dir: Directory holding local ``<table>.csv`` source files.
        tables: Table names per source.
        remote_tables: Table name → published CSV URL, read over HTTP instead of disk.
        strict_columns: Fail a reader on a missing declared column instead of warning.
        sentiment_selection: ``last_row`` (positional) or ``latest_date``.
        archive_path: CSV file of the append-only archive.
        retention_days: Trailing window of archive dates kept by the sweeper.
        error_ledger_path: CSV file of the error ledger.
        lease_path: SQLite file holding the run lease.
        lease_ttl_seconds: Lease expiry; an older lease is treated as a dead run.
        cors_origins: Origins allowed to call the read endpoint.
    """

    sources_dir: Path = Path("data/sources")
    tables: SourceTables = field(default_factory=SourceTables)
    remote_tables: Dict[str, str] = field(default_factory=dict)
    strict_columns: bool = False
    sentiment_selection: str = "last_row"
    archive_path: Path = Path("data/archive.csv")
    retention_days: int = 30
    error_ledger_path: Path = Path("data/errors.csv")
    lease_path: Path = Path("data/.run_lease.db")
    lease_ttl_seconds: int = 900
    cors_origins: Tuple[str, ...] = ("*",)

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> "PipelineConfig":
        """Build a config from a parsed ``config.yaml`` dict.

        Raises:
            ConfigError: If a value is out of range or of the wrong type.
        """
        sources = raw.get("sources") or {}
        archive = raw.get("archive") or {}
        ledger = raw.get("error_ledger") or {}
        lease = raw.get("lease") or {}
        api = raw.get("api") or {}

        tables = SourceTables(**{
            key: str(value)
            for key, value in (sources.get("tables") or {}).items()
            if key in SourceTables.__dataclass_fields__
        })
        selection = sources.get("sentiment_selection", "last_row")
        if selection not in SENTIMENT_SELECTION_MODES:
            raise ConfigError(
                f"Invalid sources.sentiment_selection '{selection}': "
                f"expected one of {SENTIMENT_SELECTION_MODES}"
            )

        return cls(
            sources_dir=Path(sources.get("dir", "data/sources")),
            tables=tables,
            remote_tables={str(k): str(v) for k, v in (sources.get("remote") or {}).items()},
            strict_columns=bool(sources.get("strict_columns", False)),
            sentiment_selection=selection,
            archive_path=Path(archive.get("path", "data/archive.csv")),
            retention_days=_positive_int(archive.get("retention_days", 30), "archive.retention_days"),
            error_ledger_path=Path(ledger.get("path", "data/errors.csv")),
            lease_path=Path(lease.get("path", "data/.run_lease.db")),
            lease_ttl_seconds=_positive_int(lease.get("ttl_seconds", 900), "lease.ttl_seconds"),
            cors_origins=tuple(api.get("cors_origins") or ("*",)),
        )


def _positive_int(raw_value: Any, key: str) -> int:
    """Parse a strictly positive integer config value."""
    try:
        value = int(raw_value)
    except (TypeError, ValueError) as error:
        raise ConfigError(f"Invalid {key} value: expected integer, got '{raw_value}'") from error
    if value <= 0:
        raise ConfigError(f"Invalid {key} value: expected a positive integer, got {value}")
    return value
