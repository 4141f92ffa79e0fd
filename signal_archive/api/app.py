"""Read endpoint serving the whole archive as JSON."""

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from signal_archive.core.config import PipelineConfig
from signal_archive.core.logger import logger
from signal_archive.core.values import to_float
from signal_archive.models.datatypes import NUMERIC_ARCHIVE_COLUMNS
from signal_archive.sources.base import TabularDataSource
from signal_archive.sources.csv_table import CsvTable

ARCHIVE_NOT_FOUND = "Archive data not found"


def read_archive(table: TabularDataSource) -> Dict[str, Any]:
    """Return ``{success, data, lastUpdated}`` for the current archive.

    Never raises: a missing archive or any read failure becomes ``{"error": ...}``.
    """
    try:
        if not table.exists():
            return {"error": ARCHIVE_NOT_FOUND}
        rows = table.read_all()
        data = _rows_to_records(rows)
        last_updated = table.last_modified() or datetime.now(timezone.utc)
    except Exception as exc:
        logger.error(f"read_archive: failed to read archive: {exc}", exc_info=True)
        return {"error": f"Failed to read archive: {exc}"}

    return {
        "success": True,
        "data": data,
        "lastUpdated": last_updated.isoformat(),
    }


def create_app(
    config: Optional[PipelineConfig] = None,
    archive_table: Optional[TabularDataSource] = None,
) -> FastAPI:
    """Build the read API.

    Args:
        config: Pipeline configuration (defaults are used if omitted).
        archive_table: Archive to serve; defaults to ``CsvTable(config.archive_path)``.
    """
    config = config or PipelineConfig()
    table = archive_table or CsvTable(config.archive_path, name="archive")

    app = FastAPI(title="Signal Archive", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=list(config.cors_origins),
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.get("/")
    @app.get("/signals")
    def get_signals() -> JSONResponse:
        return JSONResponse(read_archive(table), status_code=200)

    return app


def _rows_to_records(rows: List[List[str]]) -> List[Dict[str, Any]]:
    """Turn header + data rows into flat mappings, numeric columns as numbers, blanks as null."""
    if not rows:
        return []
    header = rows[0]
    records = []
    for row in rows[1:]:
        record: Dict[str, Any] = {}
        for i, column in enumerate(header):
            raw = row[i] if i < len(row) else ""
            if column in NUMERIC_ARCHIVE_COLUMNS:
                record[column] = to_float(raw)
            else:
                record[column] = raw if raw != "" else None
        records.append(record)
    return records
