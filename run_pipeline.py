"""Signal archive pipeline entry point.

Usage:
    python run_pipeline.py [--config config.yaml] [--date YYYY-MM-DD]

The daily scheduler and manual runs both go through this script, which calls
``run_once``. Reports success/failure to stdout and the pipeline log.
"""

import argparse
import sys
from datetime import datetime

from dotenv import load_dotenv

load_dotenv()  # must precede package imports so env vars are available at module load

from signal_archive.core.config import PipelineConfig, load_config  # noqa: E402
from signal_archive.core.errors import ConfigError  # noqa: E402
from signal_archive.core.logger import logger  # noqa: E402
from signal_archive.pipeline.engine import run_once  # noqa: E402


def _run_date(value: str) -> str:
    try:
        return datetime.strptime(value, "%Y-%m-%d").date().isoformat()
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected YYYY-MM-DD, got {value!r}") from exc


def main(argv: list[str] | None = None) -> int:
    """Run the pipeline once. Returns 0 on success, 1 on failure."""
    parser = argparse.ArgumentParser(description="Sync, merge and archive daily trading signals.")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--date", type=_run_date, default=None, help="Override run date (YYYY-MM-DD)")
    args = parser.parse_args(argv)

    try:
        config = PipelineConfig.from_dict(load_config(args.config))
    except (FileNotFoundError, ValueError, ConfigError) as exc:
        logger.error(f"run_pipeline: failed to load config: {exc}")
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    try:
        report = run_once(config, run_date=args.date)
    except Exception as exc:
        logger.error(f"run_pipeline: pipeline raised: {exc}", exc_info=True)
        print(f"ERROR: pipeline failed — {exc}", file=sys.stderr)
        return 1

    print(
        f"SUCCESS: {report.rows_archived} rows archived for {report.run_date} "
        f"({report.rows_rejected} rejected, {report.rows_swept} swept) → {config.archive_path}"
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
