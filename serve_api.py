"""Serve the archive read endpoint.

Usage:
    python serve_api.py [--config config.yaml] [--host 0.0.0.0] [--port 8000]
"""

import argparse
import sys

import uvicorn
from dotenv import load_dotenv

load_dotenv()

from signal_archive.api.app import create_app  # noqa: E402
from signal_archive.core.config import PipelineConfig, load_config  # noqa: E402
from signal_archive.core.errors import ConfigError  # noqa: E402
from signal_archive.core.logger import logger  # noqa: E402


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Serve the signal archive as JSON.")
    parser.add_argument("--config", default=None, help="Path to config.yaml")
    parser.add_argument("--host", default="127.0.0.1")
    parser.add_argument("--port", type=int, default=8000)
    args = parser.parse_args(argv)

    try:
        config = PipelineConfig.from_dict(load_config(args.config))
    except (FileNotFoundError, ValueError, ConfigError) as exc:
        logger.error(f"serve_api: failed to load config: {exc}")
        print(f"ERROR: {exc}", file=sys.stderr)
        return 1

    uvicorn.run(create_app(config), host=args.host, port=args.port)
    return 0


if __name__ == "__main__":
    sys.exit(main())
