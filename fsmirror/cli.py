"""Command line entry point: ``fsmirror CATALOG [--config CONFIG]``."""
from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

from .config import LoggingConfig, load_config
from .exceptions import ConfigurationError
from .pipeline import Pipeline
from .utils.logging_cfg import configure_logging
from .utils.run_summary import Summary

EXIT_OK = 0
EXIT_FAILURES = 1
EXIT_ABORTED = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Download a scoped remote file store into a local directory tree"
    )
    parser.add_argument("catalog", type=Path, help="Catalog YAML listing the entries per scope")
    parser.add_argument("--config", type=Path, default=None, help="Configuration YAML")
    parser.add_argument("--root-dir", default=None, help="Local storage root (default: filestore)")
    parser.add_argument("--workers", type=int, default=None, help="Number of concurrent downloads")
    parser.add_argument("--failed-report", default=None,
                        help="Write failed entries to this catalog file so they can be re-run")
    parser.add_argument("--log-level", default=None, help="Console log level")
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)

    try:
        config = load_config(args.config)
        if args.root_dir:
            config.paths.root_dir = args.root_dir
        if args.workers is not None:
            config.processing = replace(config.processing, workers=args.workers)
        if args.failed_report:
            config.processing.failed_report = args.failed_report
        if args.log_level:
            config.logging = LoggingConfig(console_level=args.log_level.upper())
    except ConfigurationError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return EXIT_ABORTED

    configure_logging(level_on_console=config.logging.console_level, log_dir=config.paths.logs)

    summary = Summary()
    try:
        Pipeline(args.catalog, config=config, summary=summary).run()
    except ConfigurationError as exc:
        logging.getLogger("summary").error("❌ %s", exc)
        return EXIT_ABORTED
    finally:
        summary.dump()

    if summary.aborted:
        return EXIT_ABORTED
    return EXIT_FAILURES if summary.has_failures else EXIT_OK


if __name__ == "__main__":
    sys.exit(main())
