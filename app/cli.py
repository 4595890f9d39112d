"""Command line entry point: ``term-count-audit``.

Audit and fix term counts.

Examples::

    term-count-audit
    term-count-audit --fix
    term-count-audit --format=json
    term-count-audit --verbose
"""
from __future__ import annotations

import argparse
import logging
import sqlite3
import sys
from pathlib import Path
from typing import List, Optional

from tqdm import tqdm

from .core.config import settings
from .core.db import get_connection
from .pipeline.exporter import FORMATS, format_items
from .pipeline.term_counts import TermCountAuditError, audit_term_counts
from .repo.schema import create_tables
from .repo.store import SQLiteTermStore


LOG = logging.getLogger(__name__)


class _PrefixFormatter(logging.Formatter):
    """Format records as ``Warning: ...`` / ``Error: ...``."""

    def format(self, record: logging.LogRecord) -> str:
        label = record.levelname.capitalize()
        return f"{label}: {record.getMessage()}"


def configure_logging(level: str = "WARNING") -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(_PrefixFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(getattr(logging, str(level).upper(), logging.WARNING))


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="term-count-audit", description="Audit and fix term counts.")
    parser.add_argument(
        "--fix",
        action="store_true",
        default=False,
        help="If present, term counts will be updated",
    )
    parser.add_argument(
        "--format",
        choices=list(FORMATS),
        default="table",
        help="Output format (default: table)",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        default=False,
        help="Show all terms, not only those with mismatched counts",
    )
    parser.add_argument("--db", default=None, help=f"Path to the SQLite database (default: {settings.DB_PATH})")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (default: WARNING)")
    parser.add_argument("--no-progress", action="store_true", default=False, help="Hide the progress bar")
    return parser.parse_args(argv)


def run_cli(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    configure_logging(args.log_level)

    db_path = args.db or settings.DB_PATH
    if not Path(db_path).is_file():
        LOG.error("Database not found: %s", db_path)
        return 1
    conn = get_connection(db_path)
    progress: Optional[tqdm] = None

    def on_start(total: int) -> None:
        nonlocal progress
        progress = tqdm(total=total, desc="Calculating term counts", unit="term", disable=args.no_progress)

    def on_progress() -> None:
        if progress is not None:
            progress.update(1)

    try:
        create_tables(conn)
        result = audit_term_counts(
            SQLiteTermStore(conn),
            fix=args.fix,
            verbose=args.verbose,
            on_start=on_start,
            on_progress=on_progress,
        )
    except (TermCountAuditError, sqlite3.Error) as exc:
        LOG.error("%s", exc)
        return 1
    finally:
        if progress is not None:
            progress.close()
        conn.close()

    if not result.rows:
        print("Success: No mismatched counts found")
    else:
        print(format_items(args.format, result.rows))
    return 0


def main() -> None:
    raise SystemExit(run_cli())


if __name__ == "__main__":
    main()


__all__ = ["parse_args", "run_cli", "main"]
