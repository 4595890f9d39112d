"""Database helpers.

Provides `get_connection` and `init_db`. The audit never keeps a global
handle: callers open a connection, pass it down and close it.
"""
from __future__ import annotations

import sqlite3
from pathlib import Path

from .config import settings


def get_connection(db_path: str | None = None) -> sqlite3.Connection:
    """Return a new sqlite3 connection using `db_path` or the configured DB path."""
    return sqlite3.connect(str(db_path or settings.DB_PATH))


def init_db(db_path: str | None = None) -> None:
    """Ensure the database file exists by creating parent directories
    and opening/closing a connection if the file is missing.

    This function does NOT create any tables; see `app.repo.schema`.
    """
    path = Path(db_path or settings.DB_PATH)
    db_dir = path.parent
    if not db_dir.exists():
        db_dir.mkdir(parents=True, exist_ok=True)

    if not path.exists():
        # Connecting will create the sqlite file on disk.
        conn = sqlite3.connect(str(path))
        conn.close()


__all__ = ["get_connection", "init_db"]
