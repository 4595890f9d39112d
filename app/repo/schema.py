"""Database schema for the repository layer.

Defines SQL for the taxonomy, term, relationship and post tables the audit
reads and helpers to create them. The layout follows the WordPress tables
the counts were originally cached in.
"""
from __future__ import annotations

from typing import Any
import sqlite3


POST_TYPES_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS post_types (
    name TEXT PRIMARY KEY
);
"""


TAXONOMIES_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS taxonomies (
    name TEXT PRIMARY KEY,
    update_count_callback TEXT
);
"""


TAXONOMY_OBJECT_TYPES_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS taxonomy_object_types (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    taxonomy TEXT NOT NULL,
    object_type TEXT NOT NULL,
    UNIQUE(taxonomy, object_type)
);
"""


TERMS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS terms (
    term_id INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT,
    slug TEXT
);
"""


TERM_TAXONOMY_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS term_taxonomy (
    term_taxonomy_id INTEGER PRIMARY KEY AUTOINCREMENT,
    term_id INTEGER NOT NULL,
    taxonomy TEXT NOT NULL,
    count INTEGER NOT NULL DEFAULT 0,
    UNIQUE(term_id, taxonomy)
);
"""


POSTS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS posts (
    ID INTEGER PRIMARY KEY AUTOINCREMENT,
    post_type TEXT NOT NULL,
    post_status TEXT NOT NULL,
    post_parent INTEGER NOT NULL DEFAULT 0
);
"""


TERM_RELATIONSHIPS_TABLE_SQL = """
CREATE TABLE IF NOT EXISTS term_relationships (
    object_id INTEGER NOT NULL,
    term_taxonomy_id INTEGER NOT NULL,
    PRIMARY KEY (object_id, term_taxonomy_id)
);
"""


def create_tables(conn: sqlite3.Connection | Any) -> None:
    """Create required tables on the given SQLite connection.

    The function will execute DDL statements and commit the transaction.
    """
    cur = conn.cursor()
    cur.execute(POST_TYPES_TABLE_SQL)
    cur.execute(TAXONOMIES_TABLE_SQL)
    cur.execute(TAXONOMY_OBJECT_TYPES_TABLE_SQL)
    cur.execute(TERMS_TABLE_SQL)
    cur.execute(TERM_TAXONOMY_TABLE_SQL)
    cur.execute(POSTS_TABLE_SQL)
    cur.execute(TERM_RELATIONSHIPS_TABLE_SQL)
    cur.execute("CREATE INDEX IF NOT EXISTS idx_term_relationships_tt ON term_relationships (term_taxonomy_id)")
    conn.commit()


__all__ = [
    "POST_TYPES_TABLE_SQL",
    "TAXONOMIES_TABLE_SQL",
    "TAXONOMY_OBJECT_TYPES_TABLE_SQL",
    "TERMS_TABLE_SQL",
    "TERM_TAXONOMY_TABLE_SQL",
    "POSTS_TABLE_SQL",
    "TERM_RELATIONSHIPS_TABLE_SQL",
    "create_tables",
]
