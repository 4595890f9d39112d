"""SQLite adapter binding one connection to the repository helpers.

`SQLiteTermStore` satisfies `app.pipeline.term_counts.TermCountStore`, so
the audit never talks to sqlite directly.
"""
from __future__ import annotations

import sqlite3
from typing import Any, Dict, Iterable, List, Optional, Sequence

from . import relations, taxonomies, terms


class SQLiteTermStore:
    def __init__(self, conn: sqlite3.Connection) -> None:
        if conn is None:
            raise ValueError("A valid DB connection is required")
        self.conn = conn

    # group registry
    def get_taxonomies(self) -> List[Dict[str, Any]]:
        return taxonomies.get_taxonomies(self.conn)

    def post_type_exists(self, name: str) -> bool:
        return taxonomies.post_type_exists(self.conn, name)

    # entity store
    def count_terms(self, taxonomy_names: Sequence[str]) -> int:
        return terms.count_terms(self.conn, taxonomy_names)

    def list_terms(self, taxonomy: str) -> List[Dict[str, Any]]:
        return terms.list_terms(self.conn, taxonomy)

    def get_term_by_tt_id(self, term_taxonomy_id: int) -> Optional[Dict[str, Any]]:
        return terms.get_term_by_tt_id(self.conn, term_taxonomy_id)

    def update_term_count_now(self, term_taxonomy_ids: Iterable[int], taxonomy: str) -> None:
        terms.update_term_count_now(self.conn, term_taxonomy_ids, taxonomy)

    # relation/subject store
    def count_attachment_relations(self, term_taxonomy_id: int) -> int:
        return relations.count_attachment_relations(self.conn, term_taxonomy_id)

    def count_published_relations(self, term_taxonomy_id: int, post_types: Sequence[str]) -> int:
        return relations.count_published_relations(self.conn, term_taxonomy_id, post_types)


__all__ = ["SQLiteTermStore"]
