"""Repository helpers for posts and their term relationships.

The two `count_*` functions are the only queries the live recount issues.
Both are read-only and bind every value, including the post type list.
"""
from __future__ import annotations

from typing import Any, Iterable, List, Sequence

from ..core.config import settings


ATTACHMENT_COUNT_SQL = """
SELECT COUNT(*)
FROM term_relationships tr
JOIN posts p1 ON p1.ID = tr.object_id
LEFT JOIN posts parent ON parent.ID = p1.post_parent
WHERE tr.term_taxonomy_id = ?
  AND p1.post_type = ?
  AND (
    p1.post_status = ?
    OR (p1.post_status = ? AND p1.post_parent = 0)
    OR (p1.post_status = ? AND p1.post_parent > 0 AND parent.post_status = ?)
  )
"""


def insert_post(conn: Any, post_type: str, post_status: str, post_parent: int = 0) -> int:
    """Insert a post row and return its id. Commits the transaction."""
    cur = conn.cursor()
    cur.execute(
        "INSERT INTO posts (post_type, post_status, post_parent) VALUES (?, ?, ?)",
        (post_type, post_status, int(post_parent or 0)),
    )
    conn.commit()
    return int(cur.lastrowid)


def relate(conn: Any, object_id: int, term_taxonomy_ids: Iterable[int]) -> None:
    """Link a post to one or more terms. Does not touch cached counts."""
    cur = conn.cursor()
    for tt_id in term_taxonomy_ids:
        cur.execute(
            "INSERT OR IGNORE INTO term_relationships (object_id, term_taxonomy_id) VALUES (?, ?)",
            (int(object_id), int(tt_id)),
        )
    conn.commit()


def count_attachment_relations(conn: Any, term_taxonomy_id: int) -> int:
    """Count attachments related to a term whose effective status is published.

    An attachment counts when it is published itself, when it inherits its
    status and has no parent, or when it inherits and its parent is
    published. An inheriting attachment whose parent row is missing does not
    count.
    """
    cur = conn.cursor()
    cur.execute(
        ATTACHMENT_COUNT_SQL,
        (
            int(term_taxonomy_id),
            settings.ATTACHMENT_TYPE,
            settings.PUBLISH_STATUS,
            settings.INHERIT_STATUS,
            settings.INHERIT_STATUS,
            settings.PUBLISH_STATUS,
        ),
    )
    row = cur.fetchone()
    return int(row[0]) if row and row[0] is not None else 0


def count_published_relations(conn: Any, term_taxonomy_id: int, post_types: Sequence[str]) -> int:
    """Count published posts of `post_types` related to a term.

    `post_types` must already be validated against the registered post
    types; it is bound with one placeholder per entry.
    """
    types: List[str] = [str(t) for t in post_types]
    if not types:
        return 0
    placeholders = ", ".join("?" for _ in types)
    sql = (
        "SELECT COUNT(*) FROM term_relationships tr "
        "JOIN posts p ON p.ID = tr.object_id "
        f"WHERE tr.term_taxonomy_id = ? AND p.post_status = ? AND p.post_type IN ({placeholders})"
    )
    cur = conn.cursor()
    cur.execute(sql, (int(term_taxonomy_id), settings.PUBLISH_STATUS, *types))
    row = cur.fetchone()
    return int(row[0]) if row and row[0] is not None else 0


def count_all_relations(conn: Any, term_taxonomy_id: int) -> int:
    """Count every relationship of a term regardless of post type or status."""
    cur = conn.cursor()
    cur.execute(
        "SELECT COUNT(*) FROM term_relationships WHERE term_taxonomy_id = ?",
        (int(term_taxonomy_id),),
    )
    row = cur.fetchone()
    return int(row[0]) if row and row[0] is not None else 0


__all__ = [
    "ATTACHMENT_COUNT_SQL",
    "insert_post",
    "relate",
    "count_attachment_relations",
    "count_published_relations",
    "count_all_relations",
]
