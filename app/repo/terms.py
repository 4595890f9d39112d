"""Repository helpers for terms and their cached counts.

Terms are returned as dicts with keys `term_id`, `name`, `slug`, `taxonomy`,
`term_taxonomy_id` and `count`. `update_term_count_now` is the authoritative
recount-and-persist procedure; taxonomies with a custom count callback are
recounted by the callback registered under that name.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence

from ..core.config import settings
from .relations import count_all_relations, count_attachment_relations, count_published_relations
from .taxonomies import get_taxonomy, post_type_exists


LOG = logging.getLogger(__name__)

_TERM_COLUMNS = "t.term_id, t.name, t.slug, tt.taxonomy, tt.term_taxonomy_id, tt.count"

CountCallback = Callable[[Any, Sequence[int], Dict[str, Any]], None]


def _row_to_term(row) -> Dict[str, Any]:
    return {
        "term_id": int(row[0]),
        "name": row[1],
        "slug": row[2],
        "taxonomy": row[3],
        "term_taxonomy_id": int(row[4]),
        "count": int(row[5] or 0),
    }


def insert_term(conn: Any, taxonomy: str, slug: str, name: str | None = None, count: int = 0) -> Dict[str, Any]:
    """Create a term in `taxonomy` with an initial cached `count`.

    Returns the created term dict. Commits the transaction.
    """
    cur = conn.cursor()
    cur.execute("INSERT INTO terms (name, slug) VALUES (?, ?)", (name or slug, slug))
    term_id = cur.lastrowid
    cur.execute(
        "INSERT INTO term_taxonomy (term_id, taxonomy, count) VALUES (?, ?, ?)",
        (term_id, taxonomy, int(count)),
    )
    tt_id = cur.lastrowid
    conn.commit()
    return {
        "term_id": int(term_id),
        "name": name or slug,
        "slug": slug,
        "taxonomy": taxonomy,
        "term_taxonomy_id": int(tt_id),
        "count": int(count),
    }


def set_cached_count(conn: Any, term_taxonomy_id: int, count: int) -> None:
    """Overwrite the cached count of a term. Commits the transaction."""
    cur = conn.cursor()
    cur.execute(
        "UPDATE term_taxonomy SET count = ? WHERE term_taxonomy_id = ?",
        (int(count), int(term_taxonomy_id)),
    )
    conn.commit()


def count_terms(conn: Any, taxonomies: Sequence[str]) -> int:
    """Return how many terms exist across `taxonomies`, empty ones included."""
    names = list(taxonomies)
    if not names:
        return 0
    placeholders = ", ".join("?" for _ in names)
    cur = conn.cursor()
    cur.execute(f"SELECT COUNT(*) FROM term_taxonomy WHERE taxonomy IN ({placeholders})", tuple(names))
    row = cur.fetchone()
    return int(row[0]) if row else 0


def list_terms(conn: Any, taxonomy: str) -> List[Dict[str, Any]]:
    """Return every term of `taxonomy` ordered by name, empty ones included."""
    cur = conn.cursor()
    cur.execute(
        f"""
        SELECT {_TERM_COLUMNS}
        FROM term_taxonomy tt
        JOIN terms t ON t.term_id = tt.term_id
        WHERE tt.taxonomy = ?
        ORDER BY t.name ASC, tt.term_taxonomy_id ASC
        """,
        (taxonomy,),
    )
    return [_row_to_term(r) for r in cur.fetchall()]


def get_term_by_tt_id(conn: Any, term_taxonomy_id: int) -> Optional[Dict[str, Any]]:
    """Fetch a single term by its term_taxonomy_id, or None."""
    cur = conn.cursor()
    cur.execute(
        f"""
        SELECT {_TERM_COLUMNS}
        FROM term_taxonomy tt
        JOIN terms t ON t.term_id = tt.term_id
        WHERE tt.term_taxonomy_id = ?
        """,
        (int(term_taxonomy_id),),
    )
    row = cur.fetchone()
    return _row_to_term(row) if row else None


def update_post_term_count(conn: Any, term_taxonomy_ids: Sequence[int], taxonomy: Dict[str, Any]) -> None:
    """Standard recount: published posts of the taxonomy's registered types.

    Attachments count when published or when inheriting from no parent or
    from a published parent.
    """
    object_types: List[str] = []
    for object_type in taxonomy.get("object_types") or []:
        base = str(object_type).split(":", 1)[0]
        if base not in object_types:
            object_types.append(base)

    check_attachments = settings.ATTACHMENT_TYPE in object_types
    if check_attachments:
        object_types.remove(settings.ATTACHMENT_TYPE)
    object_types = [t for t in object_types if post_type_exists(conn, t)]

    cur = conn.cursor()
    for tt_id in term_taxonomy_ids:
        count = 0
        if check_attachments:
            count += count_attachment_relations(conn, tt_id)
        if object_types:
            count += count_published_relations(conn, tt_id, object_types)
        cur.execute(
            "UPDATE term_taxonomy SET count = ? WHERE term_taxonomy_id = ?",
            (count, int(tt_id)),
        )
    conn.commit()


def update_generic_term_count(conn: Any, term_taxonomy_ids: Sequence[int], taxonomy: Dict[str, Any]) -> None:
    """Recount every relationship regardless of object status."""
    cur = conn.cursor()
    for tt_id in term_taxonomy_ids:
        cur.execute(
            "UPDATE term_taxonomy SET count = ? WHERE term_taxonomy_id = ?",
            (count_all_relations(conn, tt_id), int(tt_id)),
        )
    conn.commit()


COUNT_CALLBACKS: Dict[str, CountCallback] = {
    "generic": update_generic_term_count,
}


def register_count_callback(name: str, callback: CountCallback) -> None:
    """Register a custom count callback usable as a taxonomy's `update_count_callback`."""
    COUNT_CALLBACKS[name] = callback


def update_term_count_now(conn: Any, term_taxonomy_ids: Iterable[int], taxonomy: str) -> None:
    """Recount and persist the cached count of the given terms.

    Uses the taxonomy's custom callback when it has one, the standard post
    recount otherwise.
    """
    tax = get_taxonomy(conn, taxonomy)
    if tax is None:
        raise ValueError(f"Taxonomy not found: {taxonomy}")
    tt_ids = [int(t) for t in term_taxonomy_ids]
    callback_name = tax.get("update_count_callback")
    if callback_name:
        callback = COUNT_CALLBACKS.get(callback_name)
        if callback is None:
            raise ValueError(f"Unknown count callback '{callback_name}' for taxonomy {taxonomy}")
        callback(conn, tt_ids, tax)
    else:
        update_post_term_count(conn, tt_ids, tax)
    LOG.debug("Recounted %d term(s) in %s", len(tt_ids), taxonomy)


__all__ = [
    "insert_term",
    "set_cached_count",
    "count_terms",
    "list_terms",
    "get_term_by_tt_id",
    "update_post_term_count",
    "update_generic_term_count",
    "COUNT_CALLBACKS",
    "register_count_callback",
    "update_term_count_now",
]
