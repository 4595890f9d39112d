"""Repository helpers for the taxonomy and post type registries.

Taxonomies are returned as dicts with keys `name`, `update_count_callback`
and `object_types` (the post types the taxonomy is attached to, in
registration order).
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional


def register_post_type(conn: Any, name: str) -> None:
    """Register a post type. Registering twice is a no-op."""
    cur = conn.cursor()
    cur.execute("INSERT OR IGNORE INTO post_types (name) VALUES (?)", (name,))
    conn.commit()


def post_type_exists(conn: Any, name: str) -> bool:
    cur = conn.cursor()
    cur.execute("SELECT 1 FROM post_types WHERE name = ?", (name,))
    return cur.fetchone() is not None


def register_taxonomy(
    conn: Any,
    name: str,
    object_types: Iterable[str] = (),
    update_count_callback: str | None = None,
) -> None:
    """Create or update a taxonomy and attach it to `object_types`.

    Object types may carry a sub-scope after a colon (``page:landing``);
    they are stored exactly as given.
    """
    cur = conn.cursor()
    cur.execute("SELECT name FROM taxonomies WHERE name = ?", (name,))
    if cur.fetchone():
        cur.execute(
            "UPDATE taxonomies SET update_count_callback = ? WHERE name = ?",
            (update_count_callback, name),
        )
    else:
        cur.execute(
            "INSERT INTO taxonomies (name, update_count_callback) VALUES (?, ?)",
            (name, update_count_callback),
        )
    for object_type in object_types:
        cur.execute(
            "INSERT OR IGNORE INTO taxonomy_object_types (taxonomy, object_type) VALUES (?, ?)",
            (name, object_type),
        )
    conn.commit()


def _load_object_types(conn: Any, name: str) -> List[str]:
    cur = conn.cursor()
    cur.execute(
        "SELECT object_type FROM taxonomy_object_types WHERE taxonomy = ? ORDER BY id",
        (name,),
    )
    return [r[0] for r in cur.fetchall()]


def get_taxonomy(conn: Any, name: str) -> Optional[Dict[str, Any]]:
    """Return the taxonomy `name` or None when it is not registered."""
    cur = conn.cursor()
    cur.execute("SELECT name, update_count_callback FROM taxonomies WHERE name = ?", (name,))
    row = cur.fetchone()
    if not row:
        return None
    return {
        "name": row[0],
        "update_count_callback": row[1] or None,
        "object_types": _load_object_types(conn, row[0]),
    }


def get_taxonomies(conn: Any) -> List[Dict[str, Any]]:
    """Return every registered taxonomy ordered by name."""
    cur = conn.cursor()
    cur.execute("SELECT name FROM taxonomies ORDER BY name")
    names = [r[0] for r in cur.fetchall()]
    taxonomies: List[Dict[str, Any]] = []
    for name in names:
        tax = get_taxonomy(conn, name)
        if tax is not None:
            taxonomies.append(tax)
    return taxonomies


__all__ = [
    "register_post_type",
    "post_type_exists",
    "register_taxonomy",
    "get_taxonomy",
    "get_taxonomies",
]
