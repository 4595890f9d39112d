"""Term count audit pipeline.

Compares each term's cached count with a live recount built from its
relationships and the status of the related posts, and optionally persists
the corrected count through the store's authoritative recount.

The flow is: select taxonomies, enumerate their terms, recount (or fix)
each term, keep rows that deviate (all rows when verbose).
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol, Sequence, Tuple

from ..core.config import settings


LOG = logging.getLogger(__name__)

# Column order of every rendered report.
COLUMNS: Tuple[str, ...] = ("ID", "Taxonomy", "Slug", "Cached Count", "Real Count", "Deviation")


class TermCountAuditError(Exception):
    """Base class for fatal audit errors."""


class NoGroupsFound(TermCountAuditError):
    def __init__(self, message: str = "No taxonomies found!") -> None:
        super().__init__(message)


class NoEntitiesFound(TermCountAuditError):
    def __init__(self, message: str = "No terms found!") -> None:
        super().__init__(message)


class TermCountStore(Protocol):
    def get_taxonomies(self) -> List[Dict[str, Any]]: ...

    def post_type_exists(self, name: str) -> bool: ...

    def count_terms(self, taxonomy_names: Sequence[str]) -> int: ...

    def list_terms(self, taxonomy: str) -> List[Dict[str, Any]]: ...

    def get_term_by_tt_id(self, term_taxonomy_id: int) -> Optional[Dict[str, Any]]: ...

    def update_term_count_now(self, term_taxonomy_ids: Iterable[int], taxonomy: str) -> None: ...

    def count_attachment_relations(self, term_taxonomy_id: int) -> int: ...

    def count_published_relations(self, term_taxonomy_id: int, post_types: Sequence[str]) -> int: ...


@dataclass
class AuditResult:
    rows: List[Dict[str, Any]] = field(default_factory=list)
    total_terms: int = 0
    skipped_taxonomies: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "rows": list(self.rows),
            "total_terms": self.total_terms,
            "skipped_taxonomies": list(self.skipped_taxonomies),
        }


def select_taxonomies(
    taxonomies: Sequence[Dict[str, Any]], fix: bool
) -> Tuple[List[Dict[str, Any]], List[str]]:
    """Return the taxonomies to audit and the names of those skipped.

    Taxonomies with a custom count callback cannot be recounted generically,
    so they are skipped unless `fix` is set.
    """
    selected: List[Dict[str, Any]] = []
    skipped: List[str] = []
    for tax in taxonomies:
        if not fix and tax.get("update_count_callback"):
            LOG.warning(
                "Skipping the `%s` taxonomy, which has a custom count callback. "
                "Using `--fix` will still update this taxonomy and report on any deviations it finds",
                tax["name"],
            )
            skipped.append(tax["name"])
            continue
        selected.append(tax)
    if not selected:
        raise NoGroupsFound()
    return selected, skipped


def normalize_object_types(object_types: Iterable[str]) -> Tuple[List[str], bool]:
    """Strip sub-scopes (``page:landing`` -> ``page``), dedupe, pull out attachments.

    Returns the remaining types in first-seen order and whether attachments
    need counting.
    """
    normalized: List[str] = []
    for object_type in object_types:
        base = str(object_type).split(":", 1)[0]
        if base not in normalized:
            normalized.append(base)
    check_attachments = settings.ATTACHMENT_TYPE in normalized
    if check_attachments:
        normalized.remove(settings.ATTACHMENT_TYPE)
    return normalized, check_attachments


def count_term(store: TermCountStore, term_taxonomy_id: int, taxonomy: Dict[str, Any]) -> int:
    """Live count of a term. Read-only."""
    object_types, check_attachments = normalize_object_types(taxonomy.get("object_types") or [])

    valid_types: List[str] = []
    for object_type in object_types:
        if store.post_type_exists(object_type):
            valid_types.append(object_type)
        else:
            LOG.debug("Ignoring unregistered post type '%s' for taxonomy %s", object_type, taxonomy.get("name"))

    count = 0
    if check_attachments:
        count += int(store.count_attachment_relations(term_taxonomy_id))
    if valid_types:
        count += int(store.count_published_relations(term_taxonomy_id, valid_types))
    return count


def fix_term(store: TermCountStore, term: Dict[str, Any]) -> int:
    """Run the authoritative recount for a term and return the re-read count."""
    store.update_term_count_now([term["term_taxonomy_id"]], term["taxonomy"])
    refreshed = store.get_term_by_tt_id(term["term_taxonomy_id"])
    if refreshed is None:
        raise ValueError(f"Term not found after recount: {term['term_taxonomy_id']}")
    new_count = int(refreshed["count"])
    if new_count != int(term["count"]):
        LOG.info("Fixed %s/%s: %s -> %s", term["taxonomy"], term["slug"], term["count"], new_count)
    return new_count


def build_row(term: Dict[str, Any], real_count: int) -> Dict[str, Any]:
    cached = int(term["count"])
    return {
        "ID": term["term_id"],
        "Taxonomy": term["taxonomy"],
        "Slug": term["slug"],
        "Cached Count": cached,
        "Real Count": int(real_count),
        "Deviation": cached - int(real_count),
    }


def audit_term_counts(
    store: TermCountStore,
    fix: bool = False,
    verbose: bool = False,
    on_start: Optional[Callable[[int], None]] = None,
    on_progress: Optional[Callable[[], None]] = None,
) -> AuditResult:
    """Audit (and with `fix`, correct) the cached count of every term.

    `on_start` receives the number of terms about to be processed and
    `on_progress` is called once per term. Raises `NoGroupsFound` or
    `NoEntitiesFound` before any term is processed.
    """
    if store is None:
        raise ValueError("A valid term store is required")
    selected, skipped = select_taxonomies(store.get_taxonomies(), fix)

    total_terms = int(store.count_terms([tax["name"] for tax in selected]))
    if not total_terms:
        raise NoEntitiesFound()
    if on_start is not None:
        on_start(total_terms)

    result = AuditResult(total_terms=total_terms, skipped_taxonomies=skipped)
    for tax in selected:
        for term in store.list_terms(tax["name"]):
            if fix:
                real_count = fix_term(store, term)
            else:
                real_count = count_term(store, term["term_taxonomy_id"], tax)
            row = build_row(term, real_count)

            # zero deviations are hidden unless verbose
            if verbose or row["Deviation"]:
                result.rows.append(row)

            if on_progress is not None:
                on_progress()
    return result


__all__ = [
    "COLUMNS",
    "TermCountAuditError",
    "NoGroupsFound",
    "NoEntitiesFound",
    "TermCountStore",
    "AuditResult",
    "select_taxonomies",
    "normalize_object_types",
    "count_term",
    "fix_term",
    "build_row",
    "audit_term_counts",
]
