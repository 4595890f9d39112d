"""Export helpers: render audit rows as text or write them to XLSX.

All formats go through a pandas DataFrame so the column order is fixed in
one place.
"""

from __future__ import annotations

import json
import logging
import os
import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence

import pandas as pd

from ..core.config import settings
from .term_counts import COLUMNS


LOG = logging.getLogger(__name__)

FORMATS = ("table", "csv", "json", "count")
DEFAULT_SHEET = "term_counts"


def _export_dir() -> str:
    return os.path.join(settings.STORAGE_PATH, "exports")


def rows_to_dataframe(rows: Sequence[Dict[str, Any]], columns: Sequence[str] = COLUMNS) -> pd.DataFrame:
    """Build a DataFrame with exactly `columns`, in order."""
    df = pd.DataFrame.from_records(list(rows), columns=list(columns))
    return df[list(columns)]


def format_items(fmt: str, rows: Sequence[Dict[str, Any]], columns: Sequence[str] = COLUMNS) -> str:
    """Render rows as `table`, `csv`, `json` or `count`.

    `count` renders only the number of rows.
    """
    fmt = (fmt or "table").strip().lower()
    if fmt not in FORMATS:
        raise ValueError(f"Invalid format: {fmt}. Expected one of {', '.join(FORMATS)}")
    if fmt == "count":
        return str(len(rows))
    if fmt == "json":
        records: List[Dict[str, Any]] = [{col: row.get(col) for col in columns} for row in rows]
        return json.dumps(records)

    df = rows_to_dataframe(rows, columns)
    if fmt == "csv":
        return df.to_csv(index=False).rstrip("\n")
    return df.to_string(index=False)


def generate_audit_xlsx(rows: Sequence[Dict[str, Any]], out_path: Optional[str] = None) -> Dict[str, Any]:
    """Write rows to an XLSX file and return its path and row count.

    Without `out_path` every call writes a new uniquely named file under
    the exports directory.
    """
    if out_path is None:
        os.makedirs(_export_dir(), exist_ok=True)
        stamp = datetime.utcnow().strftime("%Y%m%dT%H%M%S")
        out_path = os.path.join(_export_dir(), f"term_count_audit_{stamp}_{uuid.uuid4().hex[:8]}.xlsx")
    else:
        parent = os.path.dirname(out_path)
        if parent:
            os.makedirs(parent, exist_ok=True)

    df = rows_to_dataframe(rows)
    with pd.ExcelWriter(out_path, engine="openpyxl") as writer:
        df.to_excel(writer, sheet_name=DEFAULT_SHEET, index=False)
    LOG.debug("Wrote %d audit rows to %s", len(df), out_path)
    return {"path": out_path, "rows": len(df)}


__all__ = ["FORMATS", "rows_to_dataframe", "format_items", "generate_audit_xlsx"]
