"""API endpoints to audit and fix cached term counts."""
from __future__ import annotations

import os
from typing import List

from fastapi import APIRouter, HTTPException, status
from fastapi.responses import FileResponse
from pydantic import BaseModel, Field

from ..core.db import init_db, get_connection
from ..pipeline.exporter import generate_audit_xlsx
from ..pipeline.term_counts import AuditResult, TermCountAuditError, audit_term_counts
from ..repo.schema import create_tables
from ..repo.store import SQLiteTermStore

router = APIRouter()


class AuditRowOut(BaseModel):
    id: int = Field(alias="ID")
    taxonomy: str = Field(alias="Taxonomy")
    slug: str = Field(alias="Slug")
    cached_count: int = Field(alias="Cached Count")
    real_count: int = Field(alias="Real Count")
    deviation: int = Field(alias="Deviation")


class AuditOut(BaseModel):
    rows: List[AuditRowOut]
    total_terms: int
    skipped_taxonomies: List[str]


def _init_db_conn():
    init_db()
    conn = get_connection()
    create_tables(conn)
    return conn


def _run_audit(fix: bool, verbose: bool) -> AuditResult:
    conn = _init_db_conn()
    try:
        return audit_term_counts(SQLiteTermStore(conn), fix=fix, verbose=verbose)
    except TermCountAuditError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    except Exception as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    finally:
        try:
            conn.close()
        except Exception:
            pass


@router.get("/term-counts/audit", response_model=AuditOut)
def get_term_count_audit(fix: bool = False, verbose: bool = False):
    """Compare cached term counts with a live recount.

    With `fix=true` every audited term is recounted and persisted first and
    the stored value is reported as the real count.
    """
    result = _run_audit(fix, verbose)
    return result.to_dict()


@router.get("/term-counts/audit/export")
def export_term_count_audit(fix: bool = False, verbose: bool = False):
    """Run the audit and return the rows as an XLSX file."""
    result = _run_audit(fix, verbose)
    try:
        exported = generate_audit_xlsx(result.rows)
    except Exception as exc:
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc)) from exc
    return FileResponse(
        exported["path"],
        media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        filename=os.path.basename(exported["path"]),
    )


@router.get("/term-counts/health")
def health_check():
    """Simple health check endpoint."""
    return {"status": "ok"}


__all__ = ["router"]
