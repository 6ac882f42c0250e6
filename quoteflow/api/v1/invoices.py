# quoteflow/api/v1/invoices.py
from __future__ import annotations

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from quoteflow.api.v1 import render
from quoteflow.core.auth_deps import require_admin
from quoteflow.core.deps import get_records
from quoteflow.db.session import get_db
from quoteflow.policies.rbac import Principal
from quoteflow.services.records_service import RecordsService

# Invoices are read-only here: every write goes through the owning project.
router = APIRouter(prefix="/invoices")


@router.get("")
def list_invoices(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_admin),
    records: RecordsService = Depends(get_records),
):
    rows, total = records.list_invoices(db, page=page, limit=limit)
    return {
        "invoices": [render.invoice(inv, include_token=True) for inv in rows],
        "pagination": render.pagination(page, limit, total),
    }


@router.get("/{invoice_id}")
def get_invoice(
    invoice_id: str,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_admin),
    records: RecordsService = Depends(get_records),
):
    return render.invoice(records.get_invoice(db, invoice_id=invoice_id), include_token=True)


@router.get("/{invoice_id}/client")
def get_invoice_for_client(
    invoice_id: str,
    token: str = Query(..., min_length=1),
    db: Session = Depends(get_db),
    records: RecordsService = Depends(get_records),
):
    return render.invoice(records.get_invoice_for_client(db, invoice_id=invoice_id, token=token))
