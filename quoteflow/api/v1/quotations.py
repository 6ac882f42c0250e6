# quoteflow/api/v1/quotations.py
from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, Request, UploadFile
from sqlalchemy.orm import Session

from quoteflow.api.v1 import render
from quoteflow.api.v1.uploads import read_uploads
from quoteflow.core.auth_deps import require_admin
from quoteflow.core.deps import get_coordinator, get_records
from quoteflow.core.middleware import request_id_of
from quoteflow.db.session import get_db
from quoteflow.policies.rbac import Principal
from quoteflow.schemas.quotations import QuotationCreateRequest, QuotationPatchRequest
from quoteflow.services.lifecycle_coordinator import LifecycleCoordinator
from quoteflow.services.records_service import RecordsService

router = APIRouter(prefix="/quotations")


@router.post("", status_code=201)
def create_quotation(
    request: Request,
    body: QuotationCreateRequest,
    principal: Principal = Depends(require_admin),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    result = coordinator.create_quotation(body, principal, request_id=request_id_of(request))
    return render.with_warnings({"quotation": render.quotation(result.record)}, result.warnings)


@router.get("")
def list_quotations(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_admin),
    records: RecordsService = Depends(get_records),
):
    rows, total = records.list_quotations(db, page=page, limit=limit)
    return {
        "quotations": [render.quotation(q) for q in rows],
        "pagination": render.pagination(page, limit, total),
    }


@router.get("/{quotation_number}")
def get_quotation(
    quotation_number: str,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_admin),
    records: RecordsService = Depends(get_records),
):
    return render.quotation(records.get_quotation(db, quotation_number=quotation_number))


@router.put("/{quotation_number}")
def update_quotation(
    quotation_number: str,
    request: Request,
    body: QuotationPatchRequest,
    principal: Principal = Depends(require_admin),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    result = coordinator.update_quotation(
        quotation_number, body, principal, request_id=request_id_of(request)
    )
    return render.with_warnings({"quotation": render.quotation(result.record)}, result.warnings)


@router.post("/{quotation_number}/images")
def add_quotation_images(
    quotation_number: str,
    request: Request,
    files: List[UploadFile] = File(...),
    descriptions: Optional[List[str]] = Form(default=None),
    principal: Principal = Depends(require_admin),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    result = coordinator.update_quotation(
        quotation_number,
        QuotationPatchRequest(),
        principal,
        uploads=read_uploads(files, descriptions),
        request_id=request_id_of(request),
    )
    return render.with_warnings({"quotation": render.quotation(result.record)}, result.warnings)


@router.delete("/{quotation_number}")
def delete_quotation(
    quotation_number: str,
    request: Request,
    principal: Principal = Depends(require_admin),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    result = coordinator.delete_quotation(quotation_number, principal, request_id=request_id_of(request))
    return render.with_warnings(
        {"message": "Quotation, project, and invoice deleted", "quotationNumber": quotation_number},
        result.warnings,
    )
