# quoteflow/api/v1/projects.py
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
from quoteflow.schemas.projects import PaymentIn, ProjectPatchRequest
from quoteflow.services.lifecycle_coordinator import LifecycleCoordinator
from quoteflow.services.records_service import RecordsService

router = APIRouter(prefix="/projects")


@router.get("")
def list_projects(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=10, ge=1, le=100),
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_admin),
    records: RecordsService = Depends(get_records),
):
    rows, total = records.list_projects(db, page=page, limit=limit)
    return {
        "projects": [render.project(p) for p in rows],
        "pagination": render.pagination(page, limit, total),
    }


@router.get("/{project_id}")
def get_project(
    project_id: str,
    db: Session = Depends(get_db),
    _principal: Principal = Depends(require_admin),
    records: RecordsService = Depends(get_records),
):
    return render.project(records.get_project(db, project_id=project_id))


@router.put("/{project_id}")
def update_project(
    project_id: str,
    request: Request,
    body: ProjectPatchRequest,
    principal: Principal = Depends(require_admin),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    result = coordinator.update_project(project_id, body, principal, request_id=request_id_of(request))
    return render.with_warnings({"project": render.project(result.record)}, result.warnings)


@router.post("/{project_id}/payments")
def add_payment(
    project_id: str,
    request: Request,
    body: PaymentIn,
    principal: Principal = Depends(require_admin),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    result = coordinator.record_payment(project_id, body, principal, request_id=request_id_of(request))
    return render.with_warnings({"project": render.project(result.record)}, result.warnings)


@router.post("/{project_id}/images")
def add_project_images(
    project_id: str,
    request: Request,
    files: List[UploadFile] = File(...),
    descriptions: Optional[List[str]] = Form(default=None),
    principal: Principal = Depends(require_admin),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    result = coordinator.update_project(
        project_id,
        ProjectPatchRequest(),
        principal,
        uploads=read_uploads(files, descriptions),
        request_id=request_id_of(request),
    )
    return render.with_warnings({"project": render.project(result.record)}, result.warnings)


@router.delete("/{project_id}")
def delete_project(
    project_id: str,
    request: Request,
    principal: Principal = Depends(require_admin),
    coordinator: LifecycleCoordinator = Depends(get_coordinator),
):
    result = coordinator.delete_project(project_id, principal, request_id=request_id_of(request))
    return render.with_warnings(
        {"message": "Project and invoice deleted", "projectId": project_id},
        result.warnings,
    )
