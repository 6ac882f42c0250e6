from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from quoteflow.api.v1.render import pagination
from quoteflow.core.auth_deps import require
from quoteflow.db.session import get_db
from quoteflow.policies.rbac import ACTION_VIEW_AUDIT
from quoteflow.services.audit_service import AuditService

router = APIRouter(prefix="/audit-logs")


def _resp(row) -> dict:
    return {
        "id": str(row.id),
        "action": row.action,
        "userId": row.actor_id,
        "entityType": row.entity_type,
        "entityId": row.entity_id,
        "requestId": row.request_id,
        "details": row.details_json or {},
        "createdAtIso": row.created_at.isoformat() if row.created_at else None,
    }


@router.get("")
def list_audit_logs(
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    db: Session = Depends(get_db),
    _principal=Depends(require(ACTION_VIEW_AUDIT)),
):
    rows, total = AuditService().list_logs(db, page=page, limit=limit)
    return {"logs": [_resp(r) for r in rows], "pagination": pagination(page, limit, total)}
