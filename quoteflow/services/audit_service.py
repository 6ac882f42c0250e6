from __future__ import annotations

import datetime as dt
from typing import Any, Dict, List, Optional, Sequence, Tuple

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from quoteflow.models.audit_log import AuditLog
from quoteflow.schemas.documents import AuditEntry


class AuditAction:
    # Quotations
    CREATE_QUOTATION = "create_quotation"
    UPDATE_QUOTATION = "update_quotation"
    UPDATE_QUOTATION_STATUS = "update_quotation_status"
    DELETE_QUOTATION = "delete_quotation"

    # Projects
    UPDATE_PROJECT = "update_project"
    ADD_PROJECT_PAYMENT = "add_project_payment"
    DELETE_PROJECT = "delete_project"


class AuditTrail:
    """
    Per-entity history (the `history` JSON column on quotations and projects).
    Entries are appended by reassigning a new list; prior entries are never touched.
    """

    def append(
        self,
        entity: Any,
        *,
        actor_id: str,
        descriptions: Sequence[str],
        at: Optional[dt.datetime] = None,
    ) -> Optional[AuditEntry]:
        if not descriptions:
            return None

        entry = AuditEntry(
            timestamp=at or dt.datetime.now(dt.timezone.utc),
            actor_id=actor_id,
            change_descriptions=tuple(descriptions),
        )
        entity.history = list(entity.history or []) + [entry.model_dump(mode="json")]
        return entry


class AuditService:
    def write(
        self,
        db: Session,
        *,
        action: str,
        actor_id: str,
        entity_type: str,
        entity_id: str,
        request_id: Optional[str],
        details: Dict[str, Any],
    ) -> AuditLog:
        """
        Insert one top-level audit row in the caller's transaction.
        The caller commits (or rolls back) together with the change it describes.
        """
        row = AuditLog(
            action=action,
            actor_id=actor_id,
            entity_type=entity_type,
            entity_id=entity_id,
            request_id=request_id,
            details_json=details,
        )
        db.add(row)
        db.flush()
        return row

    def list_logs(self, db: Session, *, page: int = 1, limit: int = 20) -> Tuple[List[AuditLog], int]:
        total = db.execute(select(func.count()).select_from(AuditLog)).scalar_one()
        rows = (
            db.execute(
                select(AuditLog)
                .order_by(AuditLog.created_at.desc(), AuditLog.id.desc())
                .offset((page - 1) * limit)
                .limit(limit)
            )
            .scalars()
            .all()
        )
        return list(rows), int(total)
