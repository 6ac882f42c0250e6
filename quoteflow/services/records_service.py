# quoteflow/services/records_service.py
from __future__ import annotations

import hmac
from typing import Any, Dict, List, Tuple, Type

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from quoteflow.core.cache import CacheKeys, cache_aside
from quoteflow.core.errors import NotFoundError
from quoteflow.core.kv_store import KeyValueStore
from quoteflow.models.enums import AcceptanceState, ProjectStatus
from quoteflow.models.invoice import Invoice
from quoteflow.models.project import Project
from quoteflow.models.quotation import Quotation


def _page(db: Session, model: Type[Any], order_col: Any, page: int, limit: int) -> Tuple[List[Any], int]:
    total = db.execute(select(func.count()).select_from(model)).scalar_one()
    rows = (
        db.execute(select(model).order_by(order_col.desc()).offset((page - 1) * limit).limit(limit))
        .scalars()
        .all()
    )
    return list(rows), int(total)


class RecordsService:
    """
    Read side: lists, lookups, client invoice access, dashboard stats.
    """

    def __init__(self, *, cache_store: KeyValueStore, stats_ttl_seconds: int = 300):
        self._cache = cache_store
        self._stats_ttl = stats_ttl_seconds

    # ─────────── quotations ───────────

    def list_quotations(self, db: Session, *, page: int = 1, limit: int = 10) -> Tuple[List[Quotation], int]:
        return _page(db, Quotation, Quotation.created_at, page, limit)

    def get_quotation(self, db: Session, *, quotation_number: str) -> Quotation:
        q = db.get(Quotation, quotation_number)
        if q is None:
            raise NotFoundError("Quotation not found")
        return q

    # ─────────── projects ───────────

    def list_projects(self, db: Session, *, page: int = 1, limit: int = 10) -> Tuple[List[Project], int]:
        return _page(db, Project, Project.created_at, page, limit)

    def get_project(self, db: Session, *, project_id: str) -> Project:
        p = db.get(Project, project_id)
        if p is None:
            raise NotFoundError("Project not found")
        return p

    # ─────────── invoices ───────────

    def list_invoices(self, db: Session, *, page: int = 1, limit: int = 10) -> Tuple[List[Invoice], int]:
        return _page(db, Invoice, Invoice.created_at, page, limit)

    def get_invoice(self, db: Session, *, invoice_id: str) -> Invoice:
        inv = db.get(Invoice, invoice_id)
        if inv is None:
            raise NotFoundError("Invoice not found")
        return inv

    def get_invoice_for_client(self, db: Session, *, invoice_id: str, token: str) -> Invoice:
        """
        Unauthenticated access with the invoice's access token.
        Wrong token and unknown invoice are indistinguishable (404).
        """
        inv = db.get(Invoice, invoice_id)
        if inv is None or not token or not hmac.compare_digest(inv.access_token, token):
            raise NotFoundError("Invoice not found")
        return inv

    # ─────────── dashboard ───────────

    def dashboard_stats(self, db: Session) -> Dict[str, Any]:
        return cache_aside(
            self._cache,
            CacheKeys.DASHBOARD_STATS,
            lambda: self._compute_stats(db),
            self._stats_ttl,
        )

    def _compute_stats(self, db: Session) -> Dict[str, Any]:
        by_state = dict(
            db.execute(
                select(Quotation.acceptance_state, func.count()).group_by(Quotation.acceptance_state)
            ).all()
        )
        by_status = dict(
            db.execute(select(Project.status, func.count()).group_by(Project.status)).all()
        )
        billed, due = db.execute(
            select(
                func.coalesce(func.sum(Project.grand_total), 0),
                func.coalesce(func.sum(Project.amount_due), 0),
            )
        ).one()
        invoices = db.execute(select(func.count()).select_from(Invoice)).scalar_one()

        return {
            "quotations": {
                "total": int(sum(by_state.values())),
                "pending": int(by_state.get(AcceptanceState.pending.value, 0)),
                "accepted": int(by_state.get(AcceptanceState.accepted.value, 0)),
                "rejected": int(by_state.get(AcceptanceState.rejected.value, 0)),
            },
            "projects": {
                "total": int(sum(by_status.values())),
                "ongoing": int(by_status.get(ProjectStatus.ongoing.value, 0)),
                "completed": int(by_status.get(ProjectStatus.completed.value, 0)),
            },
            "invoices": {"total": int(invoices)},
            "revenue": {
                "billed": f"{billed:.2f}",
                "outstanding": f"{due:.2f}",
                "collected": f"{(billed - due):.2f}",
            },
        }
