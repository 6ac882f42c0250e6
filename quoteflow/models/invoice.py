# quoteflow/models/invoice.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from quoteflow.db.base import Base, JSONType
from quoteflow.models.document_mixin import ClientDocumentMixin, Money


class Invoice(ClientDocumentMixin, Base):
    """
    Client-facing mirror of a Project. Ledger fields are copied from the
    project on every project write; nothing writes them directly.
    """
    __tablename__ = "invoices"

    invoice_id: Mapped[str] = mapped_column(String(16), primary_key=True)
    project_id: Mapped[str] = mapped_column(String(16), nullable=False)
    quotation_number: Mapped[str] = mapped_column(String(16), nullable=False)

    extra_work: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    payment_history: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    amount_due: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    access_token: Mapped[str] = mapped_column(String(64), nullable=False)

    __table_args__ = (
        UniqueConstraint("project_id", name="uq_invoices_project_id"),
        UniqueConstraint("access_token", name="uq_invoices_access_token"),
    )
