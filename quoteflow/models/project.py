# quoteflow/models/project.py
from __future__ import annotations

from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy import Index, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column

from quoteflow.db.base import Base, JSONType
from quoteflow.models.document_mixin import ClientDocumentMixin, Money


class Project(ClientDocumentMixin, Base):
    __tablename__ = "projects"

    project_id: Mapped[str] = mapped_column(String(16), primary_key=True)
    quotation_number: Mapped[str] = mapped_column(String(16), nullable=False)

    extra_work: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    payment_history: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    site_images: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)

    # derived by PaymentLedger on every write
    amount_due: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="ongoing", server_default=text("'ongoing'")
    )

    history: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)

    created_by: Mapped[str] = mapped_column(String(128), nullable=False)

    __table_args__ = (
        # one project per quotation: backstop for concurrent acceptance
        UniqueConstraint("quotation_number", name="uq_projects_quotation_number"),
        Index("ix_projects_status", "status"),
        Index("ix_projects_created", "created_at"),
    )
