# quoteflow/models/quotation.py
from __future__ import annotations

from typing import Any, Dict, List

from sqlalchemy import Index, String, text
from sqlalchemy.orm import Mapped, mapped_column

from quoteflow.db.base import Base, JSONType
from quoteflow.models.document_mixin import ClientDocumentMixin


class Quotation(ClientDocumentMixin, Base):
    __tablename__ = "quotations"

    quotation_number: Mapped[str] = mapped_column(String(16), primary_key=True)

    site_images: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)

    acceptance_state: Mapped[str] = mapped_column(
        String(16), nullable=False, default="pending", server_default=text("'pending'")
    )

    # append-only AuditEntry dumps
    history: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)

    created_by: Mapped[str] = mapped_column(String(128), nullable=False)

    __table_args__ = (
        Index("ix_quotations_state", "acceptance_state"),
        Index("ix_quotations_created", "created_at"),
    )
