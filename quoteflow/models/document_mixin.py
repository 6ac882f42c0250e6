from __future__ import annotations

import datetime as dt
from decimal import Decimal
from typing import Any, Dict, List, Optional

from sqlalchemy import Date, DateTime, Numeric, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from quoteflow.db.base import JSONType


def _now() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


Money = Numeric(14, 2)


class ClientDocumentMixin:
    """
    Client + line item + financial columns shared by quotations, projects and invoices.
    JSON lists hold the json-mode dump of the matching schema (quoteflow.schemas.documents).
    """

    client_name: Mapped[str] = mapped_column(String(100), nullable=False)
    client_address: Mapped[str] = mapped_column(String(500), nullable=False)
    client_number: Mapped[str] = mapped_column(String(32), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)

    items: Mapped[List[Dict[str, Any]]] = mapped_column(JSONType, nullable=False, default=list)
    subtotal: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    discount: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    grand_total: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    terms: Mapped[List[str]] = mapped_column(JSONType, nullable=False, default=list)
    note: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    created_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at: Mapped[dt.datetime] = mapped_column(DateTime(timezone=True), nullable=False, default=_now)
