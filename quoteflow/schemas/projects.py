# quoteflow/schemas/projects.py
from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from quoteflow.schemas.documents import ExtraWorkItem, LineItem, Payment, SiteImage
from quoteflow.schemas.primitives import (
    ClientAddress,
    ClientName,
    ClientNumber,
    Money,
    Note,
    PositiveMoney,
)


class PaymentIn(BaseModel):
    model_config = ConfigDict(extra="forbid")

    amount: PositiveMoney
    date: Optional[dt.date] = None  # defaults to today
    note: Optional[str] = Field(default=None, max_length=200)

    def to_payment(self, today: dt.date) -> Payment:
        return Payment(amount=self.amount, date=self.date or today, note=self.note)


class ProjectPatchRequest(BaseModel):
    """
    Partial update of a project. amount_due / status are derived and cannot be supplied.
    """
    model_config = ConfigDict(extra="forbid")

    client_name: Optional[ClientName] = None
    client_address: Optional[ClientAddress] = None
    client_number: Optional[ClientNumber] = None
    date: Optional[dt.date] = None
    items: Optional[List[LineItem]] = Field(default=None, min_length=1)
    extra_work: Optional[List[ExtraWorkItem]] = None
    subtotal: Optional[Money] = None
    discount: Optional[Money] = None
    grand_total: Optional[Money] = None
    terms: Optional[List[str]] = None
    note: Optional[Note] = None
    site_images: Optional[List[SiteImage]] = None

    new_payment: Optional[PaymentIn] = None
