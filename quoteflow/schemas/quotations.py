# quoteflow/schemas/quotations.py
from __future__ import annotations

import datetime as dt
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from quoteflow.models.enums import AcceptanceState
from quoteflow.schemas.documents import LineItem, SiteImage
from quoteflow.schemas.primitives import ClientAddress, ClientName, ClientNumber, Money, Note


class QuotationCreateRequest(BaseModel):
    model_config = ConfigDict(extra="forbid")

    client_name: ClientName
    client_address: ClientAddress
    client_number: ClientNumber
    date: dt.date
    items: List[LineItem] = Field(..., min_length=1)
    subtotal: Money = 0
    discount: Money = 0
    grand_total: Money = 0
    terms: List[str] = Field(default_factory=list)
    note: Optional[Note] = None


class QuotationPatchRequest(BaseModel):
    """
    Partial update. None means "not supplied".
    site_images, when supplied, is the full set of images to keep;
    newly uploaded images are appended to it.
    """
    model_config = ConfigDict(extra="forbid")

    client_name: Optional[ClientName] = None
    client_address: Optional[ClientAddress] = None
    client_number: Optional[ClientNumber] = None
    date: Optional[dt.date] = None
    items: Optional[List[LineItem]] = Field(default=None, min_length=1)
    subtotal: Optional[Money] = None
    discount: Optional[Money] = None
    grand_total: Optional[Money] = None
    terms: Optional[List[str]] = None
    note: Optional[Note] = None
    site_images: Optional[List[SiteImage]] = None

    acceptance_state: Optional[AcceptanceState] = None
