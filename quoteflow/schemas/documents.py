# quoteflow/schemas/documents.py
"""
Embedded documents stored in the JSON columns of quotations / projects / invoices.
Stored form is model_dump(mode="json") (Decimal -> str, date -> ISO).
"""
from __future__ import annotations

import datetime as dt
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from quoteflow.schemas.primitives import Area, Money, Note, PositiveMoney


class _Doc(BaseModel):
    model_config = ConfigDict(frozen=True)


class LineItem(_Doc):
    description: str = Field(..., min_length=1)
    area: Optional[Area] = None
    rate: Money
    total: Optional[Money] = None
    note: Optional[Note] = None


class ExtraWorkItem(_Doc):
    description: str = Field(..., min_length=1)
    total: Money
    note: Optional[Note] = None


class SiteImage(_Doc):
    url: str
    public_id: str
    description: Optional[str] = None


class Payment(_Doc):
    amount: PositiveMoney
    date: dt.date
    note: Optional[str] = Field(default=None, max_length=200)


class AuditEntry(_Doc):
    timestamp: dt.datetime
    actor_id: str
    change_descriptions: Tuple[str, ...] = Field(..., min_length=1)


D = TypeVar("D", bound=_Doc)


def load_docs(model: Type[D], raw: Optional[Iterable[Dict[str, Any]]]) -> List[D]:
    return [model.model_validate(r) for r in (raw or [])]


def dump_docs(docs: Iterable[_Doc]) -> List[Dict[str, Any]]:
    return [d.model_dump(mode="json") for d in docs]
