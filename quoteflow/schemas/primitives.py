from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import Field


# --- Money / measure primitives ---
Money = Annotated[Decimal, Field(ge=0, description="INR amount, 2 decimal places")]
PositiveMoney = Annotated[Decimal, Field(gt=0, description="INR amount > 0")]
Area = Annotated[Decimal, Field(ge=0, description="sq.ft")]

# --- Client field primitives ---
ClientName = Annotated[
    str,
    Field(min_length=1, max_length=100, pattern=r"^[A-Za-z ]+$", description="letters and spaces only"),
]
ClientAddress = Annotated[str, Field(min_length=10, max_length=500)]
ClientNumber = Annotated[str, Field(pattern=r"^\+?\d{7,15}$", description="phone, digits with optional +")]
Note = Annotated[str, Field(max_length=500)]
