# quoteflow/services/payment_ledger.py
from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Iterable, Optional

from quoteflow.core.errors import OverpaymentError
from quoteflow.models.enums import ProjectStatus

CENT = Decimal("0.01")


def to_money(v: Any) -> Decimal:
    if v is None:
        return Decimal("0.00")
    return Decimal(str(v)).quantize(CENT, rounding=ROUND_HALF_UP)


def _amount(p: Any) -> Decimal:
    raw = p.get("amount") if isinstance(p, dict) else getattr(p, "amount")
    return to_money(raw)


@dataclass(frozen=True)
class LedgerState:
    total_paid: Decimal
    amount_due: Decimal
    status: ProjectStatus


def reconcile(
    grand_total: Any,
    existing_payments: Iterable[Any],
    new_payment: Optional[Any] = None,
) -> LedgerState:
    """
    Derive amount_due / status for a project.

    - amount_due = grand_total - sum(payments)
    - status = completed iff amount_due <= 0
    - total paid above grand_total raises OverpaymentError (nothing is applied)
    """
    total = to_money(grand_total)
    paid = sum((_amount(p) for p in existing_payments), Decimal("0.00"))
    if new_payment is not None:
        paid += _amount(new_payment)

    if paid > total:
        raise OverpaymentError(paid, total)

    due = total - paid
    status = ProjectStatus.completed if due <= 0 else ProjectStatus.ongoing
    return LedgerState(total_paid=paid, amount_due=due, status=status)
