import datetime as dt
from decimal import Decimal

import pytest

from quoteflow.core.errors import OverpaymentError
from quoteflow.models.enums import ProjectStatus
from quoteflow.schemas.documents import Payment
from quoteflow.services.payment_ledger import reconcile


def test_partial_payments_leave_amount_due():
    state = reconcile(Decimal("5000"), [{"amount": "2000"}, {"amount": "500.50"}])

    assert state.total_paid == Decimal("2500.50")
    assert state.amount_due == Decimal("2499.50")
    assert state.status == ProjectStatus.ongoing


def test_exact_payoff_completes_project():
    state = reconcile("5000.00", [{"amount": "2000"}], Payment(amount=Decimal("3000"), date=dt.date(2024, 4, 1)))

    assert state.amount_due == Decimal("0.00")
    assert state.status == ProjectStatus.completed


def test_zero_grand_total_without_payments_is_completed():
    state = reconcile(Decimal("0"), [])
    assert state.amount_due == Decimal("0.00")
    assert state.status == ProjectStatus.completed


def test_overpayment_is_rejected():
    with pytest.raises(OverpaymentError) as exc:
        reconcile(Decimal("5000"), [{"amount": "4000"}], {"amount": "1000.01"})

    assert exc.value.total_paid == Decimal("5000.01")
    assert exc.value.grand_total == Decimal("5000.00")
    assert exc.value.status_code == 400


def test_lowering_grand_total_below_existing_payments_is_rejected():
    with pytest.raises(OverpaymentError):
        reconcile(Decimal("3000"), [{"amount": "4000"}])
