import pytest

from quoteflow.core.errors import NotFoundError
from quoteflow.schemas.quotations import QuotationPatchRequest


def test_lists_are_newest_first_and_paginated(records, make_quotation, session_factory):
    for _ in range(3):
        make_quotation()

    with session_factory() as db:
        rows, total = records.list_quotations(db, page=1, limit=2)
        assert total == 3
        assert len(rows) == 2
        assert rows[0].quotation_number == "QT00003"

        rows, _ = records.list_quotations(db, page=2, limit=2)
        assert [r.quotation_number for r in rows] == ["QT00001"]


def test_client_invoice_requires_matching_token(records, coordinator, admin, make_quotation, session_factory):
    q = make_quotation()
    coordinator.update_quotation(q.quotation_number, QuotationPatchRequest(acceptance_state="accepted"), admin)

    with session_factory() as db:
        invoice = records.get_invoice(db, invoice_id="INV00001")
        assert records.get_invoice_for_client(db, invoice_id="INV00001", token=invoice.access_token) is not None
        with pytest.raises(NotFoundError):
            records.get_invoice_for_client(db, invoice_id="INV00001", token="0" * 32)
        with pytest.raises(NotFoundError):
            records.get_invoice_for_client(db, invoice_id="INV09999", token=invoice.access_token)


def test_dashboard_stats_are_cached_until_a_write(records, make_quotation, session_factory, kv_store):
    make_quotation()
    with session_factory() as db:
        assert records.dashboard_stats(db)["quotations"]["total"] == 1

    # cached value wins until the next committed write
    kv_store.set("cache:dashboard:stats", '{"quotations": {"total": 99}}')
    with session_factory() as db:
        assert records.dashboard_stats(db)["quotations"]["total"] == 99

    make_quotation()
    with session_factory() as db:
        stats = records.dashboard_stats(db)
    assert stats["quotations"]["total"] == 2
    assert stats["revenue"] == {"billed": "0.00", "outstanding": "0.00", "collected": "0.00"}
