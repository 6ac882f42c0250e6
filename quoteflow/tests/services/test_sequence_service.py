from quoteflow.services.sequence_service import SequenceService, SqlSequenceSource, format_identifier


def test_format_identifier_pads_to_five_digits():
    assert format_identifier("QT", 1) == "QT00001"
    assert format_identifier("PRJ", 42) == "PRJ00042"
    assert format_identifier("INV", 123456) == "INV123456"


def test_sql_counters_are_independent_and_monotonic(session_factory):
    seq = SequenceService(SqlSequenceSource(session_factory))

    assert seq.next_quotation_number() == "QT00001"
    assert seq.next_quotation_number() == "QT00002"
    assert seq.next_project_id() == "PRJ00001"
    assert seq.next_invoice_id() == "INV00001"
    assert seq.next_quotation_number() == "QT00003"
