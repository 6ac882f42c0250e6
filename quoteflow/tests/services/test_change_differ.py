import datetime as dt
from decimal import Decimal

from quoteflow.schemas.documents import LineItem, SiteImage
from quoteflow.services.change_differ import (
    PROJECT_MIRROR_FIELDS,
    QUOTATION_FIELDS,
    ChangeDiffer,
)


def stored_quotation(**overrides):
    data = {
        "client_name": "Ravi Kumar",
        "client_address": "12 MG Road, Pune",
        "client_number": "9876543210",
        "date": dt.date(2024, 3, 1),
        "items": [
            {"description": "Wall paint", "area": "120", "rate": "25", "total": "3000", "note": None},
            {"description": "Ceiling polish", "area": None, "rate": "2000", "total": "2000", "note": None},
        ],
        "subtotal": Decimal("5000.00"),
        "discount": Decimal("0.00"),
        "grand_total": Decimal("5000.00"),
        "terms": ["50% advance"],
        "note": None,
        "site_images": [{"url": "https://cdn.test/q/1.jpg", "public_id": "q/1", "description": None}],
    }
    data.update(overrides)
    return data


def test_scalar_change_is_described_with_old_and_new_value():
    delta = ChangeDiffer(QUOTATION_FIELDS).diff(stored_quotation(), {"client_name": "Asha Rao"})

    assert delta.changed_fields == frozenset({"client_name"})
    assert delta.changes == {"client_name": "Asha Rao"}
    assert delta.descriptions == ('Client name changed from "Ravi Kumar" to "Asha Rao"',)


def test_fields_not_supplied_are_never_changes():
    delta = ChangeDiffer(QUOTATION_FIELDS).diff(
        stored_quotation(), {"client_name": None, "items": None, "note": None}
    )
    assert delta.is_empty
    assert delta.descriptions == ()


def test_same_values_in_other_representation_are_not_changes():
    incoming = {
        "client_name": "Ravi Kumar",
        "date": "2024-03-01",
        "grand_total": "5000",
        "items": [
            LineItem(description="Ceiling polish", rate=Decimal("2000.00"), total=Decimal("2000")),
            LineItem(description="Wall paint", area=Decimal("120.0"), rate=Decimal("25"), total=Decimal("3000")),
        ],
        "terms": ["50% advance"],
    }
    delta = ChangeDiffer(QUOTATION_FIELDS).diff(stored_quotation(), incoming)
    assert delta.is_empty


def test_reordering_a_collection_is_not_a_change():
    existing = stored_quotation(terms=["a", "b", "c"])
    delta = ChangeDiffer(QUOTATION_FIELDS).diff(existing, {"terms": ["c", "a", "b"]})
    assert delta.is_empty


def test_description_order_scalars_then_additions_then_removals():
    incoming = {
        "client_name": "Asha Rao",
        "items": [
            {"description": "Ceiling polish", "rate": "2000", "total": "2000"},
            {"description": "Tiles", "area": "50", "rate": "40", "total": "2000"},
        ],
        "terms": ["50% advance", "GST extra"],
        "grand_total": "6000",
    }
    delta = ChangeDiffer(QUOTATION_FIELDS).diff(stored_quotation(), incoming)

    assert delta.descriptions == (
        'Client name changed from "Ravi Kumar" to "Asha Rao"',
        "Grand total changed from 5000.00 to 6000.00",
        "New item added: Tiles, Area: 50 sq.ft, Rate: ₹40.00, Total: ₹2000.00",
        'Term added: "GST extra"',
        "Item removed: Wall paint, Area: 120 sq.ft, Rate: ₹25.00, Total: ₹3000.00",
    )
    assert delta.changed_fields == frozenset({"client_name", "items", "terms", "grand_total"})


def test_date_and_note_descriptions():
    delta = ChangeDiffer(QUOTATION_FIELDS).diff(
        stored_quotation(), {"date": dt.date(2024, 3, 5), "note": "Site visit on Monday"}
    )
    assert delta.descriptions == (
        'Date changed from "2024-03-01" to "2024-03-05"',
        'Note changed from "" to "Site visit on Monday"',
    )


def test_removed_images_are_reported_for_cleanup():
    incoming = {
        "site_images": [SiteImage(url="https://cdn.test/q/2.jpg", public_id="q/2", description="Kitchen")],
    }
    delta = ChangeDiffer(QUOTATION_FIELDS).diff(stored_quotation(), incoming)

    assert [img["public_id"] for img in delta.removed["site_images"]] == ["q/1"]
    assert delta.descriptions == (
        "Image added: url: https://cdn.test/q/2.jpg, publicId: q/2, description: Kitchen",
        "Image removed: url: https://cdn.test/q/1.jpg, publicId: q/1",
    )


def test_mirror_fields_do_not_include_project_only_collections():
    names = {spec.name for spec in PROJECT_MIRROR_FIELDS}
    assert "site_images" not in names
    assert "extra_work" not in names
    assert {"items", "grand_total", "client_number"} <= names
