# quoteflow/services/change_differ.py
"""
Field-by-field comparison of a stored record against an incoming patch.

Snapshots are plain mappings (field name -> value). Scalars compare by
normalized value; collections compare as sets of structural keys, so
reordering a list is not a change.
"""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, FrozenSet, Hashable, List, Mapping, Optional, Sequence, Tuple

SCALAR = "scalar"
COLLECTION = "collection"


def _dec(v: Any) -> Optional[Decimal]:
    if v is None or v == "":
        return None
    return Decimal(str(v))


def _money(v: Any) -> str:
    d = _dec(v) or Decimal("0")
    return f"{d:.2f}"


def _plain_number(v: Any) -> str:
    d = _dec(v)
    if d is None:
        return ""
    return format(d.normalize(), "f") if d == d.to_integral() else format(d, "f")


def _get(obj: Any, name: str) -> Any:
    if isinstance(obj, Mapping):
        return obj.get(name)
    return getattr(obj, name, None)


# ─────────── collection keys + labels ───────────

def line_item_key(item: Any) -> Hashable:
    return (
        _get(item, "description"),
        _dec(_get(item, "area")),
        _dec(_get(item, "rate")),
        _dec(_get(item, "total")),
        _get(item, "note") or "",
    )


def format_line_item(item: Any) -> str:
    parts = [str(_get(item, "description"))]
    if _get(item, "area") is not None:
        parts.append(f"Area: {_plain_number(_get(item, 'area'))} sq.ft")
    if _get(item, "rate") is not None:
        parts.append(f"Rate: ₹{_money(_get(item, 'rate'))}")
    if _get(item, "total") is not None:
        parts.append(f"Total: ₹{_money(_get(item, 'total'))}")
    if _get(item, "note"):
        parts.append(f"Note: {_get(item, 'note')}")
    return ", ".join(parts)


def extra_work_key(item: Any) -> Hashable:
    return (_get(item, "description"), _dec(_get(item, "total")), _get(item, "note") or "")


def format_extra_work(item: Any) -> str:
    parts = [str(_get(item, "description")), f"Total: ₹{_money(_get(item, 'total'))}"]
    if _get(item, "note"):
        parts.append(f"Note: {_get(item, 'note')}")
    return ", ".join(parts)


def image_key(img: Any) -> Hashable:
    return _get(img, "public_id")


def format_image(img: Any) -> str:
    text = f"url: {_get(img, 'url')}, publicId: {_get(img, 'public_id')}"
    if _get(img, "description"):
        text += f", description: {_get(img, 'description')}"
    return text


def term_key(term: Any) -> Hashable:
    return str(term)


def format_term(term: Any) -> str:
    return f'"{term}"'


# ─────────── field declarations ───────────

@dataclass(frozen=True)
class FieldSpec:
    name: str
    label: str
    kind: str = SCALAR
    # scalars: value normalizer + renderer used in "changed from X to Y"
    normalize: Callable[[Any], Any] = lambda v: v
    render: Callable[[Any], str] = lambda v: f'"{"" if v is None else v}"'
    # collections: structural key + renderer; added/removed description prefixes
    key: Callable[[Any], Hashable] = lambda v: v
    added_prefix: str = ""
    removed_prefix: str = ""


def _text(name: str, label: str) -> FieldSpec:
    return FieldSpec(name=name, label=label, normalize=lambda v: v if v is not None else "")


def _amount(name: str, label: str) -> FieldSpec:
    return FieldSpec(name=name, label=label, normalize=_dec, render=_money)


def _date(name: str, label: str) -> FieldSpec:
    def norm(v: Any) -> Optional[dt.date]:
        if v is None or isinstance(v, dt.date):
            return v
        return dt.date.fromisoformat(str(v))

    return FieldSpec(name=name, label=label, normalize=norm, render=lambda v: f'"{v.isoformat() if v else ""}"')


def _collection(name: str, label: str, key, render, added: str, removed: str) -> FieldSpec:
    return FieldSpec(
        name=name,
        label=label,
        kind=COLLECTION,
        key=key,
        render=render,
        added_prefix=added,
        removed_prefix=removed,
    )


CLIENT_NAME = _text("client_name", "Client name")
CLIENT_ADDRESS = _text("client_address", "Client address")
CLIENT_NUMBER = _text("client_number", "Client number")
DATE = _date("date", "Date")
SUBTOTAL = _amount("subtotal", "Subtotal")
DISCOUNT = _amount("discount", "Discount")
GRAND_TOTAL = _amount("grand_total", "Grand total")
NOTE = _text("note", "Note")
ITEMS = _collection("items", "Items", line_item_key, format_line_item, "New item added: ", "Item removed: ")
EXTRA_WORK = _collection(
    "extra_work", "Extra work", extra_work_key, format_extra_work, "Extra work added: ", "Extra work removed: "
)
TERMS = _collection("terms", "Terms", term_key, format_term, "Term added: ", "Term removed: ")
SITE_IMAGES = _collection("site_images", "Site images", image_key, format_image, "Image added: ", "Image removed: ")

QUOTATION_FIELDS: Tuple[FieldSpec, ...] = (
    CLIENT_NAME,
    CLIENT_ADDRESS,
    CLIENT_NUMBER,
    DATE,
    ITEMS,
    SUBTOTAL,
    DISCOUNT,
    GRAND_TOTAL,
    TERMS,
    NOTE,
    SITE_IMAGES,
)

PROJECT_FIELDS: Tuple[FieldSpec, ...] = (
    CLIENT_NAME,
    CLIENT_ADDRESS,
    CLIENT_NUMBER,
    DATE,
    ITEMS,
    EXTRA_WORK,
    SUBTOTAL,
    DISCOUNT,
    GRAND_TOTAL,
    TERMS,
    NOTE,
    SITE_IMAGES,
)

# copied quotation -> project (and on to the invoice) when a quotation is (re-)accepted
PROJECT_MIRROR_FIELDS: Tuple[FieldSpec, ...] = (
    CLIENT_NAME,
    CLIENT_ADDRESS,
    CLIENT_NUMBER,
    DATE,
    ITEMS,
    SUBTOTAL,
    DISCOUNT,
    GRAND_TOTAL,
    TERMS,
    NOTE,
)


# ─────────── result ───────────

@dataclass(frozen=True)
class Delta:
    changed_fields: FrozenSet[str] = frozenset()
    # field -> incoming value, only for changed fields
    changes: Dict[str, Any] = field(default_factory=dict)
    descriptions: Tuple[str, ...] = ()
    # collections only: field -> elements present on one side only
    added: Dict[str, Tuple[Any, ...]] = field(default_factory=dict)
    removed: Dict[str, Tuple[Any, ...]] = field(default_factory=dict)

    @property
    def is_empty(self) -> bool:
        return not self.changed_fields


class ChangeDiffer:
    def __init__(self, fields: Sequence[FieldSpec]):
        self.fields = tuple(fields)

    def diff(self, existing: Any, incoming: Any) -> Delta:
        """
        Compare incoming against existing. A field missing from incoming (or None)
        is "not supplied" and never counts as a change.
        """
        changed: List[str] = []
        changes: Dict[str, Any] = {}
        scalar_desc: List[str] = []
        added_desc: List[str] = []
        removed_desc: List[str] = []
        added: Dict[str, Tuple[Any, ...]] = {}
        removed: Dict[str, Tuple[Any, ...]] = {}

        for spec in self.fields:
            new = _get(incoming, spec.name)
            if new is None:
                continue
            old = _get(existing, spec.name)

            if spec.kind == SCALAR:
                old_n, new_n = spec.normalize(old), spec.normalize(new)
                if old_n == new_n:
                    continue
                changed.append(spec.name)
                changes[spec.name] = new
                scalar_desc.append(
                    f"{spec.label} changed from {spec.render(old_n)} to {spec.render(new_n)}"
                )
                continue

            old_items = list(old or [])
            new_items = list(new)
            old_keys = {spec.key(x) for x in old_items}
            new_keys = {spec.key(x) for x in new_items}
            plus = tuple(x for x in new_items if spec.key(x) not in old_keys)
            minus = tuple(x for x in old_items if spec.key(x) not in new_keys)
            if not plus and not minus:
                continue

            changed.append(spec.name)
            changes[spec.name] = new
            if plus:
                added[spec.name] = plus
                added_desc.extend(f"{spec.added_prefix}{spec.render(x)}" for x in plus)
            if minus:
                removed[spec.name] = minus
                removed_desc.extend(f"{spec.removed_prefix}{spec.render(x)}" for x in minus)

        return Delta(
            changed_fields=frozenset(changed),
            changes=changes,
            descriptions=tuple(scalar_desc + added_desc + removed_desc),
            added=added,
            removed=removed,
        )


def status_change_description(old: str, new: str) -> str:
    return f'Status changed from "{old}" to "{new}"'
