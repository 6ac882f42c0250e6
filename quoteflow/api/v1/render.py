# quoteflow/api/v1/render.py
"""
camelCase response builders shared by the quotation / project / invoice routes.
"""
from __future__ import annotations

from typing import Any, Dict, List, Optional


def _iso(dt):
    return dt.isoformat() if dt else None


def _money(v) -> Optional[str]:
    return None if v is None else f"{v:.2f}"


def items(rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [
        {
            "description": r.get("description"),
            "area": r.get("area"),
            "rate": r.get("rate"),
            "total": r.get("total"),
            "note": r.get("note"),
        }
        for r in (rows or [])
    ]


def extra_work(rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [
        {"description": r.get("description"), "total": r.get("total"), "note": r.get("note")}
        for r in (rows or [])
    ]


def images(rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [
        {"url": r.get("url"), "publicId": r.get("public_id"), "description": r.get("description")}
        for r in (rows or [])
    ]


def payments(rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [{"amount": r.get("amount"), "date": r.get("date"), "note": r.get("note")} for r in (rows or [])]


def history(rows: Optional[List[Dict[str, Any]]]) -> List[Dict[str, Any]]:
    return [
        {
            "updatedAtIso": r.get("timestamp"),
            "updatedBy": r.get("actor_id"),
            "changes": list(r.get("change_descriptions") or []),
        }
        for r in (rows or [])
    ]


def client_document(d) -> Dict[str, Any]:
    """Fields every quotation / project / invoice carries."""
    return {
        "clientName": d.client_name,
        "clientAddress": d.client_address,
        "clientNumber": d.client_number,
        "date": d.date.isoformat() if d.date else None,
        "items": items(d.items),
        "subtotal": _money(d.subtotal),
        "discount": _money(d.discount),
        "grandTotal": _money(d.grand_total),
        "terms": list(d.terms or []),
        "note": d.note,
        "createdAtIso": _iso(d.created_at),
        "updatedAtIso": _iso(d.updated_at),
    }


def pagination(page: int, limit: int, total: int) -> Dict[str, int]:
    return {
        "page": page,
        "limit": limit,
        "total": total,
        "pages": (total + limit - 1) // limit if limit else 0,
    }


def with_warnings(body: Dict[str, Any], warnings) -> Dict[str, Any]:
    if warnings:
        body["warnings"] = list(warnings)
    return body


def quotation(q) -> Dict[str, Any]:
    return {
        "quotationNumber": q.quotation_number,
        **client_document(q),
        "siteImages": images(q.site_images),
        "acceptanceState": q.acceptance_state,
        "history": history(q.history),
        "createdBy": q.created_by,
    }


def project(p) -> Dict[str, Any]:
    return {
        "projectId": p.project_id,
        "quotationNumber": p.quotation_number,
        **client_document(p),
        "extraWork": extra_work(p.extra_work),
        "paymentHistory": payments(p.payment_history),
        "siteImages": images(p.site_images),
        "amountDue": _money(p.amount_due),
        "status": p.status,
        "history": history(p.history),
        "createdBy": p.created_by,
    }


def invoice(inv, *, include_token: bool = False) -> Dict[str, Any]:
    body = {
        "invoiceId": inv.invoice_id,
        "projectId": inv.project_id,
        "quotationNumber": inv.quotation_number,
        **client_document(inv),
        "extraWork": extra_work(inv.extra_work),
        "paymentHistory": payments(inv.payment_history),
        "amountDue": _money(inv.amount_due),
    }
    if include_token:
        body["accessToken"] = inv.access_token
    return body
