# quoteflow/services/lifecycle_coordinator.py
"""
Quotation -> Project -> Invoice lifecycle.

Every mutating operation:
    1. (optional) upload new images                      [before the transaction]
    2. load rows FOR UPDATE, diff, ledger, writes, audit [one transaction, retried on conflict]
    3. notify the client                                 [after commit, failures -> warnings]
    4. release images that were removed / orphaned       [after commit, failures logged]
"""
from __future__ import annotations

import datetime as dt
import logging
import secrets
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session, sessionmaker

from quoteflow.core.cache import CacheKeys, invalidate
from quoteflow.core.errors import (
    ConcurrencyConflictError,
    NoChangesError,
    NotFoundError,
    NotificationError,
    ObjectStoreError,
    UnauthorizedError,
)
from quoteflow.core.kv_store import KeyValueStore
from quoteflow.models.enums import AcceptanceState, NotificationAction
from quoteflow.models.invoice import Invoice
from quoteflow.models.project import Project
from quoteflow.models.quotation import Quotation
from quoteflow.policies.rbac import Principal, is_authorized_admin
from quoteflow.schemas.documents import Payment, SiteImage, dump_docs, load_docs
from quoteflow.schemas.projects import PaymentIn, ProjectPatchRequest
from quoteflow.schemas.quotations import QuotationCreateRequest, QuotationPatchRequest
from quoteflow.services.audit_service import AuditAction, AuditService, AuditTrail
from quoteflow.services.change_differ import (
    COLLECTION,
    PROJECT_FIELDS,
    PROJECT_MIRROR_FIELDS,
    QUOTATION_FIELDS,
    ChangeDiffer,
    Delta,
    FieldSpec,
    status_change_description,
)
from quoteflow.services.notification_dispatcher import NotificationDispatcher
from quoteflow.services.object_store import ImageUpload, ObjectStore
from quoteflow.services.payment_ledger import reconcile, to_money
from quoteflow.services.sequence_service import SequenceService

logger = logging.getLogger(__name__)

T = TypeVar("T")

# postgres serialization_failure / deadlock_detected
RETRYABLE_PGCODES = {"40001", "40P01"}
# unique_violation: a concurrent writer inserted the same key first
UNIQUE_VIOLATION_PGCODE = "23505"

INVOICE_MIRROR_FIELDS = (
    "client_name",
    "client_address",
    "client_number",
    "date",
    "items",
    "extra_work",
    "subtotal",
    "discount",
    "grand_total",
    "terms",
    "note",
    "payment_history",
    "amount_due",
)


@dataclass(frozen=True)
class OperationResult:
    record: Any
    warnings: Tuple[str, ...] = ()


@dataclass(frozen=True)
class ClientNotice:
    """Notification to send once the transaction has committed."""
    recipient: str
    action: str
    body: str
    template_vars: Dict[str, str]
    subject: str  # "Quotation updated" -> "Quotation updated, but failed to send notification: ..."


@dataclass
class _TxOutcome:
    record: Any
    notice: Optional[ClientNotice] = None
    released_image_ids: List[str] = field(default_factory=list)


def _is_retryable(exc: OperationalError) -> bool:
    code = getattr(exc.orig, "pgcode", None)
    return code in RETRYABLE_PGCODES


def _is_unique_violation(exc: IntegrityError) -> bool:
    if getattr(exc.orig, "pgcode", None) == UNIQUE_VIOLATION_PGCODE:
        return True
    return getattr(exc.orig, "sqlite_errorname", None) == "SQLITE_CONSTRAINT_UNIQUE"


def _m(v: Any) -> str:
    return f"{to_money(v):.2f}"


def _storage_value(spec: FieldSpec, value: Any) -> Any:
    if spec.kind == COLLECTION:
        return [v.model_dump(mode="json") if hasattr(v, "model_dump") else v for v in value]
    return value


class LifecycleCoordinator:
    def __init__(
        self,
        *,
        session_factory: sessionmaker,
        sequences: SequenceService,
        dispatcher: NotificationDispatcher,
        object_store: ObjectStore,
        cache_store: KeyValueStore,
        frontend_url: str = "",
        transaction_retries: int = 3,
        clock: Callable[[], dt.datetime] = lambda: dt.datetime.now(dt.timezone.utc),
    ):
        self._session_factory = session_factory
        self._sequences = sequences
        self._dispatcher = dispatcher
        self._store = object_store
        self._cache = cache_store
        self._frontend_url = frontend_url.rstrip("/")
        self._retries = max(1, transaction_retries)
        self._clock = clock

        self._audit = AuditService()
        self._trail = AuditTrail()
        self._quotation_differ = ChangeDiffer(QUOTATION_FIELDS)
        self._project_differ = ChangeDiffer(PROJECT_FIELDS)
        self._mirror_differ = ChangeDiffer(PROJECT_MIRROR_FIELDS)

    # ─────────── QUOTATIONS ───────────

    def create_quotation(
        self,
        data: QuotationCreateRequest,
        principal: Principal,
        *,
        uploads: Sequence[ImageUpload] = (),
        request_id: Optional[str] = None,
    ) -> OperationResult:
        self._require_admin(principal)
        images, warnings = self._upload_images(uploads, folder="quotations")

        def work(db: Session) -> _TxOutcome:
            now = self._clock()
            number = self._sequences.next_quotation_number()
            q = Quotation(
                quotation_number=number,
                client_name=data.client_name,
                client_address=data.client_address,
                client_number=data.client_number,
                date=data.date,
                items=dump_docs(data.items),
                subtotal=to_money(data.subtotal),
                discount=to_money(data.discount),
                grand_total=to_money(data.grand_total),
                terms=list(data.terms),
                note=data.note,
                site_images=dump_docs(images),
                acceptance_state=AcceptanceState.pending.value,
                history=[],
                created_by=principal.user_id,
                created_at=now,
                updated_at=now,
            )
            db.add(q)
            db.flush()
            self._audit.write(
                db,
                action=AuditAction.CREATE_QUOTATION,
                actor_id=principal.user_id,
                entity_type="quotation",
                entity_id=number,
                request_id=request_id,
                details={"quotationNumber": number, "clientName": data.client_name},
            )
            return _TxOutcome(record=q, notice=self._quotation_created_notice(q))

        outcome = self._run_with_uploads("create_quotation", work, images)
        return self._finish(outcome, warnings)

    def update_quotation(
        self,
        quotation_number: str,
        patch: QuotationPatchRequest,
        principal: Principal,
        *,
        uploads: Sequence[ImageUpload] = (),
        request_id: Optional[str] = None,
    ) -> OperationResult:
        self._require_admin(principal)
        images, warnings = self._upload_images(uploads, folder="quotations")

        def work(db: Session) -> _TxOutcome:
            return self._update_quotation_tx(db, quotation_number, patch, principal, images, request_id)

        outcome = self._run_with_uploads("update_quotation", work, images)
        return self._finish(outcome, warnings)

    def _update_quotation_tx(
        self,
        db: Session,
        quotation_number: str,
        patch: QuotationPatchRequest,
        principal: Principal,
        new_images: List[SiteImage],
        request_id: Optional[str],
    ) -> _TxOutcome:
        now = self._clock()
        q = self._lock_quotation(db, quotation_number)

        incoming = self._incoming(patch, QUOTATION_FIELDS, q, new_images)
        delta = self._quotation_differ.diff(q, incoming)

        previous = q.acceptance_state
        explicit = patch.acceptance_state.value if patch.acceptance_state is not None else None
        state_changed = explicit is not None and explicit != previous

        if delta.is_empty and not state_changed:
            raise NoChangesError("No changes detected")

        self._apply(q, QUOTATION_FIELDS, delta)
        descriptions = list(delta.descriptions)

        # explicit state wins; otherwise any edit re-requires client acceptance
        if explicit is not None:
            resulting = explicit
        elif previous != AcceptanceState.pending.value and descriptions:
            resulting = AcceptanceState.pending.value
        else:
            resulting = previous
        if resulting != previous:
            descriptions.append(status_change_description(previous, resulting))

        q.acceptance_state = resulting
        q.updated_at = now
        self._trail.append(q, actor_id=principal.user_id, descriptions=descriptions, at=now)

        self._audit.write(
            db,
            action=AuditAction.UPDATE_QUOTATION_STATUS if state_changed else AuditAction.UPDATE_QUOTATION,
            actor_id=principal.user_id,
            entity_type="quotation",
            entity_id=quotation_number,
            request_id=request_id,
            details={"quotationNumber": quotation_number, "changes": descriptions},
        )

        if resulting == AcceptanceState.accepted.value:
            self._materialize_or_resync(db, q, principal, now, request_id)

        return _TxOutcome(
            record=q,
            notice=self._quotation_update_notice(q, explicit if state_changed else None),
            released_image_ids=[img["public_id"] for img in delta.removed.get("site_images", ())],
        )

    def delete_quotation(
        self,
        quotation_number: str,
        principal: Principal,
        *,
        request_id: Optional[str] = None,
    ) -> OperationResult:
        """
        Removes the quotation and, when present, its project and invoice.
        """
        self._require_admin(principal)

        def work(db: Session) -> _TxOutcome:
            q = self._lock_quotation(db, quotation_number)
            project = self._find_project_for_quotation(db, quotation_number)
            invoice = self._find_invoice(db, project.project_id) if project else None

            image_ids = [img["public_id"] for img in (q.site_images or [])]
            if project is not None:
                image_ids += [img["public_id"] for img in (project.site_images or [])]

            self._audit.write(
                db,
                action=AuditAction.DELETE_QUOTATION,
                actor_id=principal.user_id,
                entity_type="quotation",
                entity_id=quotation_number,
                request_id=request_id,
                details={
                    "quotationNumber": quotation_number,
                    "projectId": project.project_id if project else None,
                    "invoiceId": invoice.invoice_id if invoice else None,
                },
            )
            if invoice is not None:
                db.delete(invoice)
            if project is not None:
                db.delete(project)
            db.delete(q)
            return _TxOutcome(record=q, released_image_ids=image_ids)

        outcome = self._run("delete_quotation", work)
        return self._finish(outcome, [])

    # ─────────── PROJECTS ───────────

    def update_project(
        self,
        project_id: str,
        patch: ProjectPatchRequest,
        principal: Principal,
        *,
        uploads: Sequence[ImageUpload] = (),
        request_id: Optional[str] = None,
    ) -> OperationResult:
        self._require_admin(principal)
        images, warnings = self._upload_images(uploads, folder="projects")

        def work(db: Session) -> _TxOutcome:
            return self._update_project_tx(db, project_id, patch, principal, images, request_id)

        outcome = self._run_with_uploads("update_project", work, images)
        return self._finish(outcome, warnings)

    def record_payment(
        self,
        project_id: str,
        payment: PaymentIn,
        principal: Principal,
        *,
        request_id: Optional[str] = None,
    ) -> OperationResult:
        return self.update_project(
            project_id,
            ProjectPatchRequest(new_payment=payment),
            principal,
            request_id=request_id,
        )

    def _update_project_tx(
        self,
        db: Session,
        project_id: str,
        patch: ProjectPatchRequest,
        principal: Principal,
        new_images: List[SiteImage],
        request_id: Optional[str],
    ) -> _TxOutcome:
        now = self._clock()
        p = self._lock_project(db, project_id)

        incoming = self._incoming(patch, PROJECT_FIELDS, p, new_images)
        delta = self._project_differ.diff(p, incoming)
        payment: Optional[Payment] = (
            patch.new_payment.to_payment(now.date()) if patch.new_payment is not None else None
        )

        if delta.is_empty and payment is None:
            raise NoChangesError("No changes detected")

        self._apply(p, PROJECT_FIELDS, delta)
        # raises OverpaymentError before anything is appended
        ledger = reconcile(p.grand_total, p.payment_history or [], payment)

        descriptions = list(delta.descriptions)
        if payment is not None:
            p.payment_history = list(p.payment_history or []) + [payment.model_dump(mode="json")]
            text = f"Payment received: ₹{_m(payment.amount)} on {payment.date.isoformat()}"
            if payment.note:
                text += f", Note: {payment.note}"
            descriptions.append(text)

        previous_due = to_money(p.amount_due)
        if previous_due != ledger.amount_due:
            descriptions.append(f"Amount due changed from {_m(previous_due)} to {_m(ledger.amount_due)}")
        if p.status != ledger.status.value:
            descriptions.append(status_change_description(p.status, ledger.status.value))
        p.amount_due = ledger.amount_due
        p.status = ledger.status.value
        p.updated_at = now

        self._trail.append(p, actor_id=principal.user_id, descriptions=descriptions, at=now)
        invoice = self._mirror_invoice(db, p, now)

        self._audit.write(
            db,
            action=(
                AuditAction.ADD_PROJECT_PAYMENT
                if payment is not None and delta.is_empty
                else AuditAction.UPDATE_PROJECT
            ),
            actor_id=principal.user_id,
            entity_type="project",
            entity_id=project_id,
            request_id=request_id,
            details={"projectId": project_id, "changes": descriptions},
        )

        notice = (
            self._payment_notice(p, invoice, payment, ledger.total_paid)
            if payment is not None
            else self._project_updated_notice(p, invoice)
        )
        return _TxOutcome(
            record=p,
            notice=notice,
            released_image_ids=[img["public_id"] for img in delta.removed.get("site_images", ())],
        )

    def delete_project(
        self,
        project_id: str,
        principal: Principal,
        *,
        request_id: Optional[str] = None,
    ) -> OperationResult:
        """
        Removes the project and its invoice. The quotation is kept.
        """
        self._require_admin(principal)

        def work(db: Session) -> _TxOutcome:
            p = self._lock_project(db, project_id)
            invoice = self._find_invoice(db, project_id)
            self._audit.write(
                db,
                action=AuditAction.DELETE_PROJECT,
                actor_id=principal.user_id,
                entity_type="project",
                entity_id=project_id,
                request_id=request_id,
                details={
                    "projectId": project_id,
                    "quotationNumber": p.quotation_number,
                    "invoiceId": invoice.invoice_id if invoice else None,
                },
            )
            if invoice is not None:
                db.delete(invoice)
            db.delete(p)
            return _TxOutcome(
                record=p,
                released_image_ids=[img["public_id"] for img in (p.site_images or [])],
            )

        outcome = self._run("delete_project", work)
        return self._finish(outcome, [])

    # ─────────── materialization / mirroring ───────────

    def _materialize_or_resync(
        self,
        db: Session,
        q: Quotation,
        principal: Principal,
        now: dt.datetime,
        request_id: Optional[str],
    ) -> Project:
        project = self._find_project_for_quotation(db, q.quotation_number)
        if project is None:
            return self._create_project(db, q, principal, now)

        snapshot = {spec.name: getattr(q, spec.name) for spec in PROJECT_MIRROR_FIELDS}
        snapshot["note"] = q.note or ""
        delta = self._mirror_differ.diff(project, snapshot)

        for spec in PROJECT_MIRROR_FIELDS:
            value = getattr(q, spec.name)
            setattr(project, spec.name, list(value) if isinstance(value, list) else value)

        # payments are kept; a grand total below them aborts the whole update
        ledger = reconcile(project.grand_total, project.payment_history or [])
        descriptions = list(delta.descriptions)
        if project.status != ledger.status.value:
            descriptions.append(status_change_description(project.status, ledger.status.value))
        project.amount_due = ledger.amount_due
        project.status = ledger.status.value
        project.updated_at = now

        if descriptions:
            descriptions.insert(0, f"Re-synced from quotation {q.quotation_number}")
        self._trail.append(project, actor_id=principal.user_id, descriptions=descriptions, at=now)
        self._mirror_invoice(db, project, now)
        logger.info("[lifecycle] project %s re-synced from %s", project.project_id, q.quotation_number)
        return project

    def _create_project(self, db: Session, q: Quotation, principal: Principal, now: dt.datetime) -> Project:
        ledger = reconcile(q.grand_total, [])
        project = Project(
            project_id=self._sequences.next_project_id(),
            quotation_number=q.quotation_number,
            extra_work=[],
            payment_history=[],
            site_images=[],
            amount_due=ledger.amount_due,
            status=ledger.status.value,
            history=[],
            created_by=principal.user_id,
            created_at=now,
            updated_at=now,
        )
        for spec in PROJECT_MIRROR_FIELDS:
            value = getattr(q, spec.name)
            setattr(project, spec.name, list(value) if isinstance(value, list) else value)
        self._trail.append(project, actor_id=principal.user_id, descriptions=["Project created"], at=now)
        db.add(project)

        invoice = Invoice(
            invoice_id=self._sequences.next_invoice_id(),
            project_id=project.project_id,
            quotation_number=q.quotation_number,
            access_token=secrets.token_hex(16),
            created_at=now,
        )
        self._copy_into_invoice(invoice, project, now)
        db.add(invoice)

        # unique(projects.quotation_number) fires here when another request got there first
        db.flush()
        logger.info(
            "[lifecycle] project %s + invoice %s created for %s",
            project.project_id, invoice.invoice_id, q.quotation_number,
        )
        return project

    def _mirror_invoice(self, db: Session, project: Project, now: dt.datetime) -> Optional[Invoice]:
        invoice = db.execute(
            select(Invoice).where(Invoice.project_id == project.project_id).with_for_update()
        ).scalar_one_or_none()
        if invoice is None:
            logger.warning("[lifecycle] project %s has no invoice to mirror into", project.project_id)
            return None
        self._copy_into_invoice(invoice, project, now)
        return invoice

    @staticmethod
    def _copy_into_invoice(invoice: Invoice, project: Project, now: dt.datetime) -> None:
        for name in INVOICE_MIRROR_FIELDS:
            value = getattr(project, name)
            setattr(invoice, name, list(value) if isinstance(value, list) else value)
        invoice.updated_at = now

    # ─────────── helpers ───────────

    def _require_admin(self, principal: Optional[Principal]) -> None:
        if not is_authorized_admin(principal):
            raise UnauthorizedError("Unauthorized")

    @staticmethod
    def _incoming(
        patch: Any,
        fields: Sequence[FieldSpec],
        record: Any,
        new_images: List[SiteImage],
    ) -> Dict[str, Any]:
        incoming = {spec.name: getattr(patch, spec.name, None) for spec in fields}
        if new_images:
            kept = incoming.get("site_images")
            if kept is None:
                kept = load_docs(SiteImage, record.site_images)
            incoming["site_images"] = list(kept) + list(new_images)
        return incoming

    @staticmethod
    def _apply(record: Any, fields: Sequence[FieldSpec], delta: Delta) -> None:
        for spec in fields:
            if spec.name not in delta.changed_fields:
                continue
            value = _storage_value(spec, delta.changes[spec.name])
            if isinstance(value, Decimal):
                value = to_money(value)
            setattr(record, spec.name, value)

    def _lock_quotation(self, db: Session, quotation_number: str) -> Quotation:
        q = db.execute(
            select(Quotation).where(Quotation.quotation_number == quotation_number).with_for_update()
        ).scalar_one_or_none()
        if q is None:
            raise NotFoundError("Quotation not found")
        return q

    def _lock_project(self, db: Session, project_id: str) -> Project:
        p = db.execute(
            select(Project).where(Project.project_id == project_id).with_for_update()
        ).scalar_one_or_none()
        if p is None:
            raise NotFoundError("Project not found")
        return p

    @staticmethod
    def _find_project_for_quotation(db: Session, quotation_number: str) -> Optional[Project]:
        return db.execute(
            select(Project).where(Project.quotation_number == quotation_number).with_for_update()
        ).scalar_one_or_none()

    @staticmethod
    def _find_invoice(db: Session, project_id: str) -> Optional[Invoice]:
        return db.execute(
            select(Invoice).where(Invoice.project_id == project_id).with_for_update()
        ).scalar_one_or_none()

    def _run(self, op: str, work: Callable[[Session], T]) -> T:
        """
        Run work in one transaction. Unique violations and serialization/deadlock
        failures are retried with a fresh session, then surface as 409. Other
        integrity errors propagate unchanged.
        """
        last: Optional[Exception] = None
        for attempt in range(self._retries):
            try:
                with self._session_factory.begin() as db:
                    return work(db)
            except IntegrityError as exc:
                if not _is_unique_violation(exc):
                    raise
                last = exc
            except OperationalError as exc:
                if not _is_retryable(exc):
                    raise
                last = exc
            logger.warning("[lifecycle] %s conflict attempt=%s/%s: %s", op, attempt + 1, self._retries, last)
        raise ConcurrencyConflictError(f"{op} conflicted with a concurrent change, please retry") from last

    def _run_with_uploads(self, op: str, work: Callable[[Session], T], images: List[SiteImage]) -> T:
        try:
            return self._run(op, work)
        except Exception:
            # transaction never committed: uploaded objects are orphans
            self._release_images([img.public_id for img in images])
            raise

    def _finish(self, outcome: _TxOutcome, warnings: List[str]) -> OperationResult:
        invalidate(self._cache, CacheKeys.DASHBOARD_STATS)
        warnings = list(warnings)
        if outcome.notice is not None:
            warning = self._notify(outcome.notice)
            if warning:
                warnings.append(warning)
        self._release_images(outcome.released_image_ids)
        return OperationResult(record=outcome.record, warnings=tuple(warnings))

    # ─────────── side channels ───────────

    def _upload_images(self, uploads: Sequence[ImageUpload], *, folder: str) -> Tuple[List[SiteImage], List[str]]:
        images: List[SiteImage] = []
        warnings: List[str] = []
        for up in uploads:
            try:
                stored = self._store.upload(
                    up.data, folder=folder, filename=up.filename, content_type=up.content_type
                )
            except ObjectStoreError as exc:
                logger.warning("[lifecycle] upload failed file=%s: %s", up.filename, exc)
                warnings.append(f"Image {up.filename} was not uploaded: {exc.message}")
                continue
            images.append(SiteImage(url=stored.url, public_id=stored.id, description=up.description))
        return images, warnings

    def _release_images(self, image_ids: Sequence[str]) -> None:
        for image_id in image_ids:
            try:
                self._store.delete(image_id)
            except ObjectStoreError as exc:
                logger.error("[lifecycle] failed to delete image %s: %s", image_id, exc)

    def _notify(self, notice: ClientNotice) -> Optional[str]:
        try:
            sent = self._dispatcher.send(
                notice.recipient, notice.action, notice.body, notice.template_vars
            )
        except NotificationError as exc:
            logger.error("[lifecycle] notification failed action=%s: %s", notice.action, exc)
            return f"{notice.subject}, but failed to send notification: {exc.message}"
        except Exception as exc:
            logger.exception("[lifecycle] notification crashed action=%s", notice.action)
            return f"{notice.subject}, but failed to send notification: {exc}"
        if not sent:
            logger.info("[lifecycle] notification debounced action=%s", notice.action)
        return None

    # ─────────── message composition ───────────

    def _quotation_url(self, number: str) -> str:
        return f"{self._frontend_url}/quotations/{number}"

    def _invoice_url(self, invoice: Optional[Invoice], project: Project) -> str:
        if invoice is None:
            return f"{self._frontend_url}/invoice/{project.project_id}"
        return f"{self._frontend_url}/invoice/{invoice.invoice_id}?token={invoice.access_token}"

    def _quotation_created_notice(self, q: Quotation) -> ClientNotice:
        url = self._quotation_url(q.quotation_number)
        lines = []
        for i, item in enumerate(q.items or [], start=1):
            text = f"{i}. {item['description']}"
            if item.get("area"):
                text += f", Area: {item['area']} sq.ft"
            text += f", Rate: ₹{_m(item['rate'])}"
            text += f", Total: ₹{_m(item.get('total') or item['rate'])}"
            lines.append(text)
        discount = f", Discount: ₹{_m(q.discount)}" if to_money(q.discount) > 0 else ""
        body = (
            f"Dear {q.client_name}, your Quotation #{q.quotation_number} has been created. "
            f"Items: {'; '.join(lines)}. Subtotal: ₹{_m(q.subtotal)}{discount}, "
            f"Grand Total: ₹{_m(q.grand_total)}. View details: {url}"
        )
        return ClientNotice(
            recipient=q.client_number,
            action=NotificationAction.QUOTATION_CREATED.value,
            body=body,
            template_vars={"1": q.client_name, "2": q.quotation_number, "3": _m(q.grand_total), "4": url},
            subject="Quotation created",
        )

    def _quotation_update_notice(self, q: Quotation, changed_to: Optional[str]) -> ClientNotice:
        url = self._quotation_url(q.quotation_number)
        if changed_to in (AcceptanceState.accepted.value, AcceptanceState.rejected.value):
            action = (
                NotificationAction.QUOTATION_ACCEPTED
                if changed_to == AcceptanceState.accepted.value
                else NotificationAction.QUOTATION_REJECTED
            )
            body = (
                f"Dear {q.client_name}, you have {changed_to} Quotation #{q.quotation_number}. "
                f"Thank you! View details: {url}"
            )
            variables = {"1": q.client_name, "2": q.quotation_number, "3": url}
        else:
            action = NotificationAction.QUOTATION_UPDATED
            body = (
                f"Dear {q.client_name}, your Quotation #{q.quotation_number} has been updated. "
                f"Grand Total: ₹{_m(q.grand_total)}. You can now accept or reject it. View details: {url}"
            )
            variables = {"1": q.client_name, "2": q.quotation_number, "3": _m(q.grand_total), "4": url}
        return ClientNotice(
            recipient=q.client_number,
            action=action.value,
            body=body,
            template_vars=variables,
            subject="Quotation updated",
        )

    def _payment_notice(
        self, p: Project, invoice: Optional[Invoice], payment: Payment, total_paid: Decimal
    ) -> ClientNotice:
        url = self._invoice_url(invoice, p)
        body = (
            f"Dear {p.client_name}, we have received a payment of ₹{_m(payment.amount)} towards "
            f"Quotation #{p.quotation_number}. Total Paid: ₹{_m(total_paid)}. "
            f"Amount Due: ₹{_m(p.amount_due)}. View invoice: {url}"
        )
        return ClientNotice(
            recipient=p.client_number,
            action=NotificationAction.PAYMENT_RECEIVED.value,
            body=body,
            template_vars={
                "1": p.client_name,
                "2": _m(payment.amount),
                "3": p.quotation_number,
                "4": _m(p.amount_due),
                "5": url,
            },
            subject="Project updated",
        )

    def _project_updated_notice(self, p: Project, invoice: Optional[Invoice]) -> ClientNotice:
        url = self._invoice_url(invoice, p)
        body = (
            f"Dear {p.client_name}, your project {p.project_id} for Quotation #{p.quotation_number} "
            f"has been updated. Amount Due: ₹{_m(p.amount_due)}. View invoice: {url}"
        )
        return ClientNotice(
            recipient=p.client_number,
            action=NotificationAction.PROJECT_UPDATED.value,
            body=body,
            template_vars={"1": p.client_name, "2": p.project_id, "3": _m(p.amount_due), "4": url},
            subject="Project updated",
        )
