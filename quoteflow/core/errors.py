from __future__ import annotations

from typing import Any, Optional


class DomainError(Exception):
    """
    Base for every error the lifecycle core raises on purpose.
    status_code is what the HTTP layer answers with.
    """
    status_code = 400

    def __init__(self, message: str, *, detail: Optional[Any] = None):
        super().__init__(message)
        self.message = message
        self.detail = detail if detail is not None else message


# ─────────── consistency errors (resolved before commit) ───────────

class ValidationError(DomainError):
    status_code = 400


class NoChangesError(ValidationError):
    """Update carried nothing that differs from the stored record."""


class NotFoundError(DomainError):
    status_code = 404


class OverpaymentError(ValidationError):
    def __init__(self, total_paid, grand_total):
        super().__init__(
            f"Total payments {total_paid} exceed grand total {grand_total}",
        )
        self.total_paid = total_paid
        self.grand_total = grand_total


class ConcurrencyConflictError(DomainError):
    status_code = 409


class UnauthorizedError(DomainError):
    status_code = 401


# ─────────── side-channel errors (after commit, never fatal) ───────────

class NotificationError(DomainError):
    status_code = 502


class InvalidRecipientError(NotificationError):
    status_code = 400


class NoTemplateConfiguredError(NotificationError):
    pass


class NotificationDeliveryError(NotificationError):
    pass


class ObjectStoreError(DomainError):
    status_code = 502


class UploadError(ObjectStoreError):
    pass


class DeleteError(ObjectStoreError):
    pass
