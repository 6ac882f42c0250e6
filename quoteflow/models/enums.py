#quoteflow/models/enums.py
from __future__ import annotations
from enum import Enum


class UserRole(str, Enum):
    ADMIN = "admin"
    STAFF = "staff"


class AcceptanceState(str, Enum):
    pending = "pending"
    accepted = "accepted"
    rejected = "rejected"


class ProjectStatus(str, Enum):
    ongoing = "ongoing"
    completed = "completed"


class NotificationAction(str, Enum):
    QUOTATION_CREATED = "quotation_created"
    QUOTATION_UPDATED = "quotation_updated"
    QUOTATION_ACCEPTED = "quotation_accepted"
    QUOTATION_REJECTED = "quotation_rejected"
    PROJECT_UPDATED = "project_updated"
    PAYMENT_RECEIVED = "payment_received"


class CounterName(str, Enum):
    QUOTATION = "quotation_counter"
    PROJECT = "project_counter"
    INVOICE = "invoice_counter"
