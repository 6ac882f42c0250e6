#quoteflow/policies/rbac.py
from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Set

from quoteflow.models.enums import UserRole


@dataclass(frozen=True)
class Principal:
    user_id: str
    role: UserRole
    display_name: str


# --- Core action constants ---
ACTION_MANAGE_QUOTATIONS = "MANAGE_QUOTATIONS"
ACTION_MANAGE_PROJECTS = "MANAGE_PROJECTS"
ACTION_VIEW_RECORDS = "VIEW_RECORDS"
ACTION_VIEW_AUDIT = "VIEW_AUDIT"


def allowed_actions(role: UserRole) -> Set[str]:
    """
    Pure RBAC: which actions a role may attempt.
    """

    if role == UserRole.ADMIN:
        return {
            ACTION_MANAGE_QUOTATIONS,
            ACTION_MANAGE_PROJECTS,
            ACTION_VIEW_RECORDS,
            ACTION_VIEW_AUDIT,
        }

    if role == UserRole.STAFF:
        return {ACTION_VIEW_RECORDS}

    return set()


def is_authorized_admin(principal: Optional[Principal]) -> bool:
    return principal is not None and principal.role == UserRole.ADMIN


def require_action(principal: Principal, action: str) -> None:
    if action not in allowed_actions(principal.role):
        raise PermissionError(
            f"Role {principal.role.value} not permitted for action {action}."
        )
