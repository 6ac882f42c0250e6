# quoteflow/services/auth_service.py
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from quoteflow.core.security import hash_password, verify_password
from quoteflow.models.enums import UserRole
from quoteflow.models.user import User
from quoteflow.policies.rbac import Principal


def authenticate(db: Session, username: str, password: str) -> Optional[Principal]:
    user = db.execute(
        select(User).where(User.username == username, User.is_active.is_(True))
    ).scalar_one_or_none()

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return Principal(
        user_id=str(user.id),
        role=UserRole(user.role),
        display_name=user.display_name,
    )


def ensure_user(
    db: Session,
    *,
    username: str,
    password: str,
    role: UserRole = UserRole.ADMIN,
    display_name: Optional[str] = None,
) -> User:
    """
    Create the user if missing, otherwise overwrite its password/role. Caller commits.
    """
    user = db.execute(select(User).where(User.username == username)).scalar_one_or_none()
    if user is None:
        user = User(username=username, display_name=display_name or username)
        db.add(user)
    user.password_hash = hash_password(password)
    user.role = role.value
    user.is_active = True
    if display_name:
        user.display_name = display_name
    db.flush()
    return user
