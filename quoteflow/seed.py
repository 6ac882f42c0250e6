"""
Create (or reset) the first admin account.

    SEED_ADMIN_USERNAME=admin SEED_ADMIN_PASSWORD=... python -m quoteflow.seed
"""
import logging
import os

from sqlalchemy.orm import Session

from quoteflow.core.config import get_settings
from quoteflow.core.logging import configure_logging
from quoteflow.db.session import SessionLocal
from quoteflow.models.enums import UserRole
from quoteflow.services.auth_service import ensure_user

logger = logging.getLogger("quoteflow.seed")


def seed():
    username = os.getenv("SEED_ADMIN_USERNAME", "admin")
    password = os.getenv("SEED_ADMIN_PASSWORD")
    if not password:
        raise RuntimeError("SEED_ADMIN_PASSWORD environment variable not set")

    db: Session = SessionLocal()
    try:
        user = ensure_user(
            db,
            username=username,
            password=password,
            role=UserRole.ADMIN,
            display_name=os.getenv("SEED_ADMIN_DISPLAY_NAME", "Administrator"),
        )
        db.commit()
        logger.info("admin user ready username=%s id=%s", user.username, user.id)
    finally:
        db.close()


if __name__ == "__main__":
    configure_logging(get_settings())
    seed()
