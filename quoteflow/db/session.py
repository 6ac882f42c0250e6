from __future__ import annotations

from typing import Iterator

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from quoteflow.core.config import get_settings


def make_engine(url: str) -> Engine:
    options = {"pool_pre_ping": True, "future": True}
    if url.startswith("sqlite"):
        # handlers run in the threadpool; one sqlite connection may cross threads
        options["connect_args"] = {"check_same_thread": False}
    return create_engine(url, **options)


engine = make_engine(get_settings().database_url)

# expire_on_commit=False: committed rows stay readable for post-commit notifications
SessionLocal = sessionmaker(
    bind=engine,
    autoflush=False,
    expire_on_commit=False,
    future=True,
)


def get_db() -> Iterator[Session]:
    """Request-scoped session for read routes; writes go through the coordinator's own transactions."""
    with SessionLocal() as db:
        yield db
