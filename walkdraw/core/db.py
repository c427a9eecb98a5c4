import logging
from functools import lru_cache

from sqlalchemy import Engine
from sqlmodel import SQLModel, create_engine

from walkdraw.core.config import settings

logger = logging.getLogger(__name__)


@lru_cache
def get_engine() -> Engine:
    """Shared engine; the pool is created on first use and reused by every request."""
    uri = settings.SQLALCHEMY_DATABASE_URI
    if uri.startswith("sqlite"):
        return create_engine(uri, connect_args={"check_same_thread": False})
    return create_engine(
        uri,
        pool_pre_ping=True,
        pool_size=settings.DB_POOL_SIZE,
        max_overflow=settings.DB_MAX_OVERFLOW,
        pool_timeout=settings.DB_POOL_TIMEOUT,
        connect_args={"connect_timeout": settings.DB_CONNECT_TIMEOUT},
    )


def init_db(engine: Engine) -> None:
    # Tables must be registered on the metadata before create_all
    from walkdraw import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    logger.info("Database tables ensured on %s", engine.url.render_as_string(hide_password=True))
