from __future__ import annotations

import logging

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, sessionmaker
from sqlalchemy.pool import StaticPool

from .config import DEFAULT_FAVORITES_CONFIG, FavoritesConfig

logger = logging.getLogger(__name__)

Base = declarative_base()


def _is_in_memory_sqlite(url: str) -> bool:
    return url in ("sqlite://", "sqlite:///:memory:")


def make_engine(config: FavoritesConfig = DEFAULT_FAVORITES_CONFIG) -> Engine:
    url = config.database_url
    if _is_in_memory_sqlite(url):
        # One shared connection so every thread sees the same in-memory database
        return create_engine(
            url,
            echo=config.echo,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    if url.startswith("sqlite"):
        return create_engine(url, echo=config.echo, connect_args={"check_same_thread": False})
    return create_engine(url, echo=config.echo, pool_pre_ping=True)


def make_session_factory(engine: Engine) -> sessionmaker:
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine) -> None:
    """Create tables and check the connection. Raises when the database is unreachable."""
    from . import models  # noqa: F401 - ensure models registered

    Base.metadata.create_all(engine)
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))
    logger.info("Favorites database ready (%s)", engine.url.render_as_string(hide_password=True))
