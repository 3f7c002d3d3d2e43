import logging
import os
from pathlib import Path

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, sessionmaker
from sqlalchemy.pool import StaticPool

from lounge.config import settings

logger = logging.getLogger(__name__)


_url = make_url(settings.DATABASE_URL)
_is_sqlite = _url.get_backend_name() == "sqlite"
_is_memory = _is_sqlite and _url.database in (None, "", ":memory:")

if _is_memory:
    # One shared in-memory DB for every connection (tests, throwaway runs)
    _engine_kwargs: dict = {"connect_args": {"check_same_thread": False}, "poolclass": StaticPool}
elif _is_sqlite:
    _engine_kwargs = {"connect_args": {"check_same_thread": False}}
else:
    _engine_kwargs = {"pool_pre_ping": True}

engine = create_engine(settings.DATABASE_URL, **_engine_kwargs)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class Base(DeclarativeBase):
    pass


def init_db() -> None:
    """Create the data directory (for file-backed SQLite) and any missing tables."""
    if _is_sqlite and not _is_memory:
        parent = Path(_url.database).parent
        os.makedirs(parent, exist_ok=True)

    # Import models so they are registered on Base.metadata
    from lounge.models import message  # noqa: F401

    Base.metadata.create_all(bind=engine)
    logger.info("Message store ready: %s", _url.render_as_string(hide_password=True))
