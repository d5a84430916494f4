"""Database engine and session management."""

import os
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

DEFAULT_DB_PATH = Path.home() / ".wine_concierge" / "wine_concierge.db"

_engine: Engine | None = None
_session_factory: sessionmaker | None = None


def get_database_url() -> str:
    """
    Resolve the catalog database URL.

    DATABASE_URL may hold a full SQLAlchemy URL or a bare SQLite file path;
    without it the catalog lives under ~/.wine_concierge.
    """
    url = os.environ.get("DATABASE_URL", "")
    if "://" in url:
        return url

    path = Path(url) if url else DEFAULT_DB_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def get_engine() -> Engine:
    """Get or create the process-wide engine."""
    global _engine
    if _engine is None:
        url = get_database_url()
        # Enrichment runs in worker threads, off the thread that opened the connection
        connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
        _engine = create_engine(url, connect_args=connect_args)
    return _engine


@contextmanager
def get_session() -> Generator[Session, None, None]:
    """
    Open a catalog session. Callers commit; the session is always closed.

    Usage:
        with get_session() as session:
            service = get_enrichment_service(session)
    """
    global _session_factory
    if _session_factory is None:
        _session_factory = sessionmaker(autoflush=False, bind=get_engine())
    session = _session_factory()
    try:
        yield session
    finally:
        session.close()


def init_db() -> None:
    """Create the catalog tables directly, without migrations."""
    from wine_concierge.db.models import Base

    Base.metadata.create_all(bind=get_engine())


def run_migrations() -> None:
    """
    Upgrade the catalog schema to the latest Alembic revision.

    Raises:
        FileNotFoundError: If alembic.ini is not found at the project root.
    """
    alembic_ini = Path(__file__).resolve().parents[2] / "alembic.ini"
    if not alembic_ini.exists():
        raise FileNotFoundError(f"Alembic config not found: {alembic_ini}")

    config = Config(str(alembic_ini))
    config.set_main_option("script_location", str(Path(__file__).parent / "migrations"))
    config.set_main_option("sqlalchemy.url", get_database_url())
    command.upgrade(config, "head")
