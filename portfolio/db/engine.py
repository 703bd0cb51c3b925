"""
Database engine creation and schema utilities.
"""
import logging
from typing import Any
from pathlib import Path
from sqlalchemy import text
from sqlalchemy.engine import Engine, make_url
from sqlmodel import SQLModel, Session, create_engine, select, func

from portfolio.db.models import ProfileDB, LinkDB, NoteDB, LearningDB


logger = logging.getLogger(__name__)


def create_db_engine(database_url: str, connect_timeout: float = 5.0) -> Engine:
    """
    Create a SQLModel engine for the primary store.

    SQLite is supported for local development and tests; any other
    SQLAlchemy URL (Postgres in production) gets a driver connect timeout.
    """
    url = make_url(database_url)

    if url.get_backend_name() == "sqlite":
        # Ensure data directory exists for file databases
        if url.database and url.database != ":memory:":
            db_path = Path(url.database)
            if not db_path.is_absolute():
                db_path.parent.mkdir(parents=True, exist_ok=True)
        connect_args = {
            "check_same_thread": False,
            "timeout": connect_timeout,
        }
    else:
        connect_args = {"connect_timeout": int(max(connect_timeout, 1))}

    return create_engine(
        database_url,
        connect_args=connect_args,
        echo=False,
        pool_pre_ping=True,
        pool_recycle=1800,
    )


def init_db(engine: Engine, drop_all: bool = False) -> None:
    """
    Initialize database schema.

    Args:
        engine: Engine of the primary store
        drop_all: If True, drop all tables before creating (DESTRUCTIVE!)
    """
    if drop_all:
        logger.warning("Dropping all tables")
        SQLModel.metadata.drop_all(engine)

    SQLModel.metadata.create_all(engine)


def ping(engine: Engine) -> None:
    """Run a trivial query; raises if the database cannot be reached."""
    with engine.connect() as conn:
        conn.execute(text("SELECT 1"))


def count_rows(engine: Engine) -> dict[str, int]:
    """Row counts for every portfolio table."""
    with Session(engine) as session:
        return {
            "profiles": session.exec(select(func.count(ProfileDB.id))).one(),
            "links": session.exec(select(func.count(LinkDB.id))).one(),
            "notes": session.exec(select(func.count(NoteDB.id))).one(),
            "learning": session.exec(select(func.count(LearningDB.id))).one(),
        }


def check_db_health(engine: Engine) -> dict[str, Any]:
    """
    Check database connectivity and get basic stats.

    Returns:
        Dict with status and table counts
    """
    try:
        init_db(engine)
        return {
            "status": "healthy",
            "counts": count_rows(engine),
        }
    except Exception as e:
        return {
            "status": "unhealthy",
            "error": str(e),
        }
