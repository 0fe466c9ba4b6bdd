import logging
from typing import Optional

from sqlalchemy import create_engine, text
from sqlalchemy.engine import Engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from app.config import settings
from app.models import Base

logger = logging.getLogger(__name__)


def _normalize_database_url(raw_url: str) -> str:
    url = (raw_url or "").strip()
    if url.startswith("postgres://"):
        url = "postgresql://" + url[len("postgres://") :]
    if url.startswith("postgresql://") and "+psycopg" not in url:
        url = url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


DATABASE_URL = _normalize_database_url(settings.DATABASE_URL)
connect_args = {"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(DATABASE_URL, future=True, pool_pre_ping=True, connect_args=connect_args)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine, future=True)


def check_connection(bind: Optional[Engine] = None) -> bool:
    """Ping the store once. Failures are logged, never raised."""
    bind = bind or engine
    try:
        with bind.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("❌ Database connection error (%s)", bind.url.render_as_string(hide_password=True))
        return False
    logger.info("✅ Connected to database")
    return True


def init_store(bind: Optional[Engine] = None) -> bool:
    """Connect and create missing tables; migrations stay the path for schema changes."""
    bind = bind or engine
    if not check_connection(bind):
        return False
    try:
        Base.metadata.create_all(bind=bind)
    except SQLAlchemyError:
        logger.exception("❌ Could not create tables")
        return False
    return True
