# catalog_service/database.py (SQLITE FALLBACK)
import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from .config import CatalogConfig

logger = logging.getLogger(__name__)

# --- CONNECTION LOGIC: Prioritize DATABASE_URL, Fallback to SQLITE ---
SQLALCHEMY_DATABASE_URL = CatalogConfig.DATABASE_URL

if not SQLALCHEMY_DATABASE_URL:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./catalog.db"
    logger.warning("Using SQLite fallback database: ./catalog.db")

# connect_args is ONLY needed for SQLite multithread safety
connect_args = (
    {"check_same_thread": False} if SQLALCHEMY_DATABASE_URL.startswith("sqlite") else {}
)

engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def init_db(bind=None):
    # models must be imported so their tables are registered on Base
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)


# Dependency to get the database session (used in FastAPI routes)
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()
