# File: hearing_scribe/core/database/connection.py

from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from hearing_scribe.core.config.settings import settings
from .base import Base

IS_SQLITE = settings.DATABASE_URL.startswith("sqlite")

# SQLite (test/local mode) is shared across threads by the worker
connect_args = {"check_same_thread": False} if IS_SQLITE else {}

engine = create_engine(
    settings.DATABASE_URL,
    echo=False,
    pool_pre_ping=True,
    connect_args=connect_args
)

if IS_SQLITE:
    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        # utterances.job_id ON DELETE CASCADE is ignored by SQLite otherwise
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def get_db():
    """Yields a session and always closes it."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def register_models():
    """Imports every SQL model so string relationships resolve on the shared Base."""
    import hearing_scribe.core.jobs.models  # noqa: F401
    import hearing_scribe.features.transcription.data.sql_models  # noqa: F401


def init_db():
    """Creates all tables (idempotent)."""
    register_models()
    Base.metadata.create_all(bind=engine)
